"""
lightga: a minimal genetic-algorithm optimizer

Searches a fixed-shape genome space (chromosome_count blocks of gene_count
floats in [0, 1]) for the genomes that minimise or maximise a caller
supplied fitness functional, within a wall-clock budget per call.

Key Features:
- External fitness evaluation (callable or object with evaluate())
- Seedable, engine-owned random generator
- Reusable engine: survivors shift by one chromosome between calls
- Swappable variant policy (default fill, mutation law, rate schedule)

Modules:
- data_models: Genome layout, population buffers, survivors, run stats
- policies: Variant policies and rate schedules
- mutation: Chromosome generation and mutation operators
- crossover: Crossover and shift operators
- engine: The GeneticEngine and its run() loop
- config: YAML configuration loading and validation
- jump_finder: Sample fitness functional
- cli: Command-line interface
"""

__version__ = "0.1.0"

from .data_models import GenomeLayout, Population, PopulationArena, RunStats, Survivors
from .engine import GeneticEngine, create_engine, resolve_evaluator
from .errors import ConfigValidationError, EngineConfigurationError, GenomeShapeError
from .policies import (
    CLASSIC_POLICY,
    RESET_POLICY,
    ClassicSchedule,
    DefaultFill,
    EnginePolicy,
    LinearSchedule,
    MutationLaw,
    RateSchedule,
    build_policy,
    get_policy,
)

__all__ = [
    "GenomeLayout",
    "Population",
    "PopulationArena",
    "RunStats",
    "Survivors",
    "GeneticEngine",
    "create_engine",
    "resolve_evaluator",
    "ConfigValidationError",
    "EngineConfigurationError",
    "GenomeShapeError",
    "CLASSIC_POLICY",
    "RESET_POLICY",
    "ClassicSchedule",
    "DefaultFill",
    "EnginePolicy",
    "LinearSchedule",
    "MutationLaw",
    "RateSchedule",
    "build_policy",
    "get_policy",
]
