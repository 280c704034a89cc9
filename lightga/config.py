"""
Configuration loading for lightga.

Loads YAML run configurations, validates them and converts them into
engine and run settings.

Example configuration:

    engine:
      population: 50
      survival_count: 2
      chromosome_count: 5
      gene_count: 2
    policy:
      name: classic
    run:
      optimize_for_maximum: false
      max_generations: 10000
      timeout_ms: 100
      shift_on_reuse: true
      repeat: 1
    random_seed: 0
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .engine import GeneticEngine, create_engine
from .errors import ConfigValidationError
from .policies import CLASSIC_POLICY, EnginePolicy, build_policy


ENGINE_FIELDS = ['population', 'survival_count', 'chromosome_count', 'gene_count']


@dataclass
class EngineSettings:
    """
    Everything needed to build an initialized engine.

    Attributes:
        population: Candidates per generation
        survival_count: Elite carried between generations
        chromosome_count: Chromosomes per genome
        gene_count: Genes per chromosome
        policy: Variant policy
        random_seed: Seed for the engine's generator (None = entropy)
    """
    population: int
    survival_count: int
    chromosome_count: int
    gene_count: int
    policy: EnginePolicy = CLASSIC_POLICY
    random_seed: Optional[int] = None


@dataclass
class RunSettings:
    """Arguments for GeneticEngine.run() plus the number of calls to make."""
    optimize_for_maximum: bool = True
    max_generations: int = 10000
    timeout_ms: float = 100
    shift_on_reuse: bool = True
    repeat: int = 1


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigValidationError: If the YAML is invalid or empty
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration must be a mapping at the top level")

    return config


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure.

    Args:
        config: Configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if 'engine' not in config:
        raise ConfigValidationError("Missing required field: 'engine'")

    engine_config = config['engine']
    if not isinstance(engine_config, dict):
        raise ConfigValidationError("'engine' must be a dictionary")

    for name in ENGINE_FIELDS:
        if name not in engine_config:
            raise ConfigValidationError(f"Missing required field: 'engine.{name}'")
        value = engine_config[name]
        if not _is_int(value) or value <= 0:
            raise ConfigValidationError(
                f"'engine.{name}' must be a positive integer, got: {value}"
            )

    if engine_config['survival_count'] >= engine_config['population']:
        raise ConfigValidationError(
            f"'engine.survival_count' ({engine_config['survival_count']}) must be smaller "
            f"than 'engine.population' ({engine_config['population']})"
        )

    if 'policy' in config and config['policy'] is not None:
        # Raises on unknown names and bad overrides
        build_policy(config['policy'])

    if 'run' in config and config['run'] is not None:
        _validate_run_section(config['run'])

    seed = config.get('random_seed')
    if seed is not None and (not _is_int(seed) or seed < 0):
        raise ConfigValidationError(f"'random_seed' must be a non-negative integer, got: {seed}")


def _validate_run_section(run_config: Any) -> None:
    if not isinstance(run_config, dict):
        raise ConfigValidationError("'run' must be a dictionary")

    for name in ['optimize_for_maximum', 'shift_on_reuse']:
        if name in run_config and not isinstance(run_config[name], bool):
            raise ConfigValidationError(f"'run.{name}' must be a boolean, got: {run_config[name]}")

    if 'max_generations' in run_config and not _is_int(run_config['max_generations']):
        raise ConfigValidationError(
            f"'run.max_generations' must be an integer, got: {run_config['max_generations']}"
        )

    if 'timeout_ms' in run_config:
        timeout = run_config['timeout_ms']
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            raise ConfigValidationError(
                f"'run.timeout_ms' must be a non-negative number, got: {timeout}"
            )

    if 'repeat' in run_config:
        repeat = run_config['repeat']
        if not _is_int(repeat) or repeat <= 0:
            raise ConfigValidationError(f"'run.repeat' must be a positive integer, got: {repeat}")


def settings_from_config(config: Dict[str, Any]) -> Tuple[EngineSettings, RunSettings]:
    """
    Convert a validated configuration into engine and run settings.

    Missing optional values fall back to the RunSettings defaults.
    """
    validate_config(config)

    engine_config = config['engine']
    engine_settings = EngineSettings(
        population=engine_config['population'],
        survival_count=engine_config['survival_count'],
        chromosome_count=engine_config['chromosome_count'],
        gene_count=engine_config['gene_count'],
        policy=build_policy(config.get('policy')),
        random_seed=config.get('random_seed'),
    )

    run_config = config.get('run') or {}
    defaults = RunSettings()
    run_settings = RunSettings(
        optimize_for_maximum=run_config.get('optimize_for_maximum', defaults.optimize_for_maximum),
        max_generations=run_config.get('max_generations', defaults.max_generations),
        timeout_ms=run_config.get('timeout_ms', defaults.timeout_ms),
        shift_on_reuse=run_config.get('shift_on_reuse', defaults.shift_on_reuse),
        repeat=run_config.get('repeat', defaults.repeat),
    )

    return engine_settings, run_settings


def create_engine_from_settings(settings: EngineSettings) -> GeneticEngine:
    """Build an initialized engine from engine settings."""
    return create_engine(
        settings.population,
        settings.survival_count,
        settings.chromosome_count,
        settings.gene_count,
        policy=settings.policy,
        seed=settings.random_seed,
    )


def create_engine_from_config(config_path: Union[str, Path]) -> Tuple[GeneticEngine, RunSettings]:
    """
    Load a YAML file and build the engine it describes.

    Returns:
        Tuple of (engine, run_settings)
    """
    engine_settings, run_settings = settings_from_config(load_config(config_path))
    return create_engine_from_settings(engine_settings), run_settings
