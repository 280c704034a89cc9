"""
Genetic optimisation engine.

GeneticEngine owns the surviving elite set, a two-buffer population arena and
its random generator. Callers supply a fitness functional and call run()
repeatedly; between calls the survivors are shifted by one chromosome so the
engine can re-plan online without discarding what it has learned.
"""

import logging
import sys
import time
from typing import Any, Callable, Optional, Sequence, TextIO

import numpy as np

from .crossover import crossover_chromosome, shift_chromosomes
from .data_models import GenomeLayout, PopulationArena, RunStats, Survivors
from .errors import EngineConfigurationError, GenomeShapeError
from .mutation import (
    fill_chromosome,
    generate_random_chromosome,
    mutate_chromosome as apply_mutation,
)
from .policies import CLASSIC_POLICY, DefaultFill, EnginePolicy

logger = logging.getLogger(__name__)

FitnessFunction = Callable[["GeneticEngine", np.ndarray], float]


def resolve_evaluator(fitness: Any) -> FitnessFunction:
    """
    Accept either an object with ``evaluate(engine, genome)`` or a callable.

    Raises:
        TypeError: If ``fitness`` is neither
    """
    evaluate = getattr(fitness, 'evaluate', None)
    if callable(evaluate):
        return evaluate
    if callable(fitness):
        return fitness
    raise TypeError(
        f"Fitness must be callable or provide evaluate(engine, genome), got {type(fitness).__name__}"
    )


def validate_sizes(
    population_size: int,
    survival_count: int,
    chromosome_count: int,
    gene_count: int
) -> None:
    """
    Check engine sizes before any buffer is allocated.

    Raises:
        EngineConfigurationError: If a count is not a positive integer or
            survival_count leaves no room for offspring
    """
    sizes = {
        'population_size': population_size,
        'survival_count': survival_count,
        'chromosome_count': chromosome_count,
        'gene_count': gene_count,
    }
    for name, value in sizes.items():
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise EngineConfigurationError(f"'{name}' must be a positive integer, got: {value}")

    if survival_count >= population_size:
        raise EngineConfigurationError(
            f"'survival_count' ({survival_count}) must be smaller than "
            f"'population_size' ({population_size})"
        )


class GeneticEngine:
    """
    Minimal generational GA over fixed-shape float genomes.

    The engine is single threaded. All stochastic decisions draw from
    ``self.rng`` in a fixed order, so a seeded engine and a deterministic
    fitness functional reproduce the same survivors.
    """

    def __init__(
        self,
        policy: Optional[EnginePolicy] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        """
        Create an engine. Call initialize() before anything else.

        Args:
            policy: Variant policy (defaults to the classic preset)
            rng: Random generator to use; built from ``seed`` when omitted
            seed: Seed for a new generator
            clock: Monotonic clock in seconds, used for the run timeout
        """
        self.policy = policy or CLASSIC_POLICY
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.clock = clock

        self.population_size = 0
        self.survival_count = 0
        self.generations_total = 0
        self.last_run_stats: Optional[RunStats] = None

        self._layout: Optional[GenomeLayout] = None
        self._survivors: Optional[Survivors] = None
        self._arena: Optional[PopulationArena] = None
        self._default_chromosome: Optional[np.ndarray] = None
        self._needs_seed = True

    # ------------------------------------------------------------------
    # Configuration

    def initialize(
        self,
        population_size: int,
        survival_count: int,
        chromosome_count: int,
        gene_count: int
    ) -> None:
        """
        Allocate survivors and population buffers.

        Re-initialising discards the previous survivors; the next run()
        seeds them again.

        Raises:
            EngineConfigurationError: On invalid sizes or a default template
                whose length does not match ``gene_count``
        """
        validate_sizes(population_size, survival_count, chromosome_count, gene_count)

        if self._default_chromosome is not None and len(self._default_chromosome) != gene_count:
            raise EngineConfigurationError(
                f"Default chromosome has {len(self._default_chromosome)} genes, "
                f"'gene_count' is {gene_count}"
            )

        self.population_size = int(population_size)
        self.survival_count = int(survival_count)
        self._layout = GenomeLayout(int(chromosome_count), int(gene_count))
        self._survivors = Survivors(self._layout, self.survival_count)
        self._arena = PopulationArena(self._layout, self.population_size)
        self._needs_seed = True
        self.generations_total = 0
        self.last_run_stats = None

        logger.debug(
            f"Initialized engine: population={self.population_size}, "
            f"survivors={self.survival_count}, chromosomes={chromosome_count}, "
            f"genes={gene_count}, policy={self.policy.name}"
        )

    @property
    def initialized(self) -> bool:
        return self._layout is not None

    def _require_initialized(self, operation: str) -> None:
        if self._layout is None:
            raise EngineConfigurationError(f"Engine must be initialized before {operation}()")

    @property
    def layout(self) -> GenomeLayout:
        self._require_initialized('layout')
        return self._layout

    @property
    def chromosome_count(self) -> int:
        return self._layout.chromosome_count if self._layout else 0

    @property
    def gene_count(self) -> int:
        return self._layout.gene_count if self._layout else 0

    # ------------------------------------------------------------------
    # Default chromosome template

    def set_default_chromosome(self, values: Sequence[float]) -> None:
        """
        Use a fixed gene block for every newly introduced chromosome.

        The values are copied.

        Raises:
            GenomeShapeError: If the engine is initialized and the template
                length differs from gene_count
        """
        template = np.array(values, dtype=np.float64).ravel()
        if self._layout is not None and len(template) != self._layout.gene_count:
            raise GenomeShapeError(
                f"Default chromosome has {len(template)} genes, layout requires {self._layout.gene_count}"
            )
        self._default_chromosome = template

    def clear_default_chromosome(self) -> None:
        self._default_chromosome = None

    @property
    def default_chromosome(self) -> Optional[np.ndarray]:
        if self._default_chromosome is None:
            return None
        return self._default_chromosome.copy()

    # ------------------------------------------------------------------
    # Genome and chromosome primitives

    def new_genome(self) -> np.ndarray:
        """Allocate a zeroed genome matching the engine's layout."""
        return self.layout.new_genome()

    def generate_random_chromosome(self, genome: np.ndarray, chromosome: int) -> None:
        generate_random_chromosome(genome, self.layout, chromosome, self.rng)

    def generate_default_chromosome(self, genome: np.ndarray, chromosome: int) -> None:
        """
        Fill a newly introduced chromosome.

        Uses the default template when set, otherwise the policy's default
        fill (uniform draws or all ones).
        """
        if self._default_chromosome is not None:
            fill_chromosome(genome, self.layout, chromosome, self._default_chromosome)
        elif self.policy.default_fill is DefaultFill.ONES:
            fill_chromosome(genome, self.layout, chromosome, 1.0)
        else:
            generate_random_chromosome(genome, self.layout, chromosome, self.rng)

    def generate_default_genome(self, genome: np.ndarray) -> None:
        for chromosome in range(self.layout.chromosome_count):
            self.generate_default_chromosome(genome, chromosome)

    def generate_random_genome(self, genome: np.ndarray) -> None:
        for chromosome in range(self.layout.chromosome_count):
            self.generate_random_chromosome(genome, chromosome)

    def mutate_chromosome(
        self,
        genome: np.ndarray,
        chromosome: int,
        mutate_intensity: Optional[float] = None
    ) -> None:
        """
        Mutate one chromosome with the policy's mutation law.

        Args:
            genome: Genome to modify in place
            chromosome: Chromosome index
            mutate_intensity: Overrides the policy's default intensity
        """
        if mutate_intensity is None:
            mutate_intensity = self.policy.mutation_intensity
        apply_mutation(
            genome, self.layout, chromosome, mutate_intensity, self.policy.mutation_law, self.rng
        )

    def read_gene(self, genome: np.ndarray, chromosome: int, gene: int) -> float:
        """
        Read one gene.

        Raises:
            GenomeShapeError: If the genome is too short or an index is out of range
        """
        layout = self.layout
        layout.check_genome(genome)
        return float(genome[layout.gene_index(chromosome, gene)])

    def format_genome(self, genome: np.ndarray) -> str:
        """Render a genome as parenthesised chromosome groups, e.g. ``(0.1 0.9)(1 0)``."""
        layout = self.layout
        layout.check_genome(genome)
        groups = []
        for chromosome in range(layout.chromosome_count):
            genes = genome[layout.chromosome_slice(chromosome)]
            groups.append("(" + " ".join(f"{value:.6g}" for value in genes) + ")")
        return "".join(groups)

    def print_genome(self, genome: np.ndarray, stream: Optional[TextIO] = None) -> None:
        print(self.format_genome(genome), file=stream if stream is not None else sys.stderr)

    # ------------------------------------------------------------------
    # Survivors

    @property
    def best_genome(self) -> np.ndarray:
        self._require_initialized('best_genome')
        return self._survivors.genomes[0].copy()

    @property
    def best_fitness(self) -> float:
        self._require_initialized('best_fitness')
        return float(self._survivors.scores[0])

    @property
    def best_genomes(self) -> np.ndarray:
        """All survivors, rank ordered (copy)."""
        self._require_initialized('best_genomes')
        return self._survivors.genomes.copy()

    @property
    def best_fitnesses(self) -> np.ndarray:
        self._require_initialized('best_fitnesses')
        return self._survivors.scores.copy()

    def reset_population(self) -> None:
        """
        Refill every survivor with a default genome.

        The next run() seeds the survivors again, so their scores are
        re-established before any selection happens.
        """
        self._require_initialized('reset_population')
        for genome in self._survivors.genomes:
            self.generate_default_genome(genome)
        self._needs_seed = True

    # ------------------------------------------------------------------
    # Search

    def _evaluate(self, evaluate: FitnessFunction, genome: np.ndarray) -> float:
        view = genome.view()
        view.flags.writeable = False
        return float(evaluate(self, view))

    def _seed_survivors(self, evaluate: FitnessFunction) -> None:
        genome = self.new_genome()
        self.generate_default_genome(genome)
        self._survivors.fill(genome, self._evaluate(evaluate, genome))
        self._needs_seed = False

    def _shift_survivors(self, evaluate: FitnessFunction) -> None:
        # Survivors keep their slots; the next selection step re-ranks them.
        layout = self._layout
        survivors = self._survivors
        last = layout.chromosome_count - 1
        for index in range(survivors.count):
            genome = survivors.genomes[index]
            shift_chromosomes(genome, layout)
            self.generate_default_chromosome(genome, last)
            survivors.scores[index] = self._evaluate(evaluate, genome)

    def _breed(self, candidate: np.ndarray, crossover_rate: float, mutation_rate: float) -> None:
        """
        Rebuild one candidate in place.

        The genome is regenerated from defaults, then each chromosome gets
        exactly one operator from a single draw: crossover below
        ``crossover_rate``, mutation below ``crossover_rate + mutation_rate``,
        replacement with fresh random genes otherwise.
        """
        self.generate_default_genome(candidate)
        mutation_threshold = crossover_rate + mutation_rate
        for chromosome in range(self._layout.chromosome_count):
            draw = self.rng.random()
            if draw < crossover_rate:
                crossover_chromosome(candidate, self._survivors, chromosome, self.rng)
            elif draw < mutation_threshold:
                self.mutate_chromosome(candidate, chromosome)
            else:
                self.generate_random_chromosome(candidate, chromosome)

    def run(
        self,
        fitness: Any,
        optimize_for_maximum: bool = True,
        max_generations: int = 10000,
        timeout_ms: float = 100,
        shift_on_reuse: bool = True
    ) -> int:
        """
        Evolve the survivors for up to ``max_generations`` or ``timeout_ms``.

        The first call (and the first call after initialize() or
        reset_population()) seeds every survivor with one evaluated default
        genome. Later calls shift the survivors by one chromosome when
        ``shift_on_reuse`` is set, regenerating and re-scoring them.

        Each generation copies the survivors into the population, fills the
        remaining slots with placeholder copies of random survivors, rebuilds
        and scores those slots one by one until the timeout fires, stable-sorts
        the population and keeps the best ``survival_count`` candidates.

        Args:
            fitness: Callable ``(engine, genome) -> float`` or an object with
                an ``evaluate(engine, genome)`` method. The genome is a
                read-only view valid only during the call.
            optimize_for_maximum: Keep the highest scores instead of the lowest
            max_generations: Generation bound; negative means unbounded
            timeout_ms: Wall-clock budget for the whole call, checked before
                each candidate is rebuilt
            shift_on_reuse: Shift survivors when they come from a previous call

        Returns:
            Number of generations executed

        Raises:
            EngineConfigurationError: If initialize() has not been called
            TypeError: If ``fitness`` is not usable
            Any exception raised by the fitness functional, unchanged
        """
        self._require_initialized('run')
        evaluate = resolve_evaluator(fitness)

        survivors = self._survivors
        arena = self._arena
        survival_count = self.survival_count
        population_size = self.population_size
        rng = self.rng

        stats = RunStats()
        started = self.clock()

        if self._needs_seed:
            self._seed_survivors(evaluate)
            stats.seeded = True
            stats.evaluations += 1
        elif shift_on_reuse:
            self._shift_survivors(evaluate)
            stats.shifted = True
            stats.evaluations += survival_count

        generation = 0
        timed_out = False
        while (max_generations < 0 or generation < max_generations) and not timed_out:
            crossover_rate, mutation_rate = self.policy.schedule.rates(generation)
            population = arena.current

            # Elites first, then placeholder descendants so a timeout still
            # leaves every slot valid.
            for slot in range(survival_count):
                population.copy_slot(slot, survivors.genomes[slot], survivors.scores[slot])
            for slot in range(survival_count, population_size):
                parent = int(rng.integers(survival_count))
                population.copy_slot(slot, survivors.genomes[parent], survivors.scores[parent])

            for slot in range(survival_count, population_size):
                if (self.clock() - started) * 1000.0 > timeout_ms:
                    timed_out = True
                    break
                candidate = population.genomes[slot]
                self._breed(candidate, crossover_rate, mutation_rate)
                population.scores[slot] = self._evaluate(evaluate, candidate)
                stats.evaluations += 1

            survivors.take_best(arena.sort_current(), optimize_for_maximum)
            generation += 1

            logger.debug(
                f"Generation {generation}: best={survivors.scores[0]:.6g} "
                f"crossover={crossover_rate:.3f} mutation={mutation_rate:.3f}"
                + (" (timed out)" if timed_out else "")
            )

        stats.generations = generation
        stats.timed_out = timed_out
        stats.elapsed_ms = (self.clock() - started) * 1000.0
        stats.best_fitness = float(survivors.scores[0])
        self.generations_total += generation
        self.last_run_stats = stats

        logger.info(
            f"Run finished: {generation} generations, {stats.evaluations} evaluations "
            f"in {stats.elapsed_ms:.1f} ms, best={stats.best_fitness:.6g}"
            + (", timed out" if timed_out else "")
        )
        return generation


def create_engine(
    population_size: int,
    survival_count: int,
    chromosome_count: int,
    gene_count: int,
    policy: Optional[EnginePolicy] = None,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None
) -> GeneticEngine:
    """
    Construct and initialize an engine in one call.

    Raises:
        EngineConfigurationError: On invalid sizes
    """
    engine = GeneticEngine(policy=policy, rng=rng, seed=seed)
    engine.initialize(population_size, survival_count, chromosome_count, gene_count)
    return engine
