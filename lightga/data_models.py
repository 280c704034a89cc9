"""
Data models for the lightga optimizer.

Core data structures describing the genome layout, the per-generation
population buffers, the surviving elite set and run statistics.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .errors import GenomeShapeError


@dataclass(frozen=True)
class GenomeLayout:
    """
    Shape of every genome handled by an engine.

    A genome is a flat float vector split into ``chromosome_count`` contiguous
    blocks of ``gene_count`` genes each.

    Attributes:
        chromosome_count: Number of chromosomes per genome
        gene_count: Number of genes per chromosome
    """
    chromosome_count: int
    gene_count: int

    @property
    def length(self) -> int:
        """Total number of genes in a genome."""
        return self.chromosome_count * self.gene_count

    def chromosome_slice(self, chromosome: int) -> slice:
        """
        Get the slice addressing one chromosome inside a flat genome.

        Args:
            chromosome: Chromosome index (0..chromosome_count-1)

        Returns:
            Slice covering the chromosome's genes

        Raises:
            GenomeShapeError: If the index is outside the layout
        """
        if not 0 <= chromosome < self.chromosome_count:
            raise GenomeShapeError(
                f"Chromosome index {chromosome} out of range (0..{self.chromosome_count - 1})"
            )
        start = chromosome * self.gene_count
        return slice(start, start + self.gene_count)

    def gene_index(self, chromosome: int, gene: int) -> int:
        """
        Get the flat index of one gene.

        Raises:
            GenomeShapeError: If either index is outside the layout
        """
        if not 0 <= gene < self.gene_count:
            raise GenomeShapeError(
                f"Gene index {gene} out of range (0..{self.gene_count - 1})"
            )
        return self.chromosome_slice(chromosome).start + gene

    def check_genome(self, genome: np.ndarray) -> None:
        """
        Ensure a genome buffer is long enough for this layout.

        Raises:
            GenomeShapeError: If the genome is shorter than ``length``
        """
        if len(genome) < self.length:
            raise GenomeShapeError(
                f"Genome has {len(genome)} genes, layout requires {self.length}"
            )

    def new_genome(self) -> np.ndarray:
        """Allocate a zeroed genome of the right length."""
        return np.zeros(self.length, dtype=np.float64)


@dataclass
class Population:
    """
    One generation's candidates.

    ``genomes[i]`` and ``scores[i]`` always describe the same candidate.

    Attributes:
        layout: Genome layout shared by every candidate
        size: Number of candidates
        genomes: Array of shape (size, layout.length)
        scores: Array of shape (size,)
    """
    layout: GenomeLayout
    size: int
    genomes: np.ndarray = field(init=False, repr=False)
    scores: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.genomes = np.zeros((self.size, self.layout.length), dtype=np.float64)
        self.scores = np.zeros(self.size, dtype=np.float64)

    def copy_slot(self, index: int, genome: np.ndarray, score: float) -> None:
        """Copy a genome and its score verbatim into slot ``index``."""
        self.layout.check_genome(genome)
        self.genomes[index, :] = genome[:self.layout.length]
        self.scores[index] = score

    def co_sort_into(self, target: "Population") -> np.ndarray:
        """
        Stable-sort candidates by ascending score into another buffer.

        Genomes travel with their scores, so ``target`` holds the same
        (genome, score) pairs in sorted order. Equal scores keep their
        original relative order.

        Args:
            target: Population of identical shape receiving the sorted copy

        Returns:
            The permutation that was applied
        """
        order = np.argsort(self.scores, kind="stable")
        np.take(self.genomes, order, axis=0, out=target.genomes)
        np.take(self.scores, order, out=target.scores)
        return order


class PopulationArena:
    """
    Two fixed population buffers swapped by index.

    Candidates are built in ``current``; sorting writes into the spare buffer
    which then becomes current. Nothing is reallocated between generations.
    """

    def __init__(self, layout: GenomeLayout, size: int):
        self.buffers: Tuple[Population, Population] = (
            Population(layout, size),
            Population(layout, size),
        )
        self._current = 0

    @property
    def current(self) -> Population:
        return self.buffers[self._current]

    @property
    def spare(self) -> Population:
        return self.buffers[1 - self._current]

    def sort_current(self) -> Population:
        """Co-sort the current buffer into the spare one and swap them."""
        self.current.co_sort_into(self.spare)
        self._current = 1 - self._current
        return self.current


@dataclass
class Survivors:
    """
    Elite genomes carried across generations and across run() calls.

    Index 0 is the best candidate of the last selection step. A shift
    re-scores survivors in place without re-ranking them.

    Attributes:
        layout: Genome layout
        count: Number of survivors kept
        genomes: Array of shape (count, layout.length)
        scores: Array of shape (count,)
    """
    layout: GenomeLayout
    count: int
    genomes: np.ndarray = field(init=False, repr=False)
    scores: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.genomes = np.zeros((self.count, self.layout.length), dtype=np.float64)
        self.scores = np.zeros(self.count, dtype=np.float64)

    def fill(self, genome: np.ndarray, score: float) -> None:
        """Replicate one genome and score into every survivor slot."""
        self.layout.check_genome(genome)
        self.genomes[:, :] = genome[:self.layout.length]
        self.scores[:] = score

    def take_best(self, ranked: Population, optimize_for_maximum: bool) -> None:
        """
        Replace every survivor with the best entries of a sorted population.

        Equal scores keep their order in ``ranked`` in both directions, so
        the earlier slots (the previous elites) win ties.

        Args:
            ranked: Population stable-sorted by ascending score
            optimize_for_maximum: Take from the high end instead of the low end
        """
        if optimize_for_maximum:
            indices = np.argsort(-ranked.scores, kind="stable")[:self.count]
        else:
            indices = np.arange(self.count)
        self.genomes[:, :] = ranked.genomes[indices]
        self.scores[:] = ranked.scores[indices]


@dataclass
class RunStats:
    """
    Summary of one run() call.

    Attributes:
        generations: Generations completed
        evaluations: Fitness evaluations performed (seeding and shift included)
        elapsed_ms: Wall-clock duration of the call
        timed_out: Whether the timeout ended the call
        best_fitness: Rank-0 survivor score after the call
        seeded: Whether this call seeded the survivors
        shifted: Whether this call shifted the survivors
    """
    generations: int = 0
    evaluations: int = 0
    elapsed_ms: float = 0.0
    timed_out: bool = False
    best_fitness: Optional[float] = None
    seeded: bool = False
    shifted: bool = False
