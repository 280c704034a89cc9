"""
Crossover and shift operators.

Crossover copies one chromosome verbatim from a surviving parent; the shift
operator slides a genome's chromosomes down by one slot so the oldest
decision is dropped and the last slot is free for a new one.
"""

import numpy as np

from .data_models import GenomeLayout, Survivors


def crossover_chromosome(
    child: np.ndarray,
    survivors: Survivors,
    chromosome: int,
    rng: np.random.Generator
) -> int:
    """
    Copy one chromosome from a uniformly chosen survivor into a child.

    Args:
        child: Genome receiving the chromosome
        survivors: Parent pool
        chromosome: Chromosome index to copy
        rng: Random number generator (one draw for the parent)

    Returns:
        Index of the parent survivor that was used
    """
    layout = survivors.layout
    layout.check_genome(child)
    genes = layout.chromosome_slice(chromosome)
    parent = int(rng.integers(survivors.count))
    child[genes] = survivors.genomes[parent, genes]
    return parent


def shift_chromosomes(genome: np.ndarray, layout: GenomeLayout) -> None:
    """
    Move chromosome c+1 into slot c for every c < chromosome_count - 1.

    The last chromosome keeps its old values; callers regenerate it.
    """
    layout.check_genome(genome)
    if layout.chromosome_count < 2:
        return
    gene_count = layout.gene_count
    genome[:layout.length - gene_count] = genome[gene_count:layout.length].copy()
