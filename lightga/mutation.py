"""
Chromosome generation and mutation operators.

Every operator works in place on one chromosome of a flat genome and draws
its randomness from the generator it is given, in gene order.
"""

from typing import Union

import numpy as np

from .data_models import GenomeLayout
from .errors import GenomeShapeError
from .policies import MutationLaw


def generate_random_chromosome(
    genome: np.ndarray,
    layout: GenomeLayout,
    chromosome: int,
    rng: np.random.Generator
) -> None:
    """
    Fill one chromosome with independent uniform draws in [0, 1).

    Args:
        genome: Genome to modify in place
        layout: Genome layout
        chromosome: Chromosome index
        rng: Random number generator (gene_count draws)
    """
    layout.check_genome(genome)
    genome[layout.chromosome_slice(chromosome)] = rng.random(layout.gene_count)


def fill_chromosome(
    genome: np.ndarray,
    layout: GenomeLayout,
    chromosome: int,
    values: Union[float, np.ndarray]
) -> None:
    """
    Copy a template (or broadcast a constant) into one chromosome.

    Raises:
        GenomeShapeError: If a template does not hold exactly gene_count values
    """
    layout.check_genome(genome)
    if not np.isscalar(values) and len(values) != layout.gene_count:
        raise GenomeShapeError(
            f"Template has {len(values)} genes, chromosome requires {layout.gene_count}"
        )
    genome[layout.chromosome_slice(chromosome)] = values


def biased_reduction_mutation(
    genome: np.ndarray,
    layout: GenomeLayout,
    chromosome: int,
    intensity: float,
    rng: np.random.Generator
) -> None:
    """
    Perturb every gene by a skewed, bounded amount.

    For each gene a uniform draw ``r`` gives
    ``gene - intensity / 2 + intensity * (1 - r^2)``, clipped to [0, 1].
    The perturbation lies in [-intensity / 2, intensity / 2] and its
    distribution is skewed by the squared draw rather than uniform.
    """
    layout.check_genome(genome)
    genes = layout.chromosome_slice(chromosome)
    r = rng.random(layout.gene_count)
    genome[genes] = np.clip(
        genome[genes] - intensity * 0.5 + intensity * (1.0 - r * r), 0.0, 1.0
    )


def probabilistic_reset_mutation(
    genome: np.ndarray,
    layout: GenomeLayout,
    chromosome: int,
    intensity: float,
    rng: np.random.Generator
) -> None:
    """
    Replace each gene with a fresh uniform draw with probability ``intensity``.

    Each gene consumes one draw for the decision and, when replaced, a
    second draw for its new value.
    """
    layout.check_genome(genome)
    start = layout.chromosome_slice(chromosome).start
    for offset in range(layout.gene_count):
        if rng.random() < intensity:
            genome[start + offset] = rng.random()


def mutate_chromosome(
    genome: np.ndarray,
    layout: GenomeLayout,
    chromosome: int,
    intensity: float,
    law: MutationLaw,
    rng: np.random.Generator
) -> None:
    """
    Apply the selected mutation law to one chromosome.

    Args:
        genome: Genome to modify in place
        layout: Genome layout
        chromosome: Chromosome index
        intensity: Perturbation size (biased reduction) or per-gene reset
            probability (probabilistic reset)
        law: Mutation law
        rng: Random number generator
    """
    if law is MutationLaw.BIASED_REDUCTION:
        biased_reduction_mutation(genome, layout, chromosome, intensity, rng)
    elif law is MutationLaw.PROBABILISTIC_RESET:
        probabilistic_reset_mutation(genome, layout, chromosome, intensity, rng)
    else:
        raise ValueError(f"Unknown mutation law: {law}")
