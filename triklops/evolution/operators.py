from typing import Sequence, Tuple

import numpy as np

from ..geometry import NUM_GENES, Triangle, random_triangle


def crossover(parent1: Triangle, parent2: Triangle, rng: np.random.Generator) -> Tuple[float, ...]:
    """Uniform crossover: each gene comes from either parent with equal probability."""
    coin = rng.random(NUM_GENES) < 0.5
    genes1, genes2 = parent1.genes, parent2.genes
    return tuple(g1 if take_first else g2 for g1, g2, take_first in zip(genes1, genes2, coin))


def mutate(genes: Sequence[float], rng: np.random.Generator,
           mutation_rate: float, image_size: int) -> Tuple[float, ...]:
    """
    Re-roll each gene with probability mutation_rate.

    A mutated gene is replaced by a fresh sample from its full domain, not
    nudged. A full replacement triangle is always drawn, so the number of
    draws taken from rng does not depend on which genes mutate.
    """
    mask = rng.random(NUM_GENES) < mutation_rate
    fresh = random_triangle(rng, image_size).genes
    return tuple(new if flip else old for old, new, flip in zip(genes, fresh, mask))


def breed(elite: Sequence, rng: np.random.Generator,
          mutation_rate: float, image_size: int) -> Triangle:
    """Pick two parents uniformly from the elite pool and produce one mutated child."""
    parent1 = elite[int(rng.integers(len(elite)))]
    parent2 = elite[int(rng.integers(len(elite)))]
    child = crossover(parent1.triangle, parent2.triangle, rng)
    return Triangle.from_genes(mutate(child, rng, mutation_rate, image_size))
