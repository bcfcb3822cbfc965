import time
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

import numpy as np
from omegaconf import DictConfig

from ..canvas import Canvas
from ..config import validate_config
from ..fitness import DegeneracyFilter, FitnessEvaluator, create_metric
from ..geometry import Triangle
from ..output import OutputAccumulator, SavePoint
from ..preprocess import check_reference
from .operators import breed
from .parallel import ParallelEvaluator
from .population import Individual, Population
from .streams import BREEDING, RandomStreams


class SlotState(Enum):
    SEEDING = 'seeding'
    EVALUATING = 'evaluating'
    SELECTING = 'selecting'
    BREEDING = 'breeding'
    FINALIZING = 'finalizing'


@dataclass
class SlotResult:
    """Outcome of one slot: the winning triangle and its per-generation history."""
    slot: int
    triangle: Triangle
    fitness: float
    degenerate: bool
    generation_best: List[float] = field(default_factory=list)
    penalized: List[int] = field(default_factory=list)
    elapsed: float = 0.0


class EvolutionEngine:
    """
    Places triangles one slot at a time with a generational search.

    For each slot a random population is seeded, then `num_generations`
    breeding cycles follow. Each cycle keeps the best individual unchanged
    and fills the rest with mutated crossover children of the elite pool.
    The best individual of the last generation is committed to the canvas.

    Args:
        cfg: Validated run configuration (see config.TriklopsConfig)
        reference: Reference image (image_size, image_size, 3) in [0, 255]
    """

    def __init__(self, cfg: DictConfig, reference: np.ndarray):
        validate_config(cfg)

        self.cfg = cfg
        self.image_size = cfg.image_size
        self.num_triangles = cfg.num_triangles
        self.num_generations = cfg.evolution.num_generations
        self.population_size = cfg.evolution.population_size
        self.num_selected = cfg.evolution.num_selected
        self.mutation_rate = cfg.evolution.mutation_rate
        self.save_frequency = cfg.output.save_frequency

        self.metric = create_metric(cfg.algorithm)
        self.evaluator = FitnessEvaluator(
            check_reference(reference, self.image_size),
            self.metric,
            DegeneracyFilter(cfg.evolution.degeneracy_threshold)
        )
        self.streams = RandomStreams(cfg.seed)
        self.canvas = Canvas(self.image_size, cfg.background)
        self.output = OutputAccumulator(self.image_size, cfg.background)
        self.harness = ParallelEvaluator(self.evaluator, cfg.threads)
        self.state: Optional[SlotState] = None

    @property
    def seed(self) -> int:
        """Seed in effect; equals the configured seed when one was given."""
        return self.streams.entropy

    def seed_population(self, slot: int) -> Population:
        return Population.random(self.population_size, self.image_size,
                                 self.metric, self.streams, slot)

    def select(self, population: Population) -> List[Individual]:
        return population.elite(self.num_selected)

    def breed(self, elite: List[Individual], slot: int, generation: int) -> Population:
        """Build the next generation: the best elite unchanged, then bred children."""
        individuals = [elite[0].copy()]
        for index in range(1, self.population_size):
            rng = self.streams.generator(BREEDING, slot, generation, index)
            child = breed(elite, rng, self.mutation_rate, self.image_size)
            individuals.append(Individual(child))
        return Population(individuals, self.metric)

    def run_slot(self, slot: int,
                 on_generation: Optional[Callable[[int, int, Individual], None]] = None) -> SlotResult:
        """Search for the triangle to place in `slot`. Does not touch the canvas."""
        start = time.time()
        canvas = self.canvas.pixels
        generation_best = []
        penalized = []

        self.state = SlotState.SEEDING
        population = self.seed_population(slot)
        elite = []

        for generation in range(self.num_generations + 1):
            if generation > 0:
                self.state = SlotState.BREEDING
                population = self.breed(elite, slot, generation)

            self.state = SlotState.EVALUATING
            self.harness.evaluate(population, canvas)

            self.state = SlotState.SELECTING
            elite = self.select(population)
            generation_best.append(elite[0].fitness)
            penalized.append(population.penalized_count)

            if on_generation is not None:
                on_generation(slot, generation, elite[0])

        self.state = SlotState.FINALIZING
        best = elite[0]
        if best.penalized:
            warnings.warn(f"Slot {slot}: every candidate in the final generation was degenerate; "
                          f"committing the least degenerate one (min angle {best.min_angle:.2f} deg)")

        return SlotResult(
            slot=slot,
            triangle=best.triangle,
            fitness=best.fitness,
            degenerate=best.penalized,
            generation_best=generation_best,
            penalized=penalized,
            elapsed=time.time() - start
        )

    def commit(self, result: SlotResult) -> None:
        self.canvas.commit(result.triangle)
        self.output.append(result.triangle, result.slot, result.generation_best, result.penalized)

    def is_save_point(self, slot: int) -> bool:
        if slot == self.num_triangles - 1:
            return True
        return self.save_frequency is not None and (slot + 1) % self.save_frequency == 0

    def run(self,
            on_slot: Optional[Callable[[SlotResult], None]] = None,
            on_save: Optional[Callable[[SavePoint], None]] = None,
            on_generation: Optional[Callable[[int, int, Individual], None]] = None) -> OutputAccumulator:
        """
        Run every slot in order.

        Args:
            on_slot: Called with each SlotResult after it is committed
            on_save: Called with a SavePoint at every save point
            on_generation: Called with (slot, generation, best individual)

        Returns:
            The output accumulator holding all committed triangles
        """
        for slot in range(len(self.output), self.num_triangles):
            result = self.run_slot(slot, on_generation)
            self.commit(result)

            if on_slot is not None:
                on_slot(result)

            if self.is_save_point(slot):
                save_point = self.output.save_point(
                    slot, self.canvas.snapshot(), is_final=slot == self.num_triangles - 1
                )
                if on_save is not None:
                    on_save(save_point)

        return self.output

    def close(self) -> None:
        self.harness.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
