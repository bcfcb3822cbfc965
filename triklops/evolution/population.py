import dataclasses
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from ..fitness import Evaluation, Metric
from ..geometry import Triangle, random_triangle
from .streams import RandomStreams, SEEDING


@dataclass
class Individual:
    """A candidate triangle plus its cached fitness."""
    triangle: Triangle
    fitness: Optional[float] = None
    penalized: bool = False
    min_angle: float = 0.0

    @property
    def evaluated(self) -> bool:
        return self.fitness is not None

    def assign(self, evaluation: Evaluation) -> None:
        self.fitness = evaluation.fitness
        self.penalized = evaluation.penalized
        self.min_angle = evaluation.min_angle

    def copy(self) -> 'Individual':
        return dataclasses.replace(self)


class Population:
    """
    One generation of individuals within a slot.

    Holds storage and ranking only. Ranking is stable: non-penalized
    individuals come first, ordered by the metric; penalized ones follow,
    least degenerate (largest minimum angle) first; ties keep insertion order.
    """

    def __init__(self, individuals: Sequence[Individual], metric: Metric):
        self.individuals = list(individuals)
        self.metric = metric

    @classmethod
    def random(cls, size: int, image_size: int, metric: Metric,
               streams: RandomStreams, slot: int) -> 'Population':
        """Generation 0: uniformly random triangles, one keyed stream per index."""
        individuals = [
            Individual(random_triangle(streams.generator(SEEDING, slot, 0, index), image_size))
            for index in range(size)
        ]
        return cls(individuals, metric)

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    def __getitem__(self, index: int) -> Individual:
        return self.individuals[index]

    def rank_key(self, individual: Individual):
        if individual.penalized:
            return (1, 0.0, -individual.min_angle)
        return (0, self.metric.sort_key(individual.fitness), 0.0)

    def ranked(self) -> List[Individual]:
        unevaluated = sum(1 for ind in self.individuals if not ind.evaluated)
        if unevaluated:
            raise ValueError(f"{unevaluated} individuals have not been evaluated")
        return sorted(self.individuals, key=self.rank_key)

    def best(self) -> Individual:
        return self.ranked()[0]

    def elite(self, num_selected: int) -> List[Individual]:
        return self.ranked()[:num_selected]

    @property
    def penalized_count(self) -> int:
        return sum(1 for ind in self.individuals if ind.penalized)
