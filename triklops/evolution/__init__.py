from .streams import RandomStreams
from .population import Individual, Population
from .operators import crossover, mutate, breed
from .parallel import ParallelEvaluator
from .engine import EvolutionEngine, SlotResult, SlotState

__all__ = [
    'RandomStreams',
    'Individual',
    'Population',
    'crossover',
    'mutate',
    'breed',
    'ParallelEvaluator',
    'EvolutionEngine',
    'SlotResult',
    'SlotState'
]
