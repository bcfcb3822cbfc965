import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import numpy as np

from ..fitness import FitnessEvaluator
from .population import Individual, Population


def default_thread_count() -> int:
    return os.cpu_count() or 1


def partition(items: List, parts: int) -> List[List]:
    """Split items into at most `parts` contiguous, disjoint, non-empty chunks."""
    parts = max(1, min(parts, len(items)))
    size, extra = divmod(len(items), parts)
    chunks = []
    start = 0
    for i in range(parts):
        end = start + size + (1 if i < extra else 0)
        chunks.append(items[start:end])
        start = end
    return [chunk for chunk in chunks if chunk]


class ParallelEvaluator:
    """
    Scores a whole population on a fixed-size thread pool.

    Unevaluated individuals are split into disjoint chunks, one per worker,
    and every worker writes only to the individuals in its own chunk. All
    workers share the same read-only canvas and reference. evaluate()
    returns once every chunk is done, so results do not depend on the
    thread count.
    """

    def __init__(self, evaluator: FitnessEvaluator, threads: Optional[int] = None):
        self.evaluator = evaluator
        self.threads = threads or default_thread_count()
        self._executor = None
        if self.threads > 1:
            self._executor = ThreadPoolExecutor(max_workers=self.threads,
                                                thread_name_prefix='triklops-eval')

    def _evaluate_chunk(self, chunk: List[Individual], canvas: np.ndarray) -> int:
        for individual in chunk:
            individual.assign(self.evaluator.evaluate(individual.triangle, canvas))
        return len(chunk)

    def evaluate(self, population: Population, canvas: np.ndarray) -> Population:
        pending = [ind for ind in population if not ind.evaluated]
        if not pending:
            return population

        if self._executor is None or len(pending) == 1:
            self._evaluate_chunk(pending, canvas)
            return population

        futures = [
            self._executor.submit(self._evaluate_chunk, chunk, canvas)
            for chunk in partition(pending, self.threads)
        ]
        # Barrier: re-raises the first worker failure
        for future in futures:
            future.result()
        return population

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
