from typing import NamedTuple

import numpy as np

from ..geometry import Triangle, min_angle
from ..renderer import composite
from .degeneracy import DegeneracyFilter
from .metrics import Metric


class Evaluation(NamedTuple):
    fitness: float
    penalized: bool
    min_angle: float


class FitnessEvaluator:
    """
    Scores candidate triangles against the reference image.

    evaluate() is a pure function of (triangle, canvas pixels, reference):
    the candidate is composited onto a copy of the canvas and the metric is
    computed over the full image. Degenerate candidates skip the metric and
    receive the metric's worst value.
    """

    def __init__(self, reference: np.ndarray, metric: Metric,
                 degeneracy: DegeneracyFilter = None):
        reference = np.array(reference, dtype=np.float64)
        if reference.ndim != 3 or reference.shape[2] != 3:
            raise ValueError(f"Reference must be (H, W, 3), got {reference.shape}")
        self.reference = reference
        self.reference.flags.writeable = False
        self.metric = metric
        self.degeneracy = degeneracy or DegeneracyFilter()

    def evaluate(self, triangle: Triangle, canvas: np.ndarray) -> Evaluation:
        angle = min_angle(triangle)
        if self.degeneracy.is_degenerate(triangle):
            return Evaluation(self.metric.worst, True, angle)

        candidate = composite(canvas, triangle)
        return Evaluation(self.metric.score(candidate, self.reference), False, angle)

    def score_canvas(self, canvas: np.ndarray) -> float:
        """Score a canvas as-is, without any candidate."""
        return self.metric.score(np.asarray(canvas, dtype=np.float64), self.reference)
