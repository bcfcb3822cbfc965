import numpy as np
from skimage.metrics import structural_similarity as ssim


class Metric:
    """
    Base class for fitness metrics.

    A metric scores a candidate canvas against the reference image and knows
    its own direction, so callers compare scores through is_better() and
    sort_key() instead of checking which metric is active.
    """

    name = 'metric'
    higher_is_better = False

    @property
    def worst(self) -> float:
        return float('-inf') if self.higher_is_better else float('inf')

    def score(self, candidate: np.ndarray, reference: np.ndarray) -> float:
        raise NotImplementedError

    def sort_key(self, value: float) -> float:
        """Key for ascending sorts where better values come first."""
        return -value if self.higher_is_better else value

    def is_better(self, a: float, b: float) -> bool:
        """True if a is strictly better than b."""
        return self.sort_key(a) < self.sort_key(b)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class MSEMetric(Metric):
    """Mean of squared per-channel differences over the whole image. Lower is better."""

    name = 'mse'
    higher_is_better = False

    def score(self, candidate: np.ndarray, reference: np.ndarray) -> float:
        diff = candidate - reference
        return float(np.mean(diff * diff))


class SSIMMetric(Metric):
    """Windowed structural similarity over the whole image. Higher is better."""

    name = 'ssim'
    higher_is_better = True

    def __init__(self, data_range: float = 255.0):
        self.data_range = data_range

    def score(self, candidate: np.ndarray, reference: np.ndarray) -> float:
        return float(ssim(reference, candidate, channel_axis=2, data_range=self.data_range))


METRICS = {
    'mse': MSEMetric,
    'ssim': SSIMMetric,
}


def create_metric(name: str) -> Metric:
    """Create a metric by name."""
    try:
        return METRICS[name]()
    except KeyError:
        raise ValueError(f"Unknown metric: {name}") from None
