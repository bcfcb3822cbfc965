import numpy as np
from skimage.metrics import peak_signal_noise_ratio as psnr
from typing import Dict, Sequence

from ..fitness import MSEMetric, SSIMMetric


class MetricsCalculator:
    """Calculate evaluation metrics between images."""

    def __init__(self, data_range: float = 255.0):
        self.data_range = data_range
        self.mse = MSEMetric()
        self.ssim = SSIMMetric(data_range=data_range)

    def calculate_metrics(self, rendered: np.ndarray, target: np.ndarray,
                          metrics: Sequence[str] = ('mse', 'ssim', 'psnr')) -> Dict[str, float]:
        """
        Calculate metrics between rendered and target images.

        Args:
            rendered: Rendered image (H, W, 3) in range [0, 255]
            target: Target image (H, W, 3) in range [0, 255]
            metrics: List of metrics to calculate

        Returns:
            Dictionary of metric values
        """
        unknown = set(metrics) - {'mse', 'ssim', 'psnr'}
        if unknown:
            raise ValueError(f"Unknown metrics: {', '.join(sorted(unknown))}")

        rendered = np.asarray(rendered, dtype=np.float64)
        target = np.asarray(target, dtype=np.float64)
        if rendered.shape != target.shape:
            raise ValueError(f"Shape mismatch: {rendered.shape} vs {target.shape}")

        results = {}

        if 'mse' in metrics:
            results['mse'] = self.mse.score(rendered, target)

        if 'ssim' in metrics:
            results['ssim'] = self.ssim.score(rendered, target)

        if 'psnr' in metrics:
            # psnr is infinite for identical images
            results['psnr'] = float(psnr(target, rendered, data_range=self.data_range))

        return results
