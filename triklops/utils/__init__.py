from .metrics import MetricsCalculator
from .visualization import array_to_image, save_image, create_comparison_grid

__all__ = [
    'MetricsCalculator',
    'array_to_image',
    'save_image',
    'create_comparison_grid'
]
