import json
from pathlib import Path
from typing import Dict, List

import numpy as np
from omegaconf import DictConfig
from PIL import Image, UnidentifiedImageError

from .preprocess import ReferenceImageError, load_reference_image
from .utils import MetricsCalculator


def load_rendered_image(path: str) -> np.ndarray:
    try:
        with Image.open(path) as img:
            return np.asarray(img.convert('RGB'), dtype=np.float64)
    except (FileNotFoundError, UnidentifiedImageError) as e:
        raise ReferenceImageError(f"Cannot load rendered image {path}: {e}") from e


def evaluate(rendered_path: str, reference_path: str, metrics: List[str],
             cfg: DictConfig) -> Dict[str, float]:
    """
    Compare a rendered approximation against its reference image.

    The reference goes through the same loader and resize mode as a run,
    at the rendered image's own size.

    Args:
        rendered_path: Rendered PNG written by a run
        reference_path: Original reference image
        metrics: Metrics to compute ('mse', 'ssim', 'psnr')
        cfg: Configuration object

    Returns:
        Dictionary of metric values
    """
    print(f"Evaluating: {rendered_path}")
    print(f"Reference: {reference_path}")
    print(f"Metrics: {metrics}")

    rendered = load_rendered_image(rendered_path)
    height, width = rendered.shape[:2]
    if height != width:
        raise ReferenceImageError(f"Rendered image must be square, got {width}x{height}")

    reference = load_reference_image(
        reference_path, width,
        resize_mode=cfg.reference.resize_mode,
        pad_color=tuple(cfg.reference.pad_color)
    )

    results = MetricsCalculator().calculate_metrics(rendered, reference, metrics)

    print("\nEvaluation Results:")
    for metric, value in results.items():
        print(f"{metric.upper()}: {value:.4f}")

    output_file = Path(cfg.output.output_dir) / 'evaluation_results.json'
    with open(output_file, 'w') as f:
        json.dump({'rendered': str(rendered_path), 'reference': str(reference_path), **results}, f, indent=2)

    print(f"\nResults saved to: {output_file}")

    return results
