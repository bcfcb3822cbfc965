import io
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image


def array_to_image(array: np.ndarray) -> np.ndarray:
    """
    Convert a pixel buffer to a displayable uint8 image.

    Args:
        array: Image array (H, W, 3), float in [0, 255] or uint8

    Returns:
        Numpy array (H, W, 3) uint8
    """
    if array.dtype == np.uint8:
        return array
    return np.clip(np.rint(array), 0, 255).astype(np.uint8)


def save_image(array: np.ndarray, path: str) -> None:
    """Save pixel buffer as image file."""
    img = Image.fromarray(array_to_image(array), mode='RGB')
    img.save(path)


def create_comparison_grid(reference: np.ndarray,
                           rendered: np.ndarray,
                           titles: Optional[List[str]] = None) -> np.ndarray:
    """
    Create a side-by-side comparison of reference and rendered images.

    Args:
        reference: Reference image (H, W, 3)
        rendered: Rendered image (H, W, 3)
        titles: Optional titles for the two panels

    Returns:
        Grid image as numpy array
    """
    if titles is None:
        titles = ['Reference', 'Rendered']

    fig, axes = plt.subplots(1, 2, figsize=(10, 5))

    for ax, image, title in zip(axes, (reference, rendered), titles):
        ax.imshow(array_to_image(image))
        ax.set_title(title)
        ax.axis('off')

    plt.tight_layout()

    # Convert figure to numpy array
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100, bbox_inches='tight')
    buf.seek(0)
    img_array = np.array(Image.open(buf).convert('RGB'))
    plt.close(fig)

    return img_array
