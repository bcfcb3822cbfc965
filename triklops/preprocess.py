from typing import Tuple
import warnings

import numpy as np
from PIL import Image, UnidentifiedImageError


class ReferenceImageError(ValueError):
    """Raised when the reference image cannot be loaded or has the wrong shape."""


def resize_with_padding(image: Image.Image, target_size: int, fill_color: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Resize image maintaining aspect ratio with padding."""
    # Calculate new dimensions
    w, h = image.size
    aspect = w / h

    if aspect > 1:
        new_w = target_size
        new_h = max(1, int(target_size / aspect))
    else:
        new_h = target_size
        new_w = max(1, int(target_size * aspect))

    # Resize image
    image = image.resize((new_w, new_h), Image.Resampling.LANCZOS)

    # Create new image with padding
    padded = Image.new('RGB', (target_size, target_size), fill_color)

    # Calculate position to paste
    x = (target_size - new_w) // 2
    y = (target_size - new_h) // 2

    padded.paste(image, (x, y))

    return padded


def resize_exact(image: Image.Image, target_size: int) -> Image.Image:
    """Stretch image to a square, ignoring aspect ratio."""
    w, h = image.size
    if max(w, h) > 2 * min(w, h):
        warnings.warn(f"Stretching a {w}x{h} image to {target_size}x{target_size} "
                      f"distorts it heavily; consider reference.resize_mode=pad")
    return image.resize((target_size, target_size), Image.Resampling.LANCZOS)


def load_reference_image(image_path: str, target_size: int, resize_mode: str = 'stretch',
                         pad_color: Tuple[int, int, int] = (255, 255, 255)) -> np.ndarray:
    """
    Load a reference image as a (target_size, target_size, 3) float64 array in [0, 255].

    Args:
        image_path: Path to any image Pillow can read
        target_size: Side length of the square output
        resize_mode: 'stretch' to resize exactly, 'pad' to keep aspect ratio
        pad_color: Fill color for 'pad' mode
    """
    try:
        with Image.open(image_path) as img:
            image = img.convert('RGB')
    except (FileNotFoundError, UnidentifiedImageError) as e:
        raise ReferenceImageError(f"Cannot load reference image {image_path}: {e}") from e

    if resize_mode == 'pad':
        image = resize_with_padding(image, target_size, tuple(pad_color))
    elif resize_mode == 'stretch':
        image = resize_exact(image, target_size)
    else:
        raise ValueError(f"Unknown resize mode: {resize_mode}")

    return np.asarray(image, dtype=np.float64)


def check_reference(reference: np.ndarray, image_size: int) -> np.ndarray:
    """Validate a decoded reference buffer against the configured canvas size."""
    reference = np.asarray(reference)
    expected = (image_size, image_size, 3)
    if reference.shape != expected:
        raise ReferenceImageError(f"Reference image must have shape {expected}, got {reference.shape}")
    if reference.min() < 0 or reference.max() > 255:
        raise ReferenceImageError("Reference pixel values must be in [0, 255]")
    return reference
