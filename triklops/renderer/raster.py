import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..geometry import Triangle, blend


def new_canvas(image_size: int, background: Sequence[int] = (0, 0, 0)) -> np.ndarray:
    """Create a (H, W, 3) float64 pixel buffer filled with the background color."""
    buffer = np.empty((image_size, image_size, 3), dtype=np.float64)
    buffer[...] = np.asarray(background, dtype=np.float64)
    return buffer


def bounding_box(triangle: Triangle, image_size: int) -> Tuple[int, int, int, int]:
    """Pixel bounding box (x_min, y_min, x_max, y_max), max exclusive."""
    xs = [v[0] for v in triangle.vertices]
    ys = [v[1] for v in triangle.vertices]
    x_min = max(int(math.floor(min(xs))), 0)
    y_min = max(int(math.floor(min(ys))), 0)
    x_max = min(int(math.ceil(max(xs))) + 1, image_size)
    y_max = min(int(math.ceil(max(ys))) + 1, image_size)
    return x_min, y_min, x_max, y_max


def coverage_mask(triangle: Triangle, image_size: int) -> Tuple[Optional[np.ndarray], Tuple[int, int, int, int]]:
    """
    Compute which pixels inside the bounding box the triangle covers.

    A pixel is covered when its center lies inside the triangle or on one of
    its edges. The edge functions are normalized by the signed area, so the
    test does not depend on winding order.

    Args:
        triangle: Triangle with vertices already clamped to the canvas
        image_size: Canvas side length

    Returns:
        (mask, box) where mask is a boolean (h, w) array for box, or None if
        the triangle has zero area or an empty box
    """
    box = bounding_box(triangle, image_size)
    x_min, y_min, x_max, y_max = box
    if x_max <= x_min or y_max <= y_min:
        return None, box

    (x0, y0), (x1, y1), (x2, y2) = triangle.vertices
    area = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
    if area == 0.0:
        return None, box

    px = np.arange(x_min, x_max, dtype=np.float64)[None, :] + 0.5
    py = np.arange(y_min, y_max, dtype=np.float64)[:, None] + 0.5

    # Edge functions, one per edge, all positive inside after dividing by area
    w0 = ((x2 - x1) * (py - y1) - (y2 - y1) * (px - x1)) / area
    w1 = ((x0 - x2) * (py - y2) - (y0 - y2) * (px - x2)) / area
    w2 = ((x1 - x0) * (py - y0) - (y1 - y0) * (px - x0)) / area

    mask = (w0 >= 0.0) & (w1 >= 0.0) & (w2 >= 0.0)
    if not mask.any():
        return None, box
    return mask, box


def draw_triangle(buffer: np.ndarray, triangle: Triangle) -> np.ndarray:
    """Blend a triangle into buffer in place and return it."""
    image_size = buffer.shape[0]
    triangle = triangle.clamped(image_size)
    mask, (x_min, y_min, x_max, y_max) = coverage_mask(triangle, image_size)
    if mask is None:
        return buffer

    region = buffer[y_min:y_max, x_min:x_max]
    region[mask] = blend(region[mask], triangle.color, triangle.alpha)
    return buffer


def composite(base: np.ndarray, triangle: Triangle) -> np.ndarray:
    """Return a new buffer with triangle blended over base. base is not modified."""
    return draw_triangle(base.copy(), triangle)


def render_triangles(triangles: Iterable[Triangle], image_size: int,
                     background: Sequence[int] = (0, 0, 0)) -> np.ndarray:
    """Render a sequence of triangles, in order, onto a fresh canvas."""
    buffer = new_canvas(image_size, background)
    for triangle in triangles:
        draw_triangle(buffer, triangle)
    return buffer


def to_uint8(buffer: np.ndarray) -> np.ndarray:
    """Round a float pixel buffer to uint8 for raster export."""
    return np.clip(np.rint(buffer), 0, 255).astype(np.uint8)
