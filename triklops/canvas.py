from typing import Sequence

import numpy as np

from .geometry import Triangle
from .renderer import new_canvas, composite, draw_triangle, to_uint8


class Canvas:
    """
    Accumulating pixel buffer for the image built so far.

    The buffer only changes through commit(). Candidates are scored against
    composite(), which always works on a copy, so a Canvas can be shared
    read-only between evaluation workers.
    """

    def __init__(self, image_size: int, background: Sequence[int] = (0, 0, 0)):
        self.image_size = image_size
        self.background = tuple(int(c) for c in background)
        self._pixels = new_canvas(image_size, self.background)
        self._pixels.flags.writeable = False
        self.num_committed = 0

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the current buffer."""
        return self._pixels

    def composite(self, triangle: Triangle) -> np.ndarray:
        """Return a new buffer with triangle blended over the canvas."""
        return composite(self._pixels, triangle)

    def commit(self, triangle: Triangle) -> None:
        """Blend triangle into the canvas. The only in-place mutation.

        The new buffer replaces the old one only once drawing has finished.
        """
        pixels = self._pixels.copy()
        draw_triangle(pixels, triangle)
        pixels.flags.writeable = False
        self._pixels = pixels
        self.num_committed += 1

    def snapshot(self) -> np.ndarray:
        """Read-only copy of the current buffer."""
        snap = self._pixels.copy()
        snap.flags.writeable = False
        return snap

    def to_uint8(self) -> np.ndarray:
        return to_uint8(self._pixels)
