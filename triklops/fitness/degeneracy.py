from typing import Optional

from ..geometry import Triangle, min_angle


class DegeneracyFilter:
    """Flags triangles whose smallest interior angle is below a threshold.

    With no threshold configured nothing is ever flagged.
    """

    def __init__(self, threshold: Optional[float] = None):
        self.threshold = threshold

    @property
    def enabled(self) -> bool:
        return self.threshold is not None

    def is_degenerate(self, triangle: Triangle) -> bool:
        if self.threshold is None:
            return False
        return min_angle(triangle) < self.threshold
