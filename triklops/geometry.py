import math
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np


Point = Tuple[float, float]

# x0, y0, x1, y1, x2, y2, r, g, b, alpha
NUM_GENES = 10
COORD_GENES = range(0, 6)
COLOR_GENES = range(6, 9)
ALPHA_GENE = 9


@dataclass(frozen=True)
class Triangle:
    """
    A flat-colored, alpha-blended triangle.

    Attributes:
        vertices: Three (x, y) points in pixel coordinates
        color: RGB color, each channel in [0, 255]
        alpha: Coverage in [0, 1]
    """
    vertices: Tuple[Point, Point, Point]
    color: Tuple[int, int, int]
    alpha: float = 1.0

    @property
    def genes(self) -> Tuple[float, ...]:
        """Flat gene tuple in crossover/mutation order."""
        (x0, y0), (x1, y1), (x2, y2) = self.vertices
        r, g, b = self.color
        return (x0, y0, x1, y1, x2, y2, r, g, b, self.alpha)

    @classmethod
    def from_genes(cls, genes) -> 'Triangle':
        genes = tuple(genes)
        if len(genes) != NUM_GENES:
            raise ValueError(f"Expected {NUM_GENES} genes, got {len(genes)}")
        x0, y0, x1, y1, x2, y2, r, g, b, alpha = genes
        return cls(
            vertices=((float(x0), float(y0)), (float(x1), float(y1)), (float(x2), float(y2))),
            color=(int(r), int(g), int(b)),
            alpha=float(alpha),
        )

    def clamped(self, image_size: int) -> 'Triangle':
        """Return a copy with vertices clamped to [0, image_size)."""
        upper = math.nextafter(float(image_size), 0.0)
        vertices = tuple(
            (min(max(x, 0.0), upper), min(max(y, 0.0), upper)) for x, y in self.vertices
        )
        color = tuple(min(max(int(c), 0), 255) for c in self.color)
        alpha = min(max(self.alpha, 0.0), 1.0)
        return Triangle(vertices=vertices, color=color, alpha=alpha)

    def to_dict(self) -> Dict:
        return {
            'vertices': [list(v) for v in self.vertices],
            'color': list(self.color),
            'alpha': self.alpha,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Triangle':
        return cls(
            vertices=tuple((float(x), float(y)) for x, y in data['vertices']),
            color=tuple(int(c) for c in data['color']),
            alpha=float(data.get('alpha', 1.0)),
        )


def interior_angles(triangle: Triangle) -> Tuple[float, float, float]:
    """
    Compute the three interior angles of a triangle in degrees.

    Angles are taken from the law of cosines on the side lengths, so vertex
    order does not matter. A triangle with coincident vertices has no defined
    angles and is reported as (0, 0, 180).

    Returns:
        Angles at vertex 0, 1 and 2
    """
    (ax, ay), (bx, by), (cx, cy) = triangle.vertices

    # Squared side lengths opposite each vertex
    a2 = (bx - cx) ** 2 + (by - cy) ** 2
    b2 = (ax - cx) ** 2 + (ay - cy) ** 2
    c2 = (ax - bx) ** 2 + (ay - by) ** 2

    if a2 == 0.0 or b2 == 0.0 or c2 == 0.0:
        return (0.0, 0.0, 180.0)

    def angle(opposite2, side1_2, side2_2):
        cos = (side1_2 + side2_2 - opposite2) / (2.0 * math.sqrt(side1_2 * side2_2))
        return math.degrees(math.acos(min(1.0, max(-1.0, cos))))

    return (angle(a2, b2, c2), angle(b2, a2, c2), angle(c2, a2, b2))


def min_angle(triangle: Triangle) -> float:
    return min(interior_angles(triangle))


def blend(base: np.ndarray, color, alpha: float) -> np.ndarray:
    """Alpha-blend a flat color over base pixels (..., 3) in [0, 255]."""
    rgb = np.asarray(color, dtype=np.float64)
    return base * (1.0 - alpha) + rgb * alpha


def random_triangle(rng: np.random.Generator, image_size: int) -> Triangle:
    """Sample a triangle with uniform vertices, color and alpha.

    The draw order is fixed (six coordinates, three channels, alpha) so a
    given generator state always produces the same triangle.
    """
    coords = rng.uniform(0.0, image_size, size=6)
    color = rng.integers(0, 256, size=3)
    alpha = rng.uniform(0.0, 1.0)
    return Triangle.from_genes((*coords, *color, alpha))
