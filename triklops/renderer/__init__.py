from .raster import (
    new_canvas, coverage_mask, draw_triangle, composite, render_triangles, to_uint8
)
from .svg import triangles_to_svg

__all__ = [
    'new_canvas',
    'coverage_mask',
    'draw_triangle',
    'composite',
    'render_triangles',
    'to_uint8',
    'triangles_to_svg'
]
