from typing import Optional

import numpy as np

from .output import load_triangles
from .renderer import render_triangles, triangles_to_svg
from .utils import save_image


def render(triangles_path: str, output_path: str, svg_path: Optional[str] = None) -> np.ndarray:
    """
    Re-render a saved run.

    Args:
        triangles_path: JSON file written at a save point
        output_path: Path to save output PNG
        svg_path: Optional path to save SVG

    Returns:
        The rendered canvas (H, W, 3) float
    """
    print(f"Loading triangles from {triangles_path}")
    triangles, meta = load_triangles(triangles_path)
    image_size = meta['image_size']
    background = meta.get('background', [0, 0, 0])

    print(f"Rendering {len(triangles)} triangles at {image_size}x{image_size}")
    canvas = render_triangles(triangles, image_size, background)

    print(f"Saving PNG to {output_path}")
    save_image(canvas, output_path)

    if svg_path:
        print(f"Saving SVG to {svg_path}")
        with open(svg_path, 'w') as f:
            f.write(triangles_to_svg(triangles, image_size, background))

    return canvas
