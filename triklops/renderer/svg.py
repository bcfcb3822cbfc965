from typing import Sequence

from ..geometry import Triangle


def triangles_to_svg(triangles: Sequence[Triangle], image_size: int,
                     background: Sequence[int] = (0, 0, 0)) -> str:
    """
    Convert committed triangles to an SVG string.

    Args:
        triangles: Triangles in commit order (later ones paint over earlier ones)
        image_size: Side length of the square canvas
        background: Background RGB color

    Returns:
        SVG string
    """
    bg_r, bg_g, bg_b = (int(c) for c in background)

    svg_lines = [
        f'<svg width="{image_size}" height="{image_size}" '
        f'viewBox="0 0 {image_size} {image_size}" overflow="hidden" '
        f'xmlns="http://www.w3.org/2000/svg">',
        f'<rect x="0" y="0" width="{image_size}" height="{image_size}" '
        f'fill="rgb({bg_r},{bg_g},{bg_b})"/>'
    ]

    for triangle in triangles:
        triangle = triangle.clamped(image_size)
        (x1, y1), (x2, y2), (x3, y3) = triangle.vertices
        r, g, b = triangle.color

        svg_lines.append(
            f'<polygon points="{x1:.2f},{y1:.2f} {x2:.2f},{y2:.2f} {x3:.2f},{y3:.2f}" '
            f'fill="rgb({r},{g},{b})" fill-opacity="{triangle.alpha:.4f}"/>'
        )

    svg_lines.append('</svg>')

    return '\n'.join(svg_lines)
