import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .geometry import Triangle
from .renderer import triangles_to_svg
from .utils.visualization import save_image


@dataclass(frozen=True)
class SavePoint:
    """What the output writer sees at a save point."""
    slot: int
    triangles: Tuple[Triangle, ...]
    snapshot: np.ndarray
    is_final: bool


class OutputAccumulator:
    """
    Append-only record of committed triangles and per-generation fitness.
    """

    def __init__(self, image_size: int, background: Sequence[int] = (0, 0, 0)):
        self.image_size = image_size
        self.background = tuple(int(c) for c in background)
        self._triangles: List[Triangle] = []
        self._history: List[Dict] = []

    def __len__(self) -> int:
        return len(self._triangles)

    @property
    def triangles(self) -> Tuple[Triangle, ...]:
        return tuple(self._triangles)

    def append(self, triangle: Triangle, slot: int, generation_best: Sequence[float],
               penalized: Sequence[int] = ()) -> None:
        if slot != len(self._triangles):
            raise ValueError(f"Expected slot {len(self._triangles)}, got {slot}")
        self._triangles.append(triangle)
        for generation, fitness in enumerate(generation_best):
            self._history.append({
                'slot': slot,
                'generation': generation,
                'best_fitness': fitness,
                'penalized': penalized[generation] if generation < len(penalized) else 0,
            })

    def save_point(self, slot: int, snapshot: np.ndarray, is_final: bool) -> SavePoint:
        return SavePoint(slot=slot, triangles=self.triangles, snapshot=snapshot, is_final=is_final)

    def history_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._history, columns=['slot', 'generation', 'best_fitness', 'penalized'])


def save_triangles(path, triangles: Sequence[Triangle], image_size: int,
                   background: Sequence[int] = (0, 0, 0), seed: Optional[int] = None,
                   algorithm: Optional[str] = None) -> None:
    """Write triangles and run metadata as JSON."""
    data = {
        'image_size': image_size,
        'background': [int(c) for c in background],
        # Unseeded runs have 128-bit entropy; keep it exact as a string
        'seed': str(seed) if seed is not None and seed > 2 ** 53 else seed,
        'algorithm': algorithm,
        'triangles': [t.to_dict() for t in triangles],
    }
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


def load_triangles(path) -> Tuple[List[Triangle], Dict]:
    """Load triangles written by save_triangles. Returns (triangles, metadata)."""
    with open(path, 'r') as f:
        data = json.load(f)
    triangles = [Triangle.from_dict(t) for t in data.pop('triangles')]
    return triangles, data


class OutputWriter:
    """Writes SVG, PNG, JSON and history CSV files at each save point."""

    def __init__(self, output_dir: str, name: str = 'output', image_size: int = 256,
                 background: Sequence[int] = (0, 0, 0), seed: Optional[int] = None,
                 algorithm: Optional[str] = None, write_svg: bool = True,
                 write_png: bool = True, write_json: bool = True):
        self.output_dir = Path(output_dir)
        self.name = name
        self.image_size = image_size
        self.background = tuple(int(c) for c in background)
        self.seed = seed
        self.algorithm = algorithm
        self.write_svg = write_svg
        self.write_png = write_png
        self.write_json = write_json

    def path(self, suffix: str) -> Path:
        return self.output_dir / f'{self.name}{suffix}'

    def write(self, save_point: SavePoint, accumulator: Optional[OutputAccumulator] = None) -> Dict[str, Path]:
        """Write (overwrite) the output files. Returns the paths written, by kind."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = {}

        if self.write_svg:
            svg_path = self.path('.svg')
            with open(svg_path, 'w') as f:
                f.write(triangles_to_svg(save_point.triangles, self.image_size, self.background))
            written['svg'] = svg_path

        if self.write_png:
            png_path = self.path('.png')
            save_image(save_point.snapshot, str(png_path))
            written['png'] = png_path

        if self.write_json:
            json_path = self.path('.json')
            save_triangles(json_path, save_point.triangles, self.image_size,
                           self.background, self.seed, self.algorithm)
            written['json'] = json_path

        if accumulator is not None:
            csv_path = self.path('_history.csv')
            accumulator.history_frame().to_csv(csv_path, index=False)
            written['history'] = csv_path

        return written
