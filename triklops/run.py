import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
import wandb
from omegaconf import DictConfig, OmegaConf
from tqdm import tqdm

from .config import validate_config
from .evolution import EvolutionEngine, SlotResult
from .geometry import Triangle
from .output import OutputWriter, SavePoint
from .preprocess import load_reference_image
from .utils import MetricsCalculator, array_to_image, create_comparison_grid


@dataclass
class RunResult:
    triangles: List[Triangle]
    canvas: np.ndarray
    seed: int
    history: pd.DataFrame


def run(cfg: DictConfig, reference_path: Optional[str] = None,
        reference: Optional[np.ndarray] = None) -> RunResult:
    """
    Approximate a reference image with cfg.num_triangles triangles.

    Args:
        cfg: Run configuration
        reference_path: Path to the reference image (loaded and resized)
        reference: Already decoded reference buffer, used instead of reference_path

    Returns:
        RunResult with the committed triangles and final canvas
    """
    validate_config(cfg)

    if reference is None:
        if reference_path is None:
            raise ValueError("Either reference_path or reference must be given")
        print(f"Loading reference image: {reference_path}")
        reference = load_reference_image(
            reference_path, cfg.image_size,
            resize_mode=cfg.reference.resize_mode,
            pad_color=tuple(cfg.reference.pad_color)
        )

    with EvolutionEngine(cfg, reference) as engine:
        return _run_engine(cfg, engine, reference)


def _run_engine(cfg: DictConfig, engine: EvolutionEngine, reference: np.ndarray) -> RunResult:
    print(f"Approximating with {cfg.num_triangles} triangles at {cfg.image_size}x{cfg.image_size}, "
          f"metric={cfg.algorithm}, threads={engine.harness.threads}")
    print(f"Seed: {engine.seed}")

    writer = OutputWriter(
        cfg.output.output_dir,
        name=cfg.output.name,
        image_size=cfg.image_size,
        background=cfg.background,
        seed=engine.seed,
        algorithm=cfg.algorithm,
        write_svg=cfg.output.write_svg,
        write_png=cfg.output.write_png,
        write_json=cfg.output.write_json
    )
    metrics_calc = MetricsCalculator()
    log_images = cfg.logging.wandb_mode != 'disabled'

    wandb.init(
        project=cfg.logging.wandb_project,
        entity=cfg.logging.wandb_entity,
        mode=cfg.logging.wandb_mode,
        config=OmegaConf.to_container(cfg),
        name=f"triklops_{cfg.num_triangles}_{cfg.image_size}_{cfg.algorithm}"
    )

    pbar = tqdm(total=cfg.num_triangles, desc='Triangles', disable=not cfg.logging.progress_bar)

    def on_generation(slot, generation, best):
        pbar.set_postfix({
            'gen': generation,
            'fitness': f'{best.fitness:.4f}'
        })

    def on_slot(result: SlotResult):
        pbar.update(1)
        if result.slot % cfg.logging.log_interval == 0:
            wandb.log({
                'slot/fitness': result.fitness,
                'slot/penalized': result.penalized[-1],
                'slot/degenerate': int(result.degenerate),
                'slot/seconds': result.elapsed,
            }, step=result.slot)

    def on_save(save_point: SavePoint):
        written = writer.write(save_point, engine.output)
        pbar.write(f"Saved {len(save_point.triangles)} triangles: "
                   f"{', '.join(str(p) for p in written.values())}")

        log_dict = {'save/triangles': len(save_point.triangles)}
        if save_point.is_final:
            for k, v in metrics_calc.calculate_metrics(save_point.snapshot, reference).items():
                log_dict[f'final/{k}'] = v
        if log_images:
            caption = f"{len(save_point.triangles)} triangles"
            if save_point.is_final:
                image = create_comparison_grid(reference, save_point.snapshot)
            else:
                image = array_to_image(save_point.snapshot)
            log_dict['samples'] = wandb.Image(image, caption=caption)
        wandb.log(log_dict, step=save_point.slot)

    start_time = time.time()
    try:
        output = engine.run(on_slot=on_slot, on_save=on_save, on_generation=on_generation)
    finally:
        pbar.close()
        wandb.finish()

    print(f"\nRun complete in {time.time() - start_time:.1f} seconds")

    return RunResult(
        triangles=list(output.triangles),
        canvas=engine.canvas.snapshot(),
        seed=engine.seed,
        history=output.history_frame()
    )
