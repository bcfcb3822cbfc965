from dataclasses import dataclass, field
from typing import List, Optional
from omegaconf import DictConfig, OmegaConf
from hydra.core.config_store import ConfigStore
import os


ALGORITHMS = ('mse', 'ssim')
RESIZE_MODES = ('stretch', 'pad')
WANDB_MODES = ('online', 'offline', 'disabled')

# skimage's default SSIM window is 7x7
SSIM_MIN_IMAGE_SIZE = 7


class ConfigurationError(ValueError):
    """Raised when a configuration value is out of range."""

    def __init__(self, parameter: str, message: str):
        super().__init__(f"{parameter}: {message}")
        self.parameter = parameter


@dataclass
class EvolutionConfig:
    num_generations: int = 256
    population_size: int = 128
    num_selected: int = 64
    mutation_rate: float = 0.1
    degeneracy_threshold: Optional[float] = None  # Minimum interior angle in degrees


@dataclass
class ReferenceConfig:
    resize_mode: str = 'stretch'
    pad_color: List[int] = field(default_factory=lambda: [255, 255, 255])


@dataclass
class OutputConfig:
    output_dir: str = 'outputs'
    name: str = 'output'
    save_frequency: Optional[int] = None  # None = final triangle only
    write_svg: bool = True
    write_png: bool = True
    write_json: bool = True


@dataclass
class LoggingConfig:
    wandb_project: str = 'triklops'
    wandb_entity: Optional[str] = None
    wandb_mode: str = 'disabled'
    log_interval: int = 1
    progress_bar: bool = True


@dataclass
class TriklopsConfig:
    image_size: int = 256
    num_triangles: int = 512
    algorithm: str = 'mse'
    seed: Optional[int] = None
    threads: Optional[int] = None
    background: List[int] = field(default_factory=lambda: [0, 0, 0])
    evolution: EvolutionConfig = field(default_factory=EvolutionConfig)
    reference: ReferenceConfig = field(default_factory=ReferenceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def register_configs():
    """Register configuration schemas with Hydra."""
    cs = ConfigStore.instance()
    cs.store(name="config", node=TriklopsConfig)


def load_config(config_path: Optional[str] = None, overrides: Optional[List[str]] = None) -> DictConfig:
    """Load configuration from file with optional overrides."""
    schema = OmegaConf.structured(TriklopsConfig)
    if config_path and os.path.exists(config_path):
        cfg = OmegaConf.merge(schema, OmegaConf.load(config_path))
    else:
        cfg = schema
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_cli(overrides))
    return cfg


def _require(condition: bool, parameter: str, message: str) -> None:
    if not condition:
        raise ConfigurationError(parameter, message)


def validate_config(cfg: DictConfig) -> None:
    """Validate configuration values.

    Every check runs before any slot starts; the first violation raises
    ConfigurationError naming the offending parameter.
    """
    evo = cfg.evolution

    _require(cfg.algorithm in ALGORITHMS, 'algorithm',
             f"must be one of {', '.join(ALGORITHMS)}, got {cfg.algorithm!r}")
    _require(cfg.image_size > 0, 'image_size', "must be positive")
    if cfg.algorithm == 'ssim':
        _require(cfg.image_size >= SSIM_MIN_IMAGE_SIZE, 'image_size',
                 f"must be at least {SSIM_MIN_IMAGE_SIZE} for the ssim algorithm")
    _require(cfg.num_triangles > 0, 'num_triangles', "must be positive")
    _require(evo.num_generations > 0, 'evolution.num_generations', "must be positive")
    _require(evo.population_size > 0, 'evolution.population_size', "must be positive")
    _require(evo.num_selected > 0, 'evolution.num_selected', "must be positive")
    _require(evo.num_selected <= evo.population_size, 'evolution.num_selected',
             f"must not exceed population_size ({evo.population_size}), got {evo.num_selected}")
    _require(0.0 <= evo.mutation_rate <= 1.0, 'evolution.mutation_rate',
             f"must be between 0 and 1, got {evo.mutation_rate}")

    # No triangle has a minimum angle above 60 degrees
    if evo.degeneracy_threshold is not None:
        _require(0.0 < evo.degeneracy_threshold <= 60.0, 'evolution.degeneracy_threshold',
                 f"must be in (0, 60] degrees, got {evo.degeneracy_threshold}")
    if cfg.seed is not None:
        _require(cfg.seed >= 0, 'seed', "must be non-negative")
    if cfg.threads is not None:
        _require(cfg.threads > 0, 'threads', "must be positive")
    if cfg.output.save_frequency is not None:
        _require(cfg.output.save_frequency > 0, 'output.save_frequency', "must be positive")

    _require(len(cfg.background) == 3, 'background', "must have exactly 3 channels")
    _require(all(0 <= c <= 255 for c in cfg.background), 'background',
             "channels must be between 0 and 255")
    _require(cfg.reference.resize_mode in RESIZE_MODES, 'reference.resize_mode',
             f"must be one of {', '.join(RESIZE_MODES)}")
    _require(cfg.logging.wandb_mode in WANDB_MODES, 'logging.wandb_mode',
             f"must be one of {', '.join(WANDB_MODES)}")
    _require(cfg.logging.log_interval > 0, 'logging.log_interval', "must be positive")


def setup_paths(cfg: DictConfig) -> None:
    """Create necessary directories based on configuration."""
    os.makedirs(cfg.output.output_dir, exist_ok=True)
