import pytest
from triklops.config import (
    TriklopsConfig, ConfigurationError, load_config, register_configs,
    validate_config, setup_paths
)
from hydra.core.config_store import ConfigStore
from omegaconf import OmegaConf
import tempfile
import os


class TestConfiguration:
    """Test cases for configuration system."""

    def test_default_config(self):
        """Test default configuration creation."""
        cfg = OmegaConf.structured(TriklopsConfig)

        assert cfg.image_size == 256
        assert cfg.num_triangles == 512
        assert cfg.algorithm == 'mse'
        assert cfg.seed is None
        assert cfg.evolution.num_generations == 256
        assert cfg.evolution.population_size == 128
        assert cfg.evolution.num_selected == 64
        assert cfg.evolution.mutation_rate == 0.1
        assert cfg.evolution.degeneracy_threshold is None
        assert list(cfg.background) == [0, 0, 0]

    def test_load_config_default(self):
        """Test loading configuration without file."""
        cfg = load_config()

        assert cfg.image_size == 256
        assert cfg.num_triangles == 512

    def test_load_config_with_overrides(self):
        """Test configuration with CLI overrides."""
        overrides = ['image_size=64', 'num_triangles=4', 'seed=42',
                     'evolution.population_size=20', 'evolution.degeneracy_threshold=12.5']
        cfg = load_config(overrides=overrides)

        assert cfg.image_size == 64
        assert cfg.num_triangles == 4
        assert cfg.seed == 42
        assert cfg.evolution.population_size == 20
        assert cfg.evolution.degeneracy_threshold == 12.5

    def test_load_config_from_file(self):
        """Test loading configuration from YAML file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("""
image_size: 128
num_triangles: 50
algorithm: ssim
evolution:
  num_selected: 8
  mutation_rate: 0.25
""")
            temp_path = f.name

        try:
            cfg = load_config(temp_path)
            assert cfg.image_size == 128
            assert cfg.num_triangles == 50
            assert cfg.algorithm == 'ssim'
            assert cfg.evolution.num_selected == 8
            assert cfg.evolution.mutation_rate == 0.25
            # Unspecified keys keep their defaults
            assert cfg.evolution.population_size == 128
        finally:
            os.unlink(temp_path)

    def test_missing_config_file_uses_defaults(self):
        cfg = load_config('does-not-exist.yaml', ['num_triangles=3'])
        assert cfg.num_triangles == 3
        assert cfg.image_size == 256

    def test_register_configs(self):
        register_configs()
        assert 'config.yaml' in ConfigStore.instance().list('/')

    def test_validate_config_valid(self):
        """Test configuration validation with valid values."""
        cfg = load_config()
        validate_config(cfg)  # Should not raise

    @pytest.mark.parametrize('override, parameter', [
        ('image_size=0', 'image_size'),
        ('num_triangles=-10', 'num_triangles'),
        ('evolution.num_generations=0', 'evolution.num_generations'),
        ('evolution.population_size=0', 'evolution.population_size'),
        ('evolution.num_selected=0', 'evolution.num_selected'),
        ('evolution.mutation_rate=1.5', 'evolution.mutation_rate'),
        ('evolution.mutation_rate=-0.1', 'evolution.mutation_rate'),
        ('evolution.degeneracy_threshold=0', 'evolution.degeneracy_threshold'),
        ('evolution.degeneracy_threshold=61', 'evolution.degeneracy_threshold'),
        ('algorithm=psnr', 'algorithm'),
        ('threads=0', 'threads'),
        ('seed=-1', 'seed'),
        ('output.save_frequency=0', 'output.save_frequency'),
        ('reference.resize_mode=crop', 'reference.resize_mode'),
        ('logging.wandb_mode=loud', 'logging.wandb_mode'),
    ])
    def test_validate_config_invalid(self, override, parameter):
        """Each out-of-range value is rejected and named."""
        cfg = load_config(overrides=[override])
        with pytest.raises(ConfigurationError) as excinfo:
            validate_config(cfg)
        assert excinfo.value.parameter == parameter
        assert parameter in str(excinfo.value)

    def test_validate_num_selected_exceeds_population(self):
        cfg = load_config(overrides=['evolution.population_size=10', 'evolution.num_selected=11'])
        with pytest.raises(ConfigurationError, match='num_selected'):
            validate_config(cfg)

    def test_validate_num_selected_equal_to_population(self):
        cfg = load_config(overrides=['evolution.population_size=10', 'evolution.num_selected=10'])
        validate_config(cfg)

    def test_validate_ssim_minimum_size(self):
        cfg = load_config(overrides=['algorithm=ssim', 'image_size=6'])
        with pytest.raises(ConfigurationError, match='image_size'):
            validate_config(cfg)

        cfg = load_config(overrides=['algorithm=mse', 'image_size=6'])
        validate_config(cfg)

    def test_validate_background(self):
        cfg = load_config(overrides=['background=[0,300,0]'])
        with pytest.raises(ConfigurationError, match='background'):
            validate_config(cfg)

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_setup_paths(self):
        """Test directory creation from configuration."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = load_config(overrides=[f'output.output_dir={tmpdir}/outputs'])

            setup_paths(cfg)

            assert os.path.exists(f'{tmpdir}/outputs')
