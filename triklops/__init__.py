"""
Triklops - Approximate images with evolved triangles.

This package places a fixed number of alpha-blended triangles onto a canvas,
one at a time, choosing each with a seeded, thread-count independent
genetic search against a reference image.
"""

__version__ = "1.0.0"

from .geometry import Triangle
from .canvas import Canvas
from .fitness import MSEMetric, SSIMMetric, FitnessEvaluator, DegeneracyFilter
from .evolution import EvolutionEngine, Population, Individual
from .config import TriklopsConfig, ConfigurationError, load_config, validate_config

__all__ = [
    'Triangle',
    'Canvas',
    'MSEMetric',
    'SSIMMetric',
    'FitnessEvaluator',
    'DegeneracyFilter',
    'EvolutionEngine',
    'Population',
    'Individual',
    'TriklopsConfig',
    'ConfigurationError',
    'load_config',
    'validate_config'
]
