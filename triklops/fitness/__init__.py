from .metrics import Metric, MSEMetric, SSIMMetric, create_metric
from .degeneracy import DegeneracyFilter
from .evaluator import Evaluation, FitnessEvaluator

__all__ = [
    'Metric',
    'MSEMetric',
    'SSIMMetric',
    'create_metric',
    'DegeneracyFilter',
    'Evaluation',
    'FitnessEvaluator'
]
