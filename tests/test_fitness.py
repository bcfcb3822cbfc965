import math

import numpy as np
import pytest

from triklops.fitness import (
    MSEMetric, SSIMMetric, create_metric, DegeneracyFilter, FitnessEvaluator
)
from triklops.geometry import Triangle
from triklops.renderer import new_canvas, composite
from triklops.utils import MetricsCalculator


def make_triangle(vertices, color=(0, 0, 0), alpha=1.0):
    return Triangle(vertices=tuple(tuple(map(float, v)) for v in vertices),
                    color=color, alpha=alpha)


def gradient_image(size=32):
    ramp = np.linspace(0, 255, size)
    image = np.zeros((size, size, 3))
    image[..., 0] = ramp[None, :]
    image[..., 1] = ramp[:, None]
    image[..., 2] = 128.0
    return image


class TestMetrics:
    """Test cases for the fitness metrics."""

    def test_mse_perfect_match_black(self):
        """Opaque black triangle on a black canvas against a black reference."""
        reference = np.zeros((64, 64, 3))
        evaluator = FitnessEvaluator(reference, MSEMetric())
        canvas = new_canvas(64, (0, 0, 0))
        tri = make_triangle([(0, 0), (63.9, 0), (0, 63.9)], color=(0, 0, 0), alpha=1.0)

        result = evaluator.evaluate(tri, canvas)
        assert result.fitness == 0.0
        assert not result.penalized

    def test_mse_value(self):
        metric = MSEMetric()
        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 2.0)
        assert metric.score(a, b) == pytest.approx(4.0)

    def test_ssim_identical_is_one(self):
        image = gradient_image()
        assert SSIMMetric().score(image.copy(), image) == pytest.approx(1.0, abs=1e-9)

    def test_ssim_penalizes_difference(self):
        image = gradient_image()
        noisy = np.clip(image + np.random.default_rng(0).normal(0, 40, image.shape), 0, 255)
        assert SSIMMetric().score(noisy, image) < 0.9

    def test_directions(self):
        mse, ssim = MSEMetric(), SSIMMetric()
        assert mse.is_better(1.0, 2.0)
        assert not mse.is_better(2.0, 1.0)
        assert ssim.is_better(0.9, 0.5)
        assert not ssim.is_better(0.5, 0.9)
        assert mse.worst == math.inf
        assert ssim.worst == -math.inf
        assert mse.is_better(1e9, mse.worst)
        assert ssim.is_better(-1.0, ssim.worst)

    def test_create_metric(self):
        assert isinstance(create_metric('mse'), MSEMetric)
        assert isinstance(create_metric('ssim'), SSIMMetric)
        with pytest.raises(ValueError):
            create_metric('lpips')


class TestFitnessEvaluator:
    """Test cases for candidate evaluation."""

    def test_evaluation_does_not_mutate_canvas(self):
        reference = gradient_image()
        evaluator = FitnessEvaluator(reference, MSEMetric())
        canvas = new_canvas(32)
        before = canvas.copy()
        evaluator.evaluate(make_triangle([(0, 0), (31, 0), (0, 31)], color=(255, 0, 0)), canvas)
        assert np.array_equal(canvas, before)

    def test_evaluation_matches_composite(self):
        reference = gradient_image()
        evaluator = FitnessEvaluator(reference, MSEMetric())
        canvas = new_canvas(32, (30, 30, 30))
        tri = make_triangle([(2, 3), (29, 8), (11, 30)], color=(200, 100, 50), alpha=0.6)

        expected = MSEMetric().score(composite(canvas, tri), reference)
        assert evaluator.evaluate(tri, canvas).fitness == expected

    def test_better_triangle_scores_better(self):
        reference = np.zeros((32, 32, 3))
        reference[:16, :16] = 255.0
        evaluator = FitnessEvaluator(reference, MSEMetric())
        canvas = new_canvas(32)

        good = make_triangle([(0, 0), (16, 0), (0, 16)], color=(255, 255, 255))
        bad = make_triangle([(16, 16), (31, 16), (16, 31)], color=(255, 255, 255))
        assert evaluator.evaluate(good, canvas).fitness < evaluator.score_canvas(canvas)
        assert evaluator.evaluate(bad, canvas).fitness > evaluator.score_canvas(canvas)

    @pytest.mark.parametrize('metric', [MSEMetric(), SSIMMetric()])
    def test_degenerate_gets_worst(self, metric):
        reference = gradient_image()
        evaluator = FitnessEvaluator(reference, metric, DegeneracyFilter(threshold=20.0))
        sliver = make_triangle([(0, 0), (31, 0), (15, 1)])

        result = evaluator.evaluate(sliver, new_canvas(32))
        assert result.penalized
        assert result.fitness == metric.worst
        assert result.min_angle < 20.0

    def test_reference_shape_checked(self):
        with pytest.raises(ValueError):
            FitnessEvaluator(np.zeros((8, 8)), MSEMetric())

    def test_reference_is_copied(self):
        reference = np.zeros((8, 8, 3))
        FitnessEvaluator(reference, MSEMetric())
        assert reference.flags.writeable


class TestMetricsCalculator:
    """Test cases for evaluation metrics."""

    def test_identical(self):
        image = gradient_image()
        results = MetricsCalculator().calculate_metrics(image, image.copy(), ['mse', 'ssim'])
        assert results['mse'] == 0.0
        assert results['ssim'] == pytest.approx(1.0)

    def test_psnr(self):
        a = np.zeros((16, 16, 3))
        b = np.full((16, 16, 3), 10.0)
        results = MetricsCalculator().calculate_metrics(a, b, ['psnr'])
        expected = 10 * math.log10(255.0 ** 2 / 100.0)
        assert results['psnr'] == pytest.approx(expected)

    def test_default_metrics(self):
        image = gradient_image()
        calc = MetricsCalculator()
        first = calc.calculate_metrics(image, image * 0.9)
        second = calc.calculate_metrics(image, image * 0.9)
        assert set(first) == {'mse', 'ssim', 'psnr'}
        assert first == second

    def test_unknown_metric(self):
        image = gradient_image()
        with pytest.raises(ValueError):
            MetricsCalculator().calculate_metrics(image, image, ['lpips'])

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            MetricsCalculator().calculate_metrics(np.zeros((8, 8, 3)), np.zeros((16, 16, 3)))
