"""
Unit tests for navhydro/physics/integration.py

Tests Simpson/trapezoidal rules and the longitudinal quadrature weights.
"""

import pytest
from decimal import Decimal

from navhydro.errors import ArgumentError
from navhydro.physics.integration import (
    composite_simpson,
    first_moment,
    integrate,
    is_equally_spaced,
    pair_weights,
    second_moment,
    simpson_weights,
    simpsons_rule,
    trapezoidal_rule,
)


def D(values):
    return [Decimal(str(v)) for v in values]


class TestBasicRules:
    """Test the textbook quadrature rules."""

    def test_trapezoidal_linear_exact(self):
        """Trapezoidal rule integrates a straight line exactly."""
        x = D([0, 1, 3])
        y = D([1, 3, 7])  # y = 2x + 1
        assert trapezoidal_rule(x, y) == Decimal(12)

    def test_trapezoidal_requires_two_points(self):
        """Test a single point is rejected."""
        with pytest.raises(ArgumentError):
            trapezoidal_rule(D([0]), D([1]))

    def test_simpson_quadratic_exact(self):
        """Simpson's rule integrates x² exactly."""
        x = D([0, 1, 2])
        y = D([0, 1, 4])
        assert float(simpsons_rule(x, y)) == pytest.approx(8 / 3, abs=1e-12)

    def test_simpson_cubic_exact(self):
        """Simpson's rule is exact for cubics too."""
        x = D([0, 0.5, 1, 1.5, 2])
        y = [v ** 3 for v in x]
        assert float(simpsons_rule(x, y)) == pytest.approx(4.0, abs=1e-12)

    def test_simpson_rejects_even_count(self):
        """Test an even number of points is rejected."""
        with pytest.raises(ArgumentError):
            simpsons_rule(D([0, 1, 2, 3]), D([0, 1, 2, 3]))

    def test_simpson_rejects_unequal_spacing(self):
        """Test unequal spacing is rejected."""
        with pytest.raises(ArgumentError):
            simpsons_rule(D([0, 1, 3]), D([0, 1, 9]))

    def test_composite_even_count(self):
        """Even point counts use Simpson plus a trailing trapezoid."""
        x = D([0, 1, 2, 3])
        y = D([1, 1, 1, 1])
        assert float(composite_simpson(x, y)) == pytest.approx(3.0, abs=1e-12)

    def test_composite_two_points_is_trapezoid(self):
        """Two points fall back to the trapezoidal rule."""
        assert composite_simpson(D([0, 2]), D([1, 3])) == Decimal(4)

    def test_length_mismatch(self):
        """Test mismatched x/y lengths are rejected."""
        with pytest.raises(ArgumentError):
            integrate(D([0, 1, 2]), D([0, 1]))

    def test_is_equally_spaced(self):
        """Test spacing detection with relative tolerance."""
        assert is_equally_spaced(D([0, 1, 2, 3]))
        assert is_equally_spaced(D([0, 1, 2.0005]))
        assert not is_equally_spaced(D([0, 1, 2.5]))


class TestSimpsonWeights:
    """Test composite Simpson weights."""

    def test_uniform_pair(self):
        """Three equal intervals give h/3·(1, 4, 1)."""
        weights = simpson_weights(D([0, 1, 2]))
        assert [float(w) for w in weights] == pytest.approx([1 / 3, 4 / 3, 1 / 3])

    def test_five_points(self):
        """Five points give h/3·(1, 4, 2, 4, 1)."""
        weights = simpson_weights(D([0, 25, 50, 75, 100]))
        expected = [25 / 3 * k for k in (1, 4, 2, 4, 1)]
        assert [float(w) for w in weights] == pytest.approx(expected)

    def test_trailing_interval_trapezoid(self):
        """An even point count ends with a trapezoidal interval."""
        weights = simpson_weights(D([0, 1, 2, 3]))
        assert [float(w) for w in weights] == pytest.approx([1 / 3, 4 / 3, 1 / 3 + 0.5, 0.5])

    def test_non_uniform_pair_exact_for_quadratic(self):
        """Non-uniform Simpson integrates x² exactly."""
        x = D([0, 1, 3])
        y = [v * v for v in x]
        assert float(integrate(x, y)) == pytest.approx(9.0, abs=1e-12)

    def test_pair_weights_reduce_to_uniform(self):
        """Equal intervals reproduce the classic weights."""
        weights = pair_weights(Decimal(2), Decimal(2))
        assert [float(w) for w in weights] == pytest.approx([2 / 3, 8 / 3, 2 / 3])

    def test_negative_weights_fall_back(self):
        """Strongly non-uniform pairs use trapezoids so no weight is negative."""
        weights = simpson_weights(D([0, 1, 4]))
        assert all(w >= 0 for w in weights)
        assert [float(w) for w in weights] == pytest.approx([0.5, 2.0, 1.5])

    def test_weights_sum_to_span(self):
        """Weights always integrate a constant exactly."""
        x = D([0, 0.5, 2, 2.5, 4, 7, 7.5])
        assert float(sum(simpson_weights(x))) == pytest.approx(7.5)

    def test_degenerate_inputs(self):
        """Fewer than two points integrate to zero."""
        assert simpson_weights(D([])) == []
        assert integrate(D([1]), D([5])) == Decimal(0)


class TestMoments:
    """Test first and second moments."""

    def test_first_moment(self):
        """∫ x·1 dx over [0, 2] is 2."""
        x = D([0, 1, 2])
        assert float(first_moment(x, D([1, 1, 1]))) == pytest.approx(2.0)

    def test_second_moment(self):
        """∫ x²·1 dx over [0, 2] is 8/3."""
        x = D([0, 1, 2])
        assert float(second_moment(x, D([1, 1, 1]))) == pytest.approx(8 / 3)
