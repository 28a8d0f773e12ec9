"""
Unit tests for navhydro/stability/criteria.py

Tests the IMO A.749(18) intact stability checks on synthetic and computed
GZ curves.
"""

import math

import pytest
from decimal import Decimal

from navhydro.errors import ArgumentError, InvalidOperationError
from navhydro.stability import (
    IMO_INTACT,
    CriteriaChecker,
    StabilityCalculator,
    StabilityCurve,
    StabilityCurvePoint,
    StabilityMethod,
    area_under_curve,
    interpolate_gz,
)

CRITERIA_ORDER = ["area_0_30", "area_0_40", "area_30_40", "angle_of_max_gz", "initial_gmt", "gz_at_30"]


def make_curve(pairs, gmt="1.0"):
    points = tuple(
        StabilityCurvePoint(Decimal(str(angle)), Decimal(str(gz)), Decimal(0))
        for angle, gz in pairs
    )
    best = max(points, key=lambda p: p.gz)
    return StabilityCurve(
        method=StabilityMethod.FULL_IMMERSION,
        draft=Decimal(5),
        displacement=Decimal(1000),
        kg=Decimal(1),
        initial_gmt=Decimal(gmt),
        points=points,
        max_gz=best.gz,
        angle_of_max_gz=best.heel_angle,
    )


# Healthy curve peaking at 40°
GOOD = [(0, 0), (10, 0.2), (20, 0.4), (30, 0.6), (40, 0.7), (50, 0.5), (60, 0.2)]


class TestCurveIntegration:
    """Test interpolation and area helpers."""

    def setup_method(self):
        """Set up a linear curve GZ = φ/100."""
        self.points = make_curve([(0, 0), (10, 0.1), (20, 0.2), (30, 0.3), (40, 0.4)]).points

    def test_interpolate(self):
        """Test interpolation between and on points."""
        assert interpolate_gz(self.points, Decimal(15)) == Decimal("0.15")
        assert interpolate_gz(self.points, Decimal(40)) == Decimal("0.4")

    def test_interpolate_outside(self):
        """Outside the curve nothing is extrapolated."""
        assert interpolate_gz(self.points, Decimal(45)) is None
        assert interpolate_gz(self.points, Decimal(-1)) is None

    def test_area_radians(self):
        """∫ φ/100 dφ from 0° to 30° is 4.5 m·deg."""
        area = area_under_curve(self.points, Decimal(0), Decimal(30))
        assert float(area) == pytest.approx(4.5 * math.pi / 180)

    def test_area_interpolated_bounds(self):
        """Bounds between points are interpolated."""
        area = area_under_curve(self.points, Decimal(5), Decimal(25))
        assert float(area) == pytest.approx((25 ** 2 - 5 ** 2) / 200 * math.pi / 180)

    def test_area_not_spanned(self):
        """Test intervals beyond the curve give None."""
        assert area_under_curve(self.points, Decimal(0), Decimal(50)) is None


class TestCriteriaChecker:
    """Test criteria verdicts."""

    def setup_method(self):
        """Set up checker."""
        self.checker = CriteriaChecker()

    def test_passing_curve(self):
        """Test a healthy curve passes every criterion in order."""
        result = self.checker.check(make_curve(GOOD))
        assert result.all_passed
        assert [c.key for c in result.criteria] == CRITERIA_ORDER
        assert result.failed == ()
        assert result.summary == "IMO A.749(18): PASS (6/6 criteria met)"
        assert result.standard == IMO_INTACT.standard

    def test_area_values(self):
        """Test the 0-30° area and its degree equivalent."""
        area_0_30 = self.checker.check(make_curve(GOOD)).criteria[0]
        assert float(area_0_30.actual) == pytest.approx(9.0 * math.pi / 180, abs=1e-6)
        assert area_0_30.unit == "m·rad"
        assert area_0_30.notes == "Equivalent to 9.000 m·deg"

    def test_low_gm_fails(self):
        """Test GMt under 0.15 m fails only that criterion."""
        result = self.checker.check(make_curve(GOOD, gmt="0.1"))
        assert not result.all_passed
        assert [c.key for c in result.failed] == ["initial_gmt"]
        assert result.summary == "IMO A.749(18): FAIL (5/6 criteria met)"

    def test_early_peak_fails(self):
        """Test a maximum before 25° fails the angle criterion."""
        curve = make_curve([(0, 0), (10, 0.5), (20, 0.9), (30, 0.8), (40, 0.6), (50, 0.3)])
        result = self.checker.check(curve)
        angle = next(c for c in result.criteria if c.key == "angle_of_max_gz")
        assert not angle.passed
        assert angle.actual == Decimal(20)
        assert angle.notes == "Maximum GZ = 0.900 m"

    def test_short_curve(self):
        """A curve stopping at 20° fails the criteria it cannot reach."""
        result = self.checker.check(make_curve([(0, 0), (10, 0.3), (20, 0.6)]))
        by_key = {c.key: c for c in result.criteria}
        assert by_key["area_0_30"].actual is None
        assert not by_key["area_0_30"].passed
        assert "Curve covers 0° to 20°" in by_key["area_0_30"].notes
        assert by_key["gz_at_30"].actual is None
        assert by_key["initial_gmt"].passed

    def test_downflooding_caps_upper_limit(self):
        """Downflooding at 35° replaces the 40° limit."""
        result = self.checker.check(make_curve(GOOD), downflooding_angle=35)
        by_key = {c.key: c for c in result.criteria}
        assert "35" in by_key["area_0_40"].name
        assert float(by_key["area_30_40"].actual) == pytest.approx(
            (0.6 + 0.65) / 2 * 5 * math.pi / 180, abs=1e-6,
        )

    def test_downflooding_below_thirty(self):
        """Downflooding at or below 30° fails the 30-40° area with zero."""
        result = self.checker.check(make_curve(GOOD), downflooding_angle=25)
        area_30_40 = result.criteria[2]
        assert not area_30_40.passed
        assert area_30_40.actual == Decimal(0)

    def test_too_few_points(self):
        """Test fewer than three points is rejected."""
        with pytest.raises(InvalidOperationError):
            self.checker.check(make_curve([(0, 0), (30, 0.5)]))

    def test_bad_downflooding_angle(self):
        """Test non-positive downflooding angle."""
        with pytest.raises(ArgumentError):
            self.checker.check(make_curve(GOOD), downflooding_angle=0)

    def test_deterministic(self):
        """Test the same curve always yields the same verdict."""
        curve = make_curve(GOOD)
        assert self.checker.check(curve) == self.checker.check(curve)

    def test_to_dict(self):
        """Test serialization of the verdict."""
        data = self.checker.check(make_curve(GOOD, gmt="0.1")).to_dict()
        assert data["all_passed"] is False
        assert data["criteria"][4]["actual"] == "0.1"
        assert data["criteria"][4]["passed"] is False


class TestBargeCriteria:
    """Test criteria on a computed curve."""

    def test_barge_passes(self, barge, barge_loadcase):
        """The KG 6 m barge satisfies every IMO criterion."""
        curve = StabilityCalculator().compute(barge, barge_loadcase, 0, 90, 5)
        result = CriteriaChecker().check(curve)
        assert result.all_passed
        assert float(result.criteria[0].actual) == pytest.approx(0.4904, abs=2e-3)
