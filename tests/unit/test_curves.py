"""
Unit tests for navhydro/physics/curves.py

Tests hydrostatic and Bonjean curve generation.
"""

import pytest
from decimal import Decimal

from navhydro.core.cancellation import CancellationToken
from navhydro.errors import ArgumentError, CalculationCancelledError, MonotonicityError
from navhydro.physics.curves import CurveGenerator, CurveType, linear_drafts
from navhydro.physics.hydrostatics import HydroResult


class TestLinearDrafts:
    """Test draft sweep spacing."""

    def test_endpoints_exact(self):
        """First and last drafts are exactly the requested bounds."""
        drafts = linear_drafts(Decimal(1), Decimal(2), 4, 6)
        assert drafts[0] == Decimal(1)
        assert drafts[-1] == Decimal(2)
        assert drafts[1] == Decimal("1.333333")
        assert len(drafts) == 4

    def test_two_points(self):
        """Test a two-point sweep is just the bounds."""
        assert linear_drafts(Decimal(1), Decimal(3), 2, 6) == [Decimal(1), Decimal(3)]


class TestCurveGenerator:
    """Test curve generation on the box barge."""

    def setup_method(self):
        """Set up generator."""
        self.generator = CurveGenerator()

    def test_displacement_and_volume(self, barge, seawater):
        """Volume grows as L·B·T; displacement as ρ·V."""
        curves = self.generator.generate(barge, seawater, ["volume", "displacement"], 1, 5, points=5)
        volume, displacement = curves
        assert volume.curve_type is CurveType.VOLUME
        assert [p.x for p in volume.points] == [Decimal(d) for d in (1, 2, 3, 4, 5)]
        assert [p.y for p in volume.points] == [Decimal(2000 * d) for d in (1, 2, 3, 4, 5)]
        assert displacement.points[-1].y == Decimal(10250000)
        assert displacement.y_label == "Displacement (kg)"
        assert displacement.x_label == "Draft (m)"

    def test_request_order_kept(self, barge, seawater):
        """Curves come back in the order requested."""
        curves = self.generator.generate(barge, seawater, [CurveType.AWP, "KB", "lcb"], 1, 5, points=3)
        assert [c.name for c in curves] == ["awp", "kb", "lcb"]
        assert curves[1].points[1].y == Decimal("1.5")

    def test_single_type_string(self, barge, seawater):
        """Test a bare string is accepted as one curve type."""
        curves = self.generator.generate(barge, seawater, "volume", 1, 2, points=2)
        assert len(curves) == 1

    def test_default_points(self, barge, seawater):
        """Test the configured point count is used by default."""
        curves = self.generator.generate(barge, seawater, ["volume"], 1, 5)
        assert len(curves[0].points) == 20

    def test_gmt_curve(self, barge, barge_loadcase):
        """Test GMt curve with KG from the loadcase."""
        curves = self.generator.generate(barge, barge_loadcase, ["gmt"], 4, 5, points=2)
        assert float(curves[0].points[-1].y) == pytest.approx(2.5 + 400 / 60 - 6, abs=1e-6)

    def test_gmt_requires_kg(self, barge, seawater):
        """Test GMt without KG is rejected."""
        with pytest.raises(ArgumentError) as exc:
            self.generator.generate(barge, seawater, ["gmt"], 1, 5, points=3)
        assert exc.value.param == "kg"

    def test_bonjean(self, barge, seawater):
        """Bonjean curves: one per station, area against draft."""
        curves = self.generator.generate(barge, seawater, ["bonjean"], 1, 3, points=3)
        assert [c.name for c in curves] == [f"bonjean_{i}" for i in range(5)]
        assert curves[2].station_x == Decimal(50)
        assert [p.y for p in curves[2].points] == [Decimal(20), Decimal(40), Decimal(60)]
        assert curves[0].y_label == "Sectional area (m²)"

    def test_to_dict(self, barge, seawater):
        """Test curve serialization."""
        data = self.generator.generate(barge, seawater, ["kb"], 1, 2, points=2)[0].to_dict()
        assert data["name"] == "kb"
        assert data["points"] == [["1.000000", "0.500000"], ["2.000000", "1.000000"]]
        assert data["station_index"] is None

    def test_cancelled(self, barge, seawater):
        """Test cancellation between drafts."""
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CalculationCancelledError):
            self.generator.generate(barge, seawater, ["bonjean"], 1, 3, points=3, cancel_token=token)


class TestCurveValidation:
    """Test argument validation."""

    def setup_method(self):
        """Set up generator."""
        self.generator = CurveGenerator()

    def test_unknown_type(self, barge, seawater):
        """Test unknown curve types are rejected."""
        with pytest.raises(ArgumentError):
            self.generator.generate(barge, seawater, ["righting_arm"], 1, 5)

    def test_empty_types(self, barge, seawater):
        """Test an empty type list is rejected."""
        with pytest.raises(ArgumentError):
            self.generator.generate(barge, seawater, [], 1, 5)

    def test_inverted_range(self, barge, seawater):
        """Test min_draft must be below max_draft."""
        with pytest.raises(ArgumentError):
            self.generator.generate(barge, seawater, ["volume"], 5, 5)

    def test_non_positive_min(self, barge, seawater):
        """Test min_draft must be positive."""
        with pytest.raises(ArgumentError):
            self.generator.generate(barge, seawater, ["volume"], 0, 5)

    def test_too_few_points(self, barge, seawater):
        """Test fewer than two points is rejected."""
        with pytest.raises(ArgumentError):
            self.generator.generate(barge, seawater, ["volume"], 1, 5, points=1)

    def test_decreasing_displacement_detected(self):
        """A volume drop between drafts raises MonotonicityError."""
        table = [
            HydroResult.from_dict({"draft": "1", "disp_volume": "100"}),
            HydroResult.from_dict({"draft": "2", "disp_volume": "90"}),
        ]
        with pytest.raises(MonotonicityError) as exc:
            CurveGenerator._check_monotonic(table)
        assert exc.value.details["draft_before"] == Decimal(1)


class TestCurveProperties:
    """Test sweep-wide properties of the curves."""

    def test_wigley_displacement_non_decreasing(self, wigley, seawater):
        """Displacement never decreases with draft, including above the design waterline."""
        curve = CurveGenerator().generate(wigley, seawater, ["displacement"], "0.1", 10, points=25)[0]
        values = [p.y for p in curve.points]
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_two_points_are_endpoints(self, wigley, seawater):
        """points=2 gives exactly the two endpoint drafts."""
        curve = CurveGenerator().generate(wigley, seawater, ["volume"], "1.5", "5.5", points=2)[0]
        assert [p.x for p in curve.points] == [Decimal("1.5"), Decimal("5.5")]
