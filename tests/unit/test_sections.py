"""
Unit tests for navhydro/physics/sections.py

Tests upright panel integration, heeled outline clipping and the waterplane.
"""

import pytest
from decimal import Decimal

from navhydro.core.config import OutOfRangePolicy
from navhydro.errors import GeometryOutOfRangeError
from navhydro.geometry import HullGeometry, Offset, Station, Waterline, wigley_hull
from navhydro.physics.sections import (
    SectionalIntegrator,
    Waterplane,
    build_panels,
    clip_outline,
    outline_properties,
    section_outline,
)


def nodes(*pairs):
    return tuple((Decimal(str(z)), Decimal(str(y))) for z, y in pairs)


# Grid position of the midship station on the 5-station barge
MID = 2


class TestPanels:
    """Test panel construction over a station profile."""

    def test_parabolic_profile_is_one_quadratic_panel(self):
        """Three nodes on y = z² give a single exact quadratic panel."""
        panels = build_panels(nodes((0, 0), (1, 1), (2, 4)))
        assert len(panels) == 1
        area, _ = panels[0].integrals(Decimal(1))
        assert float(area) == pytest.approx(1 / 3)

    def test_trailing_interval_is_linear(self):
        """An odd interval left over at the top is a linear panel."""
        panels = build_panels(nodes((0, 1), (1, 1), (2, 1), (3, 2)))
        assert len(panels) == 2
        assert panels[1].c2 == Decimal(0)

    def test_negative_parabola_falls_back(self):
        """A parabola dipping below zero breadth is replaced by two linear panels."""
        panels = build_panels(nodes((0, 1), (0.5, 0), (2, 1)))
        assert len(panels) == 2
        assert all(p.c2 == Decimal(0) for p in panels)


class TestUprightSections:
    """Test upright section integration on the box barge."""

    def test_box_section(self, barge):
        """Test area, vertical moment and breadth of a box section."""
        section = SectionalIntegrator(barge).upright(MID, Decimal(5))
        assert section.area == Decimal(100)
        assert section.moment_z == Decimal(250)
        assert section.centroid_z == Decimal("2.5")
        assert section.waterline_breadth == Decimal(20)
        assert not section.above_range

    def test_partial_panel(self, barge):
        """A draft between waterlines gets a partial-panel contribution."""
        section = SectionalIntegrator(barge).upright(MID, Decimal("3.3"))
        assert float(section.area) == pytest.approx(66.0)

    def test_dry_section(self, barge):
        """Test a draft at the keel immerses nothing."""
        assert SectionalIntegrator(barge).upright(MID, Decimal(0)).area == Decimal(0)

    def test_above_range_clamps(self, barge):
        """Above the highest offset the sides are extended vertically."""
        section = SectionalIntegrator(barge, OutOfRangePolicy.CLAMP).upright(MID, Decimal(12))
        assert section.area == Decimal(240)
        assert section.above_range

    def test_above_range_error_policy(self, barge):
        """Test the ERROR policy raises above the highest offset."""
        with pytest.raises(GeometryOutOfRangeError):
            SectionalIntegrator(barge, OutOfRangePolicy.ERROR).upright(MID, Decimal(12))

    def test_wigley_section_exact(self, wigley):
        """Wigley midship section is a parabola: area = 2/3·B·T."""
        section = SectionalIntegrator(wigley).upright(wigley.midship_position, Decimal("6.25"))
        assert float(section.area) == pytest.approx(2 / 3 * 10 * 6.25, abs=1e-9)
        # Centroid of y = 1 - ((T - z)/T)² sits at 5T/8
        assert float(section.centroid_z) == pytest.approx(5 * 6.25 / 8, abs=1e-9)

    def test_area_monotonic_in_draft(self, wigley):
        """Area never decreases as the draft rises."""
        integrator = SectionalIntegrator(wigley)
        areas = [integrator.upright(5, Decimal(t) / 4).area for t in range(0, 41)]
        assert all(b >= a for a, b in zip(areas, areas[1:]))


def lens_hull():
    """Two identical stations whose section is y = 2z - z² (zero breadth at keel and deck)."""
    stations = [Station(0, 0), Station(1, 10)]
    waterlines = [Waterline(0, 0), Waterline(1, 1), Waterline(2, 2)]
    offsets = [Offset(i, j, y) for i in range(2) for j, y in enumerate((0, 1, 0))]
    return HullGeometry(stations, waterlines, offsets)


class TestHeeledSections:
    """Test outline clipping for inclined waterlines."""

    def setup_method(self):
        """Box section outline 20 m wide, 10 m deep."""
        profile = nodes((0, 10), (2.5, 10), (5, 10), (7.5, 10), (10, 10))
        self.outline = section_outline(build_panels(profile))

    def test_outline(self):
        """Outline runs up starboard, across the deck and down port."""
        assert self.outline[0].start == (Decimal(10), Decimal(0))
        assert any(edge.start == (Decimal(-10), Decimal(10)) for edge in self.outline)
        area, moment_y, _ = outline_properties(self.outline)
        assert area == Decimal(200)
        assert moment_y == Decimal(0)

    def test_upright_clip_matches_panels(self):
        """At zero heel the clipped outline equals the upright section."""
        clipped, surface = clip_outline(self.outline, Decimal(0), Decimal(1), Decimal(5))
        area, moment_y, moment_z = outline_properties(clipped)
        assert area == Decimal(100)
        assert moment_y == Decimal(0)
        assert moment_z == Decimal(250)
        assert sorted(y for y, _ in surface) == [Decimal(-10), Decimal(10)]

    def test_heeled_clip_shifts_centroid_to_low_side(self):
        """A waterline through the section centre keeps the area and moves B to starboard."""
        sin_phi, cos_phi = Decimal("0.28"), Decimal("0.96")
        clipped, _ = clip_outline(self.outline, sin_phi, cos_phi, Decimal(5) * cos_phi)
        area, moment_y, _ = outline_properties(clipped)
        assert float(area) == pytest.approx(100.0)
        # ∫ y·(5 + y·tanφ) dy over ±10
        assert float(moment_y) == pytest.approx(2000 / 3 * 0.28 / 0.96)

    def test_integrator_heeled_breadth(self, barge):
        """Waterline chord of a heeled box is B / cosφ."""
        sin_phi, cos_phi = Decimal("0.28"), Decimal("0.96")
        section = SectionalIntegrator(barge).heeled(MID, Decimal(5) * cos_phi, sin_phi, cos_phi)
        assert float(section.waterline_breadth) == pytest.approx(20 / 0.96)
        # Measured along the waterline from the projected baseline centre
        assert float(section.waterline_centre) == pytest.approx(5 * 0.28)

    def test_height_range(self, barge):
        """Upright, the outline spans keel to deck."""
        assert SectionalIntegrator(barge).height_range(0, Decimal(0), Decimal(1)) == (Decimal(0), Decimal(10))


class TestCurvedHeeledSections:
    """Test heeled sections built from quadratic panels."""

    def test_lens_upright_clip(self):
        """The curved outline cut at zero heel integrates the parabola exactly."""
        integrator = SectionalIntegrator(lens_hull())
        heeled = integrator.heeled(0, Decimal(1), Decimal(0), Decimal(1))
        upright = integrator.upright(0, Decimal(1))
        # 2·∫(2z - z²) dz over [0, 1]
        assert float(heeled.area) == pytest.approx(4 / 3, abs=1e-12)
        assert float(heeled.area) == pytest.approx(float(upright.area), abs=1e-12)
        assert float(heeled.moment_z) == pytest.approx(float(upright.moment_z), abs=1e-12)
        assert float(heeled.waterline_breadth) == pytest.approx(2.0, abs=1e-12)

    def test_lens_height_range_interior_extremes(self):
        """Extremes of the level function inside a curved edge are found."""
        low, high = SectionalIntegrator(lens_hull()).height_range(0, Decimal("0.6"), Decimal("0.8"))
        # Starboard: 0.6z² - 0.4z, minimum at z = 1/3; port: 2z - 0.6z², maximum at z = 5/3
        assert float(low) == pytest.approx(-1 / 15, abs=1e-12)
        assert float(high) == pytest.approx(5 / 3, abs=1e-12)

    def test_small_heel_matches_upright(self):
        """A vanishing heel reproduces the upright section between waterlines."""
        wigley = wigley_hull(waterlines_below_draft=2)
        integrator = SectionalIntegrator(wigley)
        pos = wigley.midship_position
        upright = integrator.upright(pos, Decimal(4))
        heeled = integrator.heeled(pos, Decimal(4), Decimal("1E-7"), Decimal(1))
        assert float(heeled.area) == pytest.approx(float(upright.area), abs=1e-9)
        assert float(heeled.moment_z) == pytest.approx(float(upright.moment_z), abs=1e-8)
        assert float(heeled.moment_y) == pytest.approx(0.0, abs=1e-4)
        assert float(heeled.waterline_breadth) == pytest.approx(float(upright.waterline_breadth), abs=1e-5)

    def test_port_and_starboard_mirror(self, wigley):
        """Heel to port mirrors heel to starboard."""
        integrator = SectionalIntegrator(wigley)
        sin_phi, cos_phi = Decimal("0.5"), Decimal("0.8660254037844386")
        starboard = integrator.heeled(8, Decimal(4), sin_phi, cos_phi)
        port = integrator.heeled(8, Decimal(4), -sin_phi, cos_phi)
        assert float(port.area) == pytest.approx(float(starboard.area), abs=1e-9)
        assert float(port.moment_y) == pytest.approx(-float(starboard.moment_y), abs=1e-9)



class TestWaterplane:
    """Test waterplane heights along the hull."""

    def test_level(self):
        """Test a level waterplane has the same height everywhere."""
        plane = Waterplane.level(Decimal(5), Decimal(50))
        assert plane.is_upright
        assert plane.height_at(Decimal(0)) == Decimal(5)

    def test_trim_by_stern(self):
        """Positive slope deepens the aft end (low X)."""
        plane = Waterplane.level(Decimal(5), Decimal(50), Decimal("0.01"))
        assert plane.height_at(Decimal(0)) == Decimal("5.5")
        assert plane.height_at(Decimal(100)) == Decimal("4.5")

    def test_inclined(self):
        """Test an inclined waterplane carries its trigonometry."""
        plane = Waterplane.inclined(Decimal(4), Decimal(50), Decimal(30))
        assert not plane.is_upright
        assert float(plane.sin_heel) == pytest.approx(0.5)
