"""
physics/sections.py - Sectional integration.

Submerged area and moments of one transverse section at a given waterline.

Upright sections
----------------
Each station profile is split once into fixed panels over its (z, y)
nodes:

- a quadratic panel per node pair (the interpolating parabola, whose full
  integral is Simpson's rule, in non-uniform form for unequal spacing)
- a linear panel for a trailing odd interval
- two linear panels for a pair whose parabola would dip below zero breadth

The submerged area is the exact integral of that piecewise profile up to the
local draft, so a draft between two waterlines gets a partial-panel
contribution rather than a truncation. The panel layout does not depend on
the draft, so area is continuous in draft, and the integrand is never
negative, so area never decreases as draft rises. A two-node profile is a
single linear panel, i.e. the trapezoidal rule.

Heeled sections
---------------
The outline is made of the same panels: up the starboard side, across the
deck (the highest defined node), down the port side and back along the
bottom. It is clipped against the submerged half-plane
z·cosφ − y·sinφ ≤ h, cutting curved edges at the roots of the quadratic
level function, and the gaps are closed along the waterline (as in
Sutherland-Hodgman). Area and first moments are exact line integrals
around the clipped outline (Green's theorem), so a heeled section and the
upright section describe the same shape.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from navhydro.core.config import OutOfRangePolicy, get_engine_config
from navhydro.core.precision import ZERO, ONE, TWO, cos_deg, sin_deg
from navhydro.errors import GeometryOutOfRangeError
from navhydro.geometry.model import HullGeometry, ProfileNode

THREE = Decimal(3)
FOUR = Decimal(4)

# (y, z) point of a section outline, body axes
Vertex = Tuple[Decimal, Decimal]

# Polynomial coefficients, lowest power first
Poly = Tuple[Decimal, ...]


# =============================================================================
# WATERPLANE
# =============================================================================

@dataclass(frozen=True)
class Waterplane:
    """
    Flat free surface relative to the hull.

    height: height of the waterplane above the baseline at x_ref, measured
        normal to the heeled baseline (draft·cosφ)
    slope: tan(trim), positive by the stern
    heel: heel angle in degrees, positive with starboard immersed
    """
    height: Decimal
    x_ref: Decimal
    slope: Decimal = ZERO
    heel: Decimal = ZERO
    sin_heel: Decimal = ZERO
    cos_heel: Decimal = ONE

    @classmethod
    def level(cls, draft: Decimal, x_ref: Decimal, slope: Decimal = ZERO) -> "Waterplane":
        return cls(height=draft, x_ref=x_ref, slope=slope)

    @classmethod
    def inclined(cls, height: Decimal, x_ref: Decimal, heel: Decimal, slope: Decimal = ZERO) -> "Waterplane":
        return cls(height=height, x_ref=x_ref, slope=slope, heel=heel,
                   sin_heel=sin_deg(heel), cos_heel=cos_deg(heel))

    @property
    def is_upright(self) -> bool:
        return self.heel.is_zero()

    def height_at(self, x: Decimal) -> Decimal:
        """Waterplane height at station x (the local draft when upright)."""
        if self.slope.is_zero():
            return self.height
        return self.height + (self.x_ref - x) * self.slope * self.cos_heel


# =============================================================================
# SECTION PROPERTIES
# =============================================================================

@dataclass(frozen=True)
class SectionProperties:
    """Submerged properties of one section (both sides)."""
    area: Decimal                 # m²
    moment_y: Decimal             # ∫ y dA about the centreplane (m³)
    moment_z: Decimal             # ∫ z dA about the baseline (m³)
    waterline_breadth: Decimal    # breadth of the waterline chord (m)
    waterline_centre: Decimal     # chord mid-point along the waterplane (m)
    above_range: bool = False     # waterline above the highest offset (clamped)

    @property
    def centroid_z(self) -> Decimal:
        return self.moment_z / self.area if self.area else ZERO


EMPTY_SECTION = SectionProperties(ZERO, ZERO, ZERO, ZERO, ZERO)


# =============================================================================
# PANELS
# =============================================================================

@dataclass(frozen=True)
class Panel:
    """y(z) = c0 + c1·s + c2·s² for s = z − z0 on [z0, z1]."""
    z0: Decimal
    z1: Decimal
    c0: Decimal
    c1: Decimal
    c2: Decimal = ZERO

    def integrals(self, t: Decimal) -> Tuple[Decimal, Decimal]:
        """(∫ y ds, ∫ s·y ds) over s in [0, t]."""
        t2 = t * t
        t3 = t2 * t
        area = self.c0 * t + self.c1 * t2 / TWO + self.c2 * t3 / THREE
        moment = self.c0 * t2 / TWO + self.c1 * t3 / THREE + self.c2 * t3 * t / FOUR
        return area, moment

    def breadth_at(self, t: Decimal) -> Decimal:
        return self.c0 + (self.c1 + self.c2 * t) * t


def _linear_panel(a: ProfileNode, b: ProfileNode) -> Panel:
    (za, ya), (zb, yb) = a, b
    return Panel(za, zb, ya, (yb - ya) / (zb - za))


def _quadratic_panel(a: ProfileNode, b: ProfileNode, c: ProfileNode) -> Optional[Panel]:
    """Interpolating parabola through three nodes, or None if it goes negative."""
    (za, ya), (zb, yb), (zc, yc) = a, b, c
    sb = zb - za
    sc = zc - za
    d1 = (yb - ya) / sb
    d2 = (yc - yb) / (sc - sb)
    c2 = (d2 - d1) / sc
    c1 = d1 - c2 * sb
    if c2 > 0:
        s_min = -c1 / (TWO * c2)
        if ZERO < s_min < sc and ya - c1 * c1 / (FOUR * c2) < 0:
            return None
    return Panel(za, zc, ya, c1, c2)


def build_panels(nodes: Sequence[ProfileNode]) -> Tuple[Panel, ...]:
    """Split a station profile into Simpson pairs plus trapezoidal fallbacks."""
    panels: List[Panel] = []
    i = 0
    while i + 2 < len(nodes):
        quadratic = _quadratic_panel(nodes[i], nodes[i + 1], nodes[i + 2])
        if quadratic is not None:
            panels.append(quadratic)
        else:
            panels.append(_linear_panel(nodes[i], nodes[i + 1]))
            panels.append(_linear_panel(nodes[i + 1], nodes[i + 2]))
        i += 2
    if i + 1 < len(nodes):
        panels.append(_linear_panel(nodes[i], nodes[i + 1]))
    return tuple(panels)


# =============================================================================
# OUTLINES
# =============================================================================

def _poly_add(a: Poly, b: Poly) -> Poly:
    n = max(len(a), len(b))
    return tuple((a[k] if k < len(a) else ZERO) + (b[k] if k < len(b) else ZERO) for k in range(n))


def _poly_scale(a: Poly, factor: Decimal) -> Poly:
    return tuple(c * factor for c in a)


def _poly_mul(a: Poly, b: Poly) -> Poly:
    out = [ZERO] * (len(a) + len(b) - 1)
    for i, ca in enumerate(a):
        for j, cb in enumerate(b):
            out[i + j] += ca * cb
    return tuple(out)


def _poly_deriv(a: Poly) -> Poly:
    return tuple(c * k for k, c in enumerate(a) if k) or (ZERO,)


def _poly_eval(a: Poly, t: Decimal) -> Decimal:
    value = ZERO
    for c in reversed(a):
        value = value * t + c
    return value


def _poly_integral(a: Poly, t0: Decimal, t1: Decimal) -> Decimal:
    """∫ a(t) dt from t0 to t1."""
    total = ZERO
    p0, p1 = t0, t1
    for k, c in enumerate(a):
        total += c * (p1 - p0) / (k + 1)
        p0 *= t0
        p1 *= t1
    return total


def _roots_between(a: Poly, t0: Decimal, t1: Decimal) -> List[Decimal]:
    """Roots of a quadratic strictly inside (t0, t1), ordered from t0 to t1."""
    c = a[0]
    b = a[1] if len(a) > 1 else ZERO
    q2 = a[2] if len(a) > 2 else ZERO
    if q2.is_zero():
        candidates = [] if b.is_zero() else [-c / b]
    else:
        disc = b * b - FOUR * q2 * c
        if disc < 0:
            return []
        root = disc.sqrt()
        q = -(b + root) / TWO if b >= 0 else -(b - root) / TWO
        candidates = [q / q2] if q.is_zero() else [q / q2, c / q]
    low, high = min(t0, t1), max(t0, t1)
    return sorted({t for t in candidates if low < t < high}, reverse=t0 > t1)


@dataclass(frozen=True)
class Edge:
    """Outline piece (y(t), z(t)) traced from t0 to t1."""
    y: Poly
    z: Poly
    t0: Decimal
    t1: Decimal

    @classmethod
    def segment(cls, p: Vertex, q: Vertex) -> "Edge":
        return cls((p[0], q[0] - p[0]), (p[1], q[1] - p[1]), ZERO, ONE)

    def point(self, t: Decimal) -> Vertex:
        return _poly_eval(self.y, t), _poly_eval(self.z, t)

    @property
    def start(self) -> Vertex:
        return self.point(self.t0)

    @property
    def end(self) -> Vertex:
        return self.point(self.t1)

    def between(self, t0: Decimal, t1: Decimal) -> "Edge":
        return Edge(self.y, self.z, t0, t1)

    def level(self, sin_heel: Decimal, cos_heel: Decimal) -> Poly:
        """z·cosφ − y·sinφ along the edge."""
        return _poly_add(_poly_scale(self.z, cos_heel), _poly_scale(self.y, -sin_heel))

    def integrals(self) -> Tuple[Decimal, Decimal, Decimal]:
        """Contributions to (area, ∫ y dA, ∫ z dA) of a counter-clockwise outline."""
        dy = _poly_deriv(self.y)
        dz = _poly_deriv(self.z)
        cross = _poly_add(_poly_mul(self.y, dz), _poly_scale(_poly_mul(self.z, dy), -ONE))
        area = _poly_integral(cross, self.t0, self.t1) / TWO
        moment_y = _poly_integral(_poly_mul(_poly_mul(self.y, self.y), dz), self.t0, self.t1) / TWO
        moment_z = -_poly_integral(_poly_mul(_poly_mul(self.z, self.z), dy), self.t0, self.t1) / TWO
        return area, moment_y, moment_z


def section_outline(panels: Sequence[Panel]) -> Tuple[Edge, ...]:
    """
    Closed section outline, counter-clockwise in (y, z).

    Up the starboard panels, across the deck, down the port panels and back
    along the bottom.
    """
    edges: List[Edge] = []
    for panel in panels:
        edges.append(Edge((panel.c0, panel.c1, panel.c2), (panel.z0, ONE), ZERO, panel.z1 - panel.z0))
    top = panels[-1]
    top_y = top.breadth_at(top.z1 - top.z0)
    if top_y > 0:
        edges.append(Edge.segment((top_y, top.z1), (-top_y, top.z1)))
    for panel in reversed(panels):
        edges.append(Edge((-panel.c0, -panel.c1, -panel.c2), (panel.z0, ONE), panel.z1 - panel.z0, ZERO))
    bottom = panels[0]
    if bottom.c0 > 0:
        edges.append(Edge.segment((-bottom.c0, bottom.z0), (bottom.c0, bottom.z0)))
    return tuple(edges)


def clip_outline(
    outline: Sequence[Edge],
    sin_heel: Decimal,
    cos_heel: Decimal,
    height: Decimal,
) -> Tuple[List[Edge], List[Vertex]]:
    """
    Clip to the submerged half-plane z·cosφ − y·sinφ ≤ height.

    Returns:
        (clipped outline, points lying on the waterline)
    """
    pieces: List[Edge] = []
    surface: List[Vertex] = []
    for edge in outline:
        level = _poly_add(edge.level(sin_heel, cos_heel), (-height,))
        if _poly_eval(level, edge.t0).is_zero():
            surface.append(edge.start)
        cuts = _roots_between(level, edge.t0, edge.t1)
        surface.extend(edge.point(t) for t in cuts)
        bounds = [edge.t0] + cuts + [edge.t1]
        for a, b in zip(bounds, bounds[1:]):
            if _poly_eval(level, (a + b) / TWO) <= 0:
                pieces.append(edge.between(a, b))

    # Close the gaps along the waterline
    closed: List[Edge] = []
    for k, piece in enumerate(pieces):
        closed.append(piece)
        following = pieces[(k + 1) % len(pieces)].start
        if piece.end != following:
            closed.append(Edge.segment(piece.end, following))
    return closed, surface


def outline_properties(outline: Sequence[Edge]) -> Tuple[Decimal, Decimal, Decimal]:
    """(area, ∫ y dA, ∫ z dA) of a closed outline."""
    area = moment_y = moment_z = ZERO
    for edge in outline:
        a, my, mz = edge.integrals()
        area += a
        moment_y += my
        moment_z += mz
    return area, moment_y, moment_z


# =============================================================================
# SECTIONAL INTEGRATOR
# =============================================================================

class SectionalIntegrator:
    """
    Section-by-section integration for one hull geometry.

    Panels and outlines are derived once from the (immutable) geometry;
    the integrator holds no other state.
    """

    def __init__(self, geometry: HullGeometry, policy: Optional[OutOfRangePolicy] = None):
        self.geometry = geometry
        self.policy = policy or get_engine_config().out_of_range_policy
        count = geometry.station_count
        self._panels = tuple(build_panels(geometry.profile(i)) for i in range(count))
        self._outlines = tuple(section_outline(panels) for panels in self._panels)

    def section(self, pos: int, waterplane: Waterplane) -> SectionProperties:
        """Section properties at grid position `pos` under `waterplane`."""
        height = waterplane.height_at(self.geometry.stations[pos].x)
        if waterplane.is_upright:
            return self.upright(pos, height)
        return self.heeled(pos, height, waterplane.sin_heel, waterplane.cos_heel)

    def upright(self, pos: int, draft: Decimal) -> SectionProperties:
        """
        Upright section up to local draft `draft`.

        Raises:
            GeometryOutOfRangeError: draft above the highest offset with the
                ERROR policy
        """
        nodes = self.geometry.profile(pos)
        bottom_z = nodes[0][0]
        if draft <= bottom_z:
            return EMPTY_SECTION

        top_z, top_y = nodes[-1]
        above = draft > top_z
        if above and self.policy is OutOfRangePolicy.ERROR:
            raise GeometryOutOfRangeError(self.geometry.stations[pos].index, draft, top_z)

        area = moment = ZERO
        half_breadth = top_y
        for panel in self._panels[pos]:
            if draft <= panel.z0:
                break
            t = min(draft, panel.z1) - panel.z0
            panel_area, panel_moment = panel.integrals(t)
            area += panel_area
            moment += panel.z0 * panel_area + panel_moment
            if draft <= panel.z1:
                half_breadth = panel.breadth_at(t)

        if above:
            # Vertical extension of the topmost offset
            rise = draft - top_z
            area += top_y * rise
            moment += top_y * rise * (top_z + draft) / TWO

        return SectionProperties(
            area=TWO * area,
            moment_y=ZERO,
            moment_z=TWO * moment,
            waterline_breadth=TWO * half_breadth,
            waterline_centre=ZERO,
            above_range=above,
        )

    def heeled(self, pos: int, height: Decimal, sin_heel: Decimal, cos_heel: Decimal) -> SectionProperties:
        """Section clipped by an inclined waterline at normal height `height`."""
        clipped, surface = clip_outline(self._outlines[pos], sin_heel, cos_heel, height)
        area, moment_y, moment_z = outline_properties(clipped)

        breadth = centre = ZERO
        if len(surface) >= 2:
            positions = [y * cos_heel + z * sin_heel for y, z in surface]
            low, high = min(positions), max(positions)
            breadth = high - low
            centre = (high + low) / TWO

        return SectionProperties(
            area=area,
            moment_y=moment_y,
            moment_z=moment_z,
            waterline_breadth=breadth,
            waterline_centre=centre,
        )

    def height_range(self, pos: int, sin_heel: Decimal, cos_heel: Decimal) -> Tuple[Decimal, Decimal]:
        """Lowest and highest z·cosφ − y·sinφ over the section outline."""
        levels: List[Decimal] = []
        for edge in self._outlines[pos]:
            level = edge.level(sin_heel, cos_heel)
            levels.append(_poly_eval(level, edge.t0))
            levels.append(_poly_eval(level, edge.t1))
            if len(level) > 2 and not level[2].is_zero():
                t = -level[1] / (TWO * level[2])
                if min(edge.t0, edge.t1) < t < max(edge.t0, edge.t1):
                    levels.append(_poly_eval(level, t))
        return min(levels), max(levels)
