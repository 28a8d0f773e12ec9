"""
geometry/library.py - Standard hull forms with known hydrostatics.

Analytic hulls used as templates and as references for verifying the
integration:

- Rectangular barge: every property has a closed form.
    V = L·B·T, KB = T/2, LCB = L/2, Awp = L·B,
    BMt = B²/(12T), BMl = L²/(12T), Cb = Cp = Cm = Cwp = 1
- Wigley hull: y = B/2·(1 − ξ²)·(1 − ζ²), parabolic both ways,
  vertical-sided above the design waterline.
    V = 4/9·L·B·T, KB = 5T/8, Awp = 2/3·L·B,
    BMt = 3B²/(35T), BMl = 3L²/(40T)
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, List, Optional

from navhydro.core.precision import ONE, TWO, to_decimal
from navhydro.errors import ArgumentError
from .model import HullGeometry, Offset, Station, Waterline


def _linspace(start: Decimal, stop: Decimal, count: int) -> List[Decimal]:
    step = (stop - start) / (count - 1)
    values = [start + step * i for i in range(count - 1)]
    values.append(stop)
    return values


def _require_positive(**values: Decimal) -> None:
    for name, value in values.items():
        if value <= 0:
            raise ArgumentError(f"{name} must be positive: {value}", param=name, value=value)


# =============================================================================
# RECTANGULAR BARGE
# =============================================================================

def rectangular_barge(
    length=100,
    beam=20,
    depth=10,
    station_count: int = 5,
    waterline_count: int = 5,
    design_draft=None,
    name: str = "Rectangular barge",
) -> HullGeometry:
    """Box-shaped hull with constant half-breadth B/2 at every offset."""
    length = to_decimal(length, "length")
    beam = to_decimal(beam, "beam")
    depth = to_decimal(depth, "depth")
    _require_positive(length=length, beam=beam, depth=depth)
    if station_count < 2 or waterline_count < 2:
        raise ArgumentError("At least 2 stations and 2 waterlines required")

    xs = _linspace(Decimal(0), length, station_count)
    zs = _linspace(Decimal(0), depth, waterline_count)
    half_beam = beam / TWO

    return HullGeometry(
        [Station(i, x) for i, x in enumerate(xs)],
        [Waterline(j, z) for j, z in enumerate(zs)],
        [Offset(i, j, half_beam) for i in range(station_count) for j in range(waterline_count)],
        lpp=length,
        beam=beam,
        design_draft=design_draft,
        name=name,
    )


# =============================================================================
# WIGLEY HULL
# =============================================================================

def wigley_hull(
    length=100,
    beam=10,
    draft="6.25",
    depth: Optional[object] = None,
    station_count: int = 21,
    waterlines_below_draft: int = 10,
    name: str = "Wigley hull",
) -> HullGeometry:
    """
    Wigley parabolic hull.

    Waterlines are equally spaced at draft / waterlines_below_draft up to
    `depth` (default 1.6 x draft), so the design waterline is a grid line.
    """
    length = to_decimal(length, "length")
    beam = to_decimal(beam, "beam")
    draft = to_decimal(draft, "draft")
    depth = to_decimal(depth, "depth") if depth is not None else draft * Decimal("1.6")
    _require_positive(length=length, beam=beam, draft=draft)
    if depth < draft:
        raise ArgumentError(f"depth {depth} below draft {draft}", param="depth", value=depth)
    if station_count < 3 or waterlines_below_draft < 2:
        raise ArgumentError("At least 3 stations and 2 waterlines below the draft required")

    dz = draft / waterlines_below_draft
    zs = [dz * j for j in range(waterlines_below_draft + 1)]
    while zs[-1] < depth:
        zs.append(zs[-1] + dz)

    xs = _linspace(Decimal(0), length, station_count)
    half_beam = beam / TWO
    offsets = []
    for i, x in enumerate(xs):
        xi = TWO * x / length - ONE
        plan = half_beam * (ONE - xi * xi)
        for j, z in enumerate(zs):
            zeta = (draft - z) / draft if z < draft else Decimal(0)
            offsets.append(Offset(i, j, plan * (ONE - zeta * zeta)))

    return HullGeometry(
        [Station(i, x) for i, x in enumerate(xs)],
        [Waterline(j, z) for j, z in enumerate(zs)],
        offsets,
        lpp=length,
        beam=beam,
        design_draft=draft,
        name=name,
    )


def wigley_reference(length=100, beam=10, draft="6.25") -> Dict[str, Decimal]:
    """Closed-form hydrostatics of the Wigley hull at its design draft."""
    length = to_decimal(length, "length")
    beam = to_decimal(beam, "beam")
    draft = to_decimal(draft, "draft")
    volume = Decimal(4) / Decimal(9) * length * beam * draft
    awp = Decimal(2) / Decimal(3) * length * beam
    # It = ∫ (2/3) y³ dx with y = B/2 (1 − ξ²): (2/3)(B/2)³ · L/2 · 32/35
    it = Decimal(2) / Decimal(3) * (beam / TWO) ** 3 * length / TWO * Decimal(32) / Decimal(35)
    # Il = 2 ∫ x² y dx about amidships: 2 · B/2 · (L/2)³ · 4/15
    il = beam * (length / TWO) ** 3 * Decimal(4) / Decimal(15)
    return {
        "volume": volume,
        "kb": draft * Decimal(5) / Decimal(8),
        "lcb": length / TWO,
        "awp": awp,
        "it": it,
        "il": il,
        "bmt": it / volume,
        "bml": il / volume,
        "cb": Decimal(4) / Decimal(9),
        "cwp": Decimal(2) / Decimal(3),
        "cm": Decimal(2) / Decimal(3),
        "cp": Decimal(2) / Decimal(3),
    }
