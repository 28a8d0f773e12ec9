"""
NAVHYDRO Geometry Model

Discretized hull shape: stations (longitudinal positions), waterlines
(heights above the baseline) and half-breadth offsets on the
station x waterline grid.

Offsets are stored as a dense 2-D grid indexed by station position and
waterline position, with None marking a missing entry. Interpolation
skips missing entries, so sparse tables are usable as long as every
station has at least one offset.

Conventions:
- X increases forward; the aftmost station is the aft perpendicular.
- Z is measured up from the baseline; the keel is at min(0, lowest waterline).
- Offsets are half-breadths of a laterally symmetric hull (breadth = 2Y).
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from navhydro.core.config import OutOfRangePolicy, get_engine_config
from navhydro.core.constants import SEAWATER_DENSITY_KG_M3
from navhydro.core.precision import ZERO, TWO, to_decimal, optional_decimal
from navhydro.errors import ArgumentError, GeometryIncompleteError, GeometryOutOfRangeError

logger = logging.getLogger(__name__)

# Sentinel for a missing offset in the grid
MISSING = None

# (z, half_breadth) node of a station profile
ProfileNode = Tuple[Decimal, Decimal]


# =============================================================================
# GRID ELEMENTS
# =============================================================================

@dataclass(frozen=True)
class Station:
    """Transverse section position."""
    index: int
    x: Decimal

    def __post_init__(self):
        object.__setattr__(self, "x", to_decimal(self.x, "station x"))


@dataclass(frozen=True)
class Waterline:
    """Horizontal plane at height z above the baseline."""
    index: int
    z: Decimal

    def __post_init__(self):
        object.__setattr__(self, "z", to_decimal(self.z, "waterline z"))


@dataclass(frozen=True)
class Offset:
    """Half-breadth at a station/waterline intersection."""
    station_index: int
    waterline_index: int
    half_breadth: Decimal

    def __post_init__(self):
        object.__setattr__(self, "half_breadth", to_decimal(self.half_breadth, "half_breadth"))


# =============================================================================
# LOADCASE
# =============================================================================

@dataclass(frozen=True)
class Loadcase:
    """
    Loading condition snapshot for one calculation.

    rho: fluid density (kg/m³)
    kg: vertical centre of gravity above baseline (m), needed for GM/GZ
    target_displacement: displacement weight (kg) the loadcase floats at
    lcg: longitudinal centre of gravity (m, same axis as station X)
    """
    name: str = "Default"
    rho: Decimal = SEAWATER_DENSITY_KG_M3
    kg: Optional[Decimal] = None
    target_displacement: Optional[Decimal] = None
    lcg: Optional[Decimal] = None
    loadcase_id: str = ""
    vessel_id: str = ""
    notes: str = ""

    def __post_init__(self):
        object.__setattr__(self, "rho", to_decimal(self.rho, "rho"))
        object.__setattr__(self, "kg", optional_decimal(self.kg, "kg"))
        object.__setattr__(self, "target_displacement",
                           optional_decimal(self.target_displacement, "target_displacement"))
        object.__setattr__(self, "lcg", optional_decimal(self.lcg, "lcg"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loadcase_id": self.loadcase_id,
            "vessel_id": self.vessel_id,
            "name": self.name,
            "rho": str(self.rho),
            "kg": None if self.kg is None else str(self.kg),
            "target_displacement": None if self.target_displacement is None else str(self.target_displacement),
            "lcg": None if self.lcg is None else str(self.lcg),
            "notes": self.notes,
        }


# =============================================================================
# HULL GEOMETRY
# =============================================================================

class HullGeometry:
    """
    Immutable offset table with interpolation.

    Raises:
        GeometryIncompleteError: Fewer than 2 stations or 2 waterlines, or a
            station without any offset
        ArgumentError: Duplicate indices, non-increasing coordinates,
            negative half-breadths, or offsets on unknown grid lines
    """

    def __init__(
        self,
        stations: Iterable[Station],
        waterlines: Iterable[Waterline],
        offsets: Iterable[Offset],
        *,
        lpp: Any = None,
        beam: Any = None,
        design_draft: Any = None,
        name: str = "",
    ):
        self.name = name
        self._stations: Tuple[Station, ...] = self._ordered(stations, "station")
        self._waterlines: Tuple[Waterline, ...] = self._ordered(waterlines, "waterline")

        if len(self._stations) < 2:
            raise GeometryIncompleteError(
                f"At least 2 stations required, got {len(self._stations)}",
                station_count=len(self._stations),
            )
        if len(self._waterlines) < 2:
            raise GeometryIncompleteError(
                f"At least 2 waterlines required, got {len(self._waterlines)}",
                waterline_count=len(self._waterlines),
            )

        self._check_increasing([s.x for s in self._stations], "station", "X")
        self._check_increasing([w.z for w in self._waterlines], "waterline", "Z")

        self._station_pos: Dict[int, int] = {s.index: i for i, s in enumerate(self._stations)}
        self._waterline_pos: Dict[int, int] = {w.index: j for j, w in enumerate(self._waterlines)}
        self._grid = self._build_grid(offsets)

        self._keel_z = min(ZERO, self._waterlines[0].z)
        self._profiles = tuple(self._build_profile(i) for i in range(len(self._stations)))

        self._lpp = optional_decimal(lpp, "lpp")
        self._beam = optional_decimal(beam, "beam")
        self._design_draft = optional_decimal(design_draft, "design_draft")
        for label, value in (("lpp", self._lpp), ("beam", self._beam), ("design_draft", self._design_draft)):
            if value is not None and value <= 0:
                raise ArgumentError(f"{label} must be positive: {value}", param=label, value=value)

        logger.debug(f"Built {self!r}")

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _ordered(items: Iterable[Any], kind: str) -> Tuple[Any, ...]:
        ordered = sorted(items, key=lambda item: item.index)
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.index == cur.index:
                raise ArgumentError(f"Duplicate {kind} index {cur.index}", param=f"{kind}_index", value=cur.index)
        return tuple(ordered)

    @staticmethod
    def _check_increasing(values: Sequence[Decimal], kind: str, axis: str) -> None:
        for i in range(1, len(values)):
            if values[i] <= values[i - 1]:
                raise ArgumentError(
                    f"{kind.capitalize()} {axis} must be strictly increasing by index "
                    f"({values[i - 1]} then {values[i]})",
                    param=f"{kind}_{axis.lower()}",
                    value=values[i],
                )

    def _build_grid(self, offsets: Iterable[Offset]) -> Tuple[Tuple[Optional[Decimal], ...], ...]:
        rows: List[List[Optional[Decimal]]] = [
            [MISSING] * len(self._waterlines) for _ in self._stations
        ]
        for offset in offsets:
            i = self._station_pos.get(offset.station_index)
            j = self._waterline_pos.get(offset.waterline_index)
            if i is None:
                raise ArgumentError(
                    f"Offset references unknown station {offset.station_index}",
                    param="station_index", value=offset.station_index,
                )
            if j is None:
                raise ArgumentError(
                    f"Offset references unknown waterline {offset.waterline_index}",
                    param="waterline_index", value=offset.waterline_index,
                )
            if offset.half_breadth < 0:
                raise ArgumentError(
                    f"Negative half-breadth {offset.half_breadth} at station "
                    f"{offset.station_index}, waterline {offset.waterline_index}",
                    param="half_breadth", value=offset.half_breadth,
                )
            rows[i][j] = offset.half_breadth

        for i, row in enumerate(rows):
            if all(y is MISSING for y in row):
                raise GeometryIncompleteError(
                    f"Station {self._stations[i].index} has no offsets",
                    station_index=self._stations[i].index,
                )
        return tuple(tuple(row) for row in rows)

    def _build_profile(self, pos: int) -> Tuple[ProfileNode, ...]:
        nodes = [
            (self._waterlines[j].z, y)
            for j, y in enumerate(self._grid[pos])
            if y is not MISSING
        ]
        # Taper to zero breadth at the keel below the lowest defined offset
        if nodes[0][0] > self._keel_z:
            nodes.insert(0, (self._keel_z, ZERO))
        return tuple(nodes)

    # -------------------------------------------------------------------------
    # Grid access
    # -------------------------------------------------------------------------

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self._stations

    @property
    def waterlines(self) -> Tuple[Waterline, ...]:
        return self._waterlines

    @property
    def station_count(self) -> int:
        return len(self._stations)

    @property
    def waterline_count(self) -> int:
        return len(self._waterlines)

    @property
    def x_positions(self) -> Tuple[Decimal, ...]:
        return tuple(s.x for s in self._stations)

    def offset(self, station_index: int, waterline_index: int) -> Optional[Decimal]:
        """Raw grid value (None when missing)."""
        return self._grid[self.station_position(station_index)][self.waterline_position(waterline_index)]

    def station_position(self, station_index: int) -> int:
        try:
            return self._station_pos[station_index]
        except KeyError:
            raise ArgumentError(f"Unknown station index {station_index}",
                                param="station_index", value=station_index) from None

    def waterline_position(self, waterline_index: int) -> int:
        try:
            return self._waterline_pos[waterline_index]
        except KeyError:
            raise ArgumentError(f"Unknown waterline index {waterline_index}",
                                param="waterline_index", value=waterline_index) from None

    def profile(self, pos: int) -> Tuple[ProfileNode, ...]:
        """
        Ordered (z, half_breadth) nodes of the station at grid position `pos`.

        Missing offsets are skipped; a keel node is prepended when the
        lowest defined offset sits above the keel.
        """
        return self._profiles[pos]

    # -------------------------------------------------------------------------
    # Principal dimensions
    # -------------------------------------------------------------------------

    @property
    def x_aft(self) -> Decimal:
        return self._stations[0].x

    @property
    def x_fwd(self) -> Decimal:
        return self._stations[-1].x

    @property
    def x_mid(self) -> Decimal:
        return (self.x_aft + self.x_fwd) / TWO

    @property
    def length(self) -> Decimal:
        """Length between perpendiculars (given Lpp or the station span)."""
        if self._lpp is not None:
            return self._lpp
        return self.x_fwd - self.x_aft

    @property
    def beam(self) -> Decimal:
        """Moulded beam (given, or twice the largest half-breadth)."""
        if self._beam is not None:
            return self._beam
        return TWO * max(y for row in self._grid for y in row if y is not MISSING)

    @property
    def design_draft(self) -> Optional[Decimal]:
        return self._design_draft

    @property
    def keel_z(self) -> Decimal:
        return self._keel_z

    @property
    def min_z(self) -> Decimal:
        return self._waterlines[0].z

    @property
    def max_z(self) -> Decimal:
        return self._waterlines[-1].z

    @property
    def midship_position(self) -> int:
        """Grid position of the station nearest amidships."""
        x_mid = self.x_mid
        return min(range(len(self._stations)), key=lambda i: (abs(self._stations[i].x - x_mid), i))

    # -------------------------------------------------------------------------
    # Interpolation
    # -------------------------------------------------------------------------

    def half_breadth(
        self,
        station_index: int,
        z: Any,
        policy: Optional[OutOfRangePolicy] = None,
    ) -> Decimal:
        """
        Half-breadth at any height on a station.

        - Between defined offsets: linear interpolation
        - Below the lowest defined offset: linear toward zero at the keel
        - Above the highest: clamp or raise, per policy

        Raises:
            ArgumentError: Unknown station index
            GeometryOutOfRangeError: Above the highest offset with ERROR policy
        """
        return self.half_breadth_at(self.station_position(station_index), to_decimal(z, "z"), policy)

    def half_breadth_at(
        self,
        pos: int,
        z: Decimal,
        policy: Optional[OutOfRangePolicy] = None,
    ) -> Decimal:
        """half_breadth() by grid position."""
        nodes = self._profiles[pos]
        if z <= nodes[0][0]:
            return nodes[0][1] if z == nodes[0][0] else ZERO

        top_z, top_y = nodes[-1]
        if z >= top_z:
            if z == top_z:
                return top_y
            if (policy or get_engine_config().out_of_range_policy) is OutOfRangePolicy.ERROR:
                raise GeometryOutOfRangeError(self._stations[pos].index, z, top_z)
            return top_y

        for (z0, y0), (z1, y1) in zip(nodes, nodes[1:]):
            if z0 <= z <= z1:
                return y0 + (y1 - y0) * (z - z0) / (z1 - z0)
        return top_y

    def __repr__(self) -> str:
        return (
            f"HullGeometry(name={self.name!r}, stations={self.station_count}, "
            f"waterlines={self.waterline_count}, length={self.length}, beam={self.beam})"
        )
