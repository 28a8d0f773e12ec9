"""
physics/curves.py - Hydrostatic and Bonjean curves.

Sweeps the hydrostatics calculator over a linearly spaced draft range
(endpoints exact) and assembles (draft, value) curves per requested type.
Bonjean curves give one curve per station: immersed sectional area
against draft.

The displacement curve must never decrease with draft; a decrease means a
geometry or integration defect and raises MonotonicityError.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from navhydro.core.cancellation import CancellationToken, check_cancelled
from navhydro.core.config import EngineConfig, get_engine_config
from navhydro.core.precision import engine_context, quantize, to_decimal
from navhydro.errors import ArgumentError, MonotonicityError
from navhydro.geometry.model import HullGeometry, Loadcase
from .hydrostatics import HydroResult, HydrostaticsCalculator

logger = logging.getLogger(__name__)


class CurveType(Enum):
    """Curves the generator can produce."""
    DISPLACEMENT = "displacement"
    VOLUME = "volume"
    KB = "kb"
    LCB = "lcb"
    AWP = "awp"
    GMT = "gmt"
    BONJEAN = "bonjean"


# (y-axis label, HydroResult attribute)
CURVE_DEFINITIONS: Dict[CurveType, Tuple[str, str]] = {
    CurveType.DISPLACEMENT: ("Displacement (kg)", "disp_weight"),
    CurveType.VOLUME: ("Displaced volume (m³)", "disp_volume"),
    CurveType.KB: ("KB (m)", "kb"),
    CurveType.LCB: ("LCB (m)", "lcb"),
    CurveType.AWP: ("Waterplane area (m²)", "awp"),
    CurveType.GMT: ("GMt (m)", "gmt"),
}

DRAFT_LABEL = "Draft (m)"
BONJEAN_LABEL = "Sectional area (m²)"


@dataclass(frozen=True)
class CurvePoint:
    x: Decimal
    y: Decimal


@dataclass(frozen=True)
class Curve:
    """Ordered (independent, dependent) pairs for one curve."""
    curve_type: CurveType
    x_label: str
    y_label: str
    points: Tuple[CurvePoint, ...]
    station_index: Optional[int] = None   # Bonjean curves only
    station_x: Optional[Decimal] = None   # Bonjean curves only

    @property
    def name(self) -> str:
        if self.curve_type is CurveType.BONJEAN:
            return f"bonjean_{self.station_index}"
        return self.curve_type.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "curve_type": self.curve_type.value,
            "x_label": self.x_label,
            "y_label": self.y_label,
            "station_index": self.station_index,
            "station_x": None if self.station_x is None else str(self.station_x),
            "points": [[str(p.x), str(p.y)] for p in self.points],
        }


def linear_drafts(min_draft: Decimal, max_draft: Decimal, points: int, digits: int) -> List[Decimal]:
    """`points` drafts from min to max inclusive, endpoints exact."""
    step = (max_draft - min_draft) / (points - 1)
    drafts = [quantize(min_draft + step * i, digits) for i in range(points - 1)]
    drafts.append(max_draft)
    drafts[0] = min_draft
    return drafts


# =============================================================================
# CURVE GENERATOR
# =============================================================================

class CurveGenerator:
    """Hydrostatic curves over a draft range."""

    def __init__(
        self,
        calculator: Optional[HydrostaticsCalculator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or (calculator.config if calculator else get_engine_config())
        self.calculator = calculator or HydrostaticsCalculator(self.config)

    def generate(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        curve_types: Sequence[Any],
        min_draft: Any,
        max_draft: Any,
        points: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Curve]:
        """
        Generate the requested curves.

        Args:
            geometry: Hull offsets
            loadcase: Density and KG (KG needed for GMt)
            curve_types: CurveType members or their string values
            min_draft: Lowest draft (m), > 0
            max_draft: Highest draft (m), > min_draft
            points: Drafts in the sweep, >= 2 (default from config)
            cancel_token: Checked between drafts

        Returns:
            Curves in request order; BONJEAN expands to one curve per station

        Raises:
            ArgumentError: Bad range, fewer than 2 points, unknown type, or
                GMt without KG
            MonotonicityError: Displacement decreases with draft
            CalculationCancelledError: If cancel_token fires
        """
        with engine_context():
            types = self._parse_types(curve_types)
            if points is None:
                points = self.config.curve_default_points
            min_draft, max_draft = self._parse_range(min_draft, max_draft, points)
            if CurveType.GMT in types and loadcase.kg is None:
                raise ArgumentError("GMt curve requires a loadcase KG", param="kg", value=None)

            drafts = linear_drafts(min_draft, max_draft, points, self.config.fractional_digits)
            logger.debug(f"Generating {[t.value for t in types]} over {len(drafts)} drafts")

            table: List[HydroResult] = []
            if any(t is not CurveType.BONJEAN for t in types):
                table = self.calculator.compute_table(geometry, loadcase, drafts, cancel_token)
                self._check_monotonic(table)

            curves: List[Curve] = []
            for curve_type in types:
                if curve_type is CurveType.BONJEAN:
                    curves.extend(self._bonjean(geometry, drafts, cancel_token))
                    continue
                y_label, attribute = CURVE_DEFINITIONS[curve_type]
                curves.append(Curve(
                    curve_type=curve_type,
                    x_label=DRAFT_LABEL,
                    y_label=y_label,
                    points=tuple(CurvePoint(r.draft, getattr(r, attribute)) for r in table),
                ))
            return curves

    def _bonjean(
        self,
        geometry: HullGeometry,
        drafts: Sequence[Decimal],
        cancel_token: Optional[CancellationToken],
    ) -> List[Curve]:
        columns: List[List[CurvePoint]] = [[] for _ in geometry.stations]
        for i, draft in enumerate(drafts):
            check_cancelled(cancel_token, "bonjean", f"{i}/{len(drafts)}")
            for pos, (_, area) in enumerate(self.calculator.sectional_areas(geometry, draft)):
                columns[pos].append(CurvePoint(draft, area))
        return [
            Curve(
                curve_type=CurveType.BONJEAN,
                x_label=DRAFT_LABEL,
                y_label=BONJEAN_LABEL,
                points=tuple(column),
                station_index=station.index,
                station_x=station.x,
            )
            for station, column in zip(geometry.stations, columns)
        ]

    @staticmethod
    def _check_monotonic(table: Sequence[HydroResult]) -> None:
        for before, after in zip(table, table[1:]):
            if after.disp_volume < before.disp_volume:
                logger.error(
                    f"Displacement decreases between T={before.draft} ({before.disp_volume}) "
                    f"and T={after.draft} ({after.disp_volume})"
                )
                raise MonotonicityError(
                    CurveType.DISPLACEMENT.value,
                    before.draft, after.draft, before.disp_volume, after.disp_volume,
                )

    @staticmethod
    def _parse_types(curve_types: Sequence[Any]) -> List[CurveType]:
        if isinstance(curve_types, (str, CurveType)):
            curve_types = [curve_types]
        parsed = []
        for value in curve_types:
            try:
                parsed.append(value if isinstance(value, CurveType) else CurveType(str(value).lower()))
            except ValueError:
                raise ArgumentError(
                    f"Unknown curve type '{value}'. Valid: {[t.value for t in CurveType]}",
                    param="curve_types", value=value,
                ) from None
        if not parsed:
            raise ArgumentError("At least one curve type is required", param="curve_types", value=[])
        return parsed

    @staticmethod
    def _parse_range(min_draft: Any, max_draft: Any, points: int) -> Tuple[Decimal, Decimal]:
        if isinstance(points, bool) or not isinstance(points, int) or points < 2:
            raise ArgumentError(f"points must be an integer >= 2: {points}", param="points", value=points)
        try:
            low = to_decimal(min_draft, "min_draft")
            high = to_decimal(max_draft, "max_draft")
        except (TypeError, ValueError) as e:
            raise ArgumentError(str(e)) from None
        if low <= 0:
            raise ArgumentError(f"min_draft must be positive: {low}", param="min_draft", value=low)
        if low >= high:
            raise ArgumentError(
                f"min_draft ({low}) must be less than max_draft ({high})",
                param="max_draft", value=high,
            )
        return low, high
