"""
NAVHYDRO Hydrostatics Calculator

Direct integration of an offset table at one floating condition
(draft, trim, heel).

- Sections are integrated vertically (physics/sections.py)
- Section areas and moments are integrated along the stations with
  non-negative composite Simpson weights -> V, LCB, KB, TCB
- Waterline breadths are integrated separately -> Awp, LCF, IL, IT
- BM = I / V, GM = KB + BM - KG, form coefficients from L, B, T

Trim is positive by the stern: local draft T(x) = T + (x_mid - x)·tan(trim),
with X increasing forward.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from navhydro.core.cancellation import CancellationToken, check_cancelled
from navhydro.core.config import EngineConfig, get_engine_config
from navhydro.core.constants import CM_PER_M
from navhydro.core.precision import (
    ZERO, TWO, atan_deg, cos_deg, engine_context, quantize, tan_deg, to_decimal,
)
from navhydro.errors import ArgumentError, InvalidOperationError
from navhydro.geometry.model import HullGeometry, Loadcase, Station
from .integration import simpson_weights
from .sections import SectionalIntegrator, SectionProperties, Waterplane

logger = logging.getLogger(__name__)

TWELVE = Decimal(12)

# Physical limits for the inclination inputs (degrees)
MAX_TRIM_DEG = Decimal(45)
MAX_HEEL_DEG = Decimal(90)


# =============================================================================
# HYDRO RESULT
# =============================================================================

@dataclass(frozen=True)
class HydroResult:
    """
    Hydrostatic properties at one floating condition.

    Lengths in m, areas in m², volumes in m³, weights in kg, angles in
    degrees. Every value is quantized to the configured fractional digits.
    """
    # Condition
    draft: Decimal            # Draft amidships
    trim_angle: Decimal       # Positive by the stern
    heel_angle: Decimal       # Positive with starboard immersed
    draft_aft: Decimal        # Draft at the aftmost station
    draft_fwd: Decimal        # Draft at the foremost station
    rho: Decimal              # Fluid density (kg/m³)

    # Displacement
    disp_volume: Decimal
    disp_weight: Decimal

    # Centre of buoyancy
    kb: Decimal
    lcb: Decimal
    tcb: Decimal

    # Waterplane
    awp: Decimal
    lcf: Decimal
    iwp: Decimal              # Longitudinal second moment about LCF (m⁴)
    iwp_transverse: Decimal   # Transverse second moment about the centreline of flotation (m⁴)

    # Metacentre
    bmt: Decimal
    bml: Decimal
    kmt: Decimal
    kml: Decimal
    gmt: Optional[Decimal]    # Requires KG
    gml: Optional[Decimal]    # Requires KG

    # Form coefficients
    cb: Decimal
    cp: Decimal
    cm: Decimal
    cwp: Decimal

    # Trim/immersion parameters
    tpc: Decimal              # kg per cm immersion
    mct: Decimal              # kg·m per cm trim

    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary; decimals as fixed-point strings."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Decimal):
                data[f.name] = str(value)
            elif f.name == "warnings":
                data[f.name] = list(value)
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydroResult":
        """Deserialize from dictionary."""
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "warnings":
                values[f.name] = tuple(data.get("warnings", ()))
            elif f.name in ("gmt", "gml"):
                raw = data.get(f.name)
                values[f.name] = None if raw is None else to_decimal(raw, f.name)
            else:
                values[f.name] = to_decimal(data.get(f.name, 0), f.name)
        return cls(**values)


@dataclass(frozen=True)
class Buoyancy:
    """Unrounded displaced volume and its first moments."""
    volume: Decimal
    moment_x: Decimal
    moment_y: Decimal
    moment_z: Decimal


# =============================================================================
# HYDROSTATICS CALCULATOR
# =============================================================================

class HydrostaticsCalculator:
    """
    Hydrostatics by direct integration of the offset table.

    Pure function of (geometry, loadcase, draft, trim, heel): no state is
    kept between calls.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_engine_config()

    def integrator(self, geometry: HullGeometry) -> SectionalIntegrator:
        return SectionalIntegrator(geometry, self.config.out_of_range_policy)

    def compute_at(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        draft: Any,
        trim_angle: Any = None,
        heel_angle: Any = None,
    ) -> HydroResult:
        """
        Calculate hydrostatics at a draft amidships.

        Args:
            geometry: Hull offsets
            loadcase: Density and KG
            draft: Draft amidships (m)
            trim_angle: Trim (degrees, positive by the stern)
            heel_angle: Heel (degrees, positive starboard down)

        Returns:
            HydroResult

        Raises:
            ArgumentError: draft <= 0, rho <= 0, |trim| >= 45°, |heel| > 90°
            InvalidOperationError: Nothing submerged at this condition
        """
        with engine_context():
            draft = self._positive(draft, "draft")
            trim = self._angle(trim_angle, "trim_angle", MAX_TRIM_DEG, inclusive=False)
            heel = self._angle(heel_angle, "heel_angle", MAX_HEEL_DEG, inclusive=True)
            return self._compute(self.integrator(geometry), geometry, loadcase,
                                 draft, tan_deg(trim), trim, heel)

    def compute_at_drafts(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        draft_aft: Any,
        draft_fwd: Any,
        heel_angle: Any = None,
    ) -> HydroResult:
        """Calculate hydrostatics from drafts at the aft and forward stations."""
        with engine_context():
            draft_aft = self._positive(draft_aft, "draft_aft")
            draft_fwd = self._positive(draft_fwd, "draft_fwd")
            heel = self._angle(heel_angle, "heel_angle", MAX_HEEL_DEG, inclusive=True)
            return self.compute_drafts_unchecked(self.integrator(geometry), geometry, loadcase,
                                                 draft_aft, draft_fwd, heel)

    def compute_table(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        drafts: Iterable[Any],
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[HydroResult]:
        """
        Calculate hydrostatics at each draft (level trim, upright).

        Raises:
            CalculationCancelledError: If cancel_token fires between drafts
        """
        with engine_context():
            values = [self._positive(d, "draft") for d in drafts]
            integrator = self.integrator(geometry)
            results = []
            for i, draft in enumerate(values):
                check_cancelled(cancel_token, "compute_table", f"{i}/{len(values)}")
                results.append(self._compute(integrator, geometry, loadcase, draft, ZERO, ZERO, ZERO))
            return results

    def sectional_areas(
        self,
        geometry: HullGeometry,
        draft: Any,
    ) -> List[Tuple[Station, Decimal]]:
        """Immersed area of every station at a level draft (Bonjean ordinates)."""
        with engine_context():
            draft = self._positive(draft, "draft")
            integrator = self.integrator(geometry)
            digits = self.config.fractional_digits
            return [
                (station, quantize(integrator.upright(i, draft).area, digits))
                for i, station in enumerate(geometry.stations)
            ]

    # =========================================================================
    # INTEGRATION
    # =========================================================================

    def buoyancy(
        self,
        integrator: SectionalIntegrator,
        waterplane: Waterplane,
    ) -> Buoyancy:
        """Displaced volume and first moments under an arbitrary waterplane."""
        geometry = integrator.geometry
        xs = geometry.x_positions
        weights = simpson_weights(xs)
        volume = moment_x = moment_y = moment_z = ZERO
        for i, (w, x) in enumerate(zip(weights, xs)):
            section = integrator.section(i, waterplane)
            volume += w * section.area
            moment_x += w * x * section.area
            moment_y += w * section.moment_y
            moment_z += w * section.moment_z
        return Buoyancy(volume, moment_x, moment_y, moment_z)

    def compute_drafts_unchecked(
        self,
        integrator: SectionalIntegrator,
        geometry: HullGeometry,
        loadcase: Loadcase,
        draft_aft: Decimal,
        draft_fwd: Decimal,
        heel: Decimal = ZERO,
    ) -> HydroResult:
        """compute_at_drafts() for already validated decimals, reusing an integrator."""
        slope = (draft_aft - draft_fwd) / (geometry.x_fwd - geometry.x_aft)
        mean = (draft_aft + draft_fwd) / TWO
        return self._compute(integrator, geometry, loadcase, mean, slope, atan_deg(slope), heel)

    def _compute(
        self,
        integrator: SectionalIntegrator,
        geometry: HullGeometry,
        loadcase: Loadcase,
        draft: Decimal,
        slope: Decimal,
        trim: Decimal,
        heel: Decimal,
    ) -> HydroResult:
        rho = loadcase.rho
        if rho <= 0:
            raise ArgumentError(f"Density must be positive: {rho}", param="rho", value=rho)

        x_mid = geometry.x_mid
        if heel.is_zero():
            waterplane = Waterplane.level(draft, x_mid, slope)
        else:
            waterplane = Waterplane.inclined(draft * cos_deg(heel), x_mid, heel, slope)

        xs = geometry.x_positions
        sections: List[SectionProperties] = [
            integrator.section(i, waterplane) for i in range(geometry.station_count)
        ]
        weights = simpson_weights(xs)

        volume = sum((w * s.area for w, s in zip(weights, sections)), ZERO)
        if volume <= 0:
            raise InvalidOperationError(
                f"No station is immersed at draft {draft} (trim {trim}°, heel {heel}°)",
                draft=draft, trim_angle=trim, heel_angle=heel,
            )

        warnings: List[str] = []
        above = sum(1 for s in sections if s.above_range)
        if above:
            logger.warning(f"Draft {draft} above highest offset at {above} station(s), clamping")
            warnings.append(f"Waterline above highest offset at {above} station(s); sides extended vertically")

        # Centre of buoyancy
        lcb = sum((w * x * s.area for w, x, s in zip(weights, xs, sections)), ZERO) / volume
        tcb = sum((w * s.moment_y for w, s in zip(weights, sections)), ZERO) / volume
        kb = sum((w * s.moment_z for w, s in zip(weights, sections)), ZERO) / volume

        # Waterplane
        awp = sum((w * s.waterline_breadth for w, s in zip(weights, sections)), ZERO)
        lcf = tcf = il = it = ZERO
        if awp > 0:
            lcf = sum((w * x * s.waterline_breadth for w, x, s in zip(weights, xs, sections)), ZERO) / awp
            tcf = sum((w * s.waterline_breadth * s.waterline_centre
                       for w, s in zip(weights, sections)), ZERO) / awp
            il = sum((w * x * x * s.waterline_breadth for w, x, s in zip(weights, xs, sections)), ZERO)
            il -= awp * lcf * lcf
            it = sum((
                w * (s.waterline_breadth ** 3 / TWELVE
                     + s.waterline_breadth * (s.waterline_centre - tcf) ** 2)
                for w, s in zip(weights, sections)
            ), ZERO)
        else:
            warnings.append("Waterplane area is zero (waterline clear of the hull)")

        bmt = it / volume
        bml = il / volume
        kmt = kb + bmt
        kml = kb + bml
        gmt = gml = None
        if loadcase.kg is not None:
            gmt = kmt - loadcase.kg
            gml = kml - loadcase.kg
            if gmt < 0:
                warnings.append(f"Negative GMt: {quantize(gmt, 3)} m")

        # Form coefficients
        length = geometry.length
        beam = geometry.beam
        am = sections[geometry.midship_position].area
        cb = volume / (length * beam * draft)
        cp = volume / (am * length) if am > 0 else ZERO
        cm = am / (beam * draft)
        cwp = awp / (length * beam)

        disp_weight = volume * rho
        tpc = rho * awp / CM_PER_M
        mct = disp_weight * bml / (CM_PER_M * length)

        draft_aft = draft + (x_mid - geometry.x_aft) * slope
        draft_fwd = draft - (geometry.x_fwd - x_mid) * slope

        logger.debug(
            f"Hydrostatics T={draft} trim={trim} heel={heel}: V={volume:.3f} "
            f"KB={kb:.3f} LCB={lcb:.3f} Awp={awp:.3f}"
        )

        digits = self.config.fractional_digits

        def q(value: Decimal) -> Decimal:
            return quantize(value, digits)

        return HydroResult(
            draft=q(draft),
            trim_angle=q(trim),
            heel_angle=q(heel),
            draft_aft=q(draft_aft),
            draft_fwd=q(draft_fwd),
            rho=q(rho),
            disp_volume=q(volume),
            disp_weight=q(disp_weight),
            kb=q(kb),
            lcb=q(lcb),
            tcb=q(tcb),
            awp=q(awp),
            lcf=q(lcf),
            iwp=q(il),
            iwp_transverse=q(it),
            bmt=q(bmt),
            bml=q(bml),
            kmt=q(kmt),
            kml=q(kml),
            gmt=None if gmt is None else q(gmt),
            gml=None if gml is None else q(gml),
            cb=q(cb),
            cp=q(cp),
            cm=q(cm),
            cwp=q(cwp),
            tpc=q(tpc),
            mct=q(mct),
            warnings=tuple(warnings),
        )

    # =========================================================================
    # VALIDATION
    # =========================================================================

    @staticmethod
    def _positive(value: Any, name: str) -> Decimal:
        try:
            value = to_decimal(value, name)
        except (TypeError, ValueError) as e:
            raise ArgumentError(str(e), param=name, value=value) from None
        if value <= 0:
            raise ArgumentError(f"{name} must be positive: {value}", param=name, value=value)
        return value

    @staticmethod
    def _angle(value: Any, name: str, limit: Decimal, inclusive: bool) -> Decimal:
        if value is None:
            return ZERO
        try:
            value = to_decimal(value, name)
        except (TypeError, ValueError) as e:
            raise ArgumentError(str(e), param=name, value=value) from None
        if abs(value) > limit or (not inclusive and abs(value) == limit):
            raise ArgumentError(f"{name} out of range: {value}° (limit {limit}°)", param=name, value=value)
        return value
