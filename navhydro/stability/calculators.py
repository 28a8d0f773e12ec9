"""
NAVHYDRO Stability Calculators

Righting-arm (GZ) and cross curve (KN) generation over a heel sweep.

Implements:
- full_immersion: for each heel the inclined waterplane is moved until the
  heeled hull displaces the upright volume (Illinois false-position search),
  then B is taken from the clipped sections. KN = y_B·cosφ + z_B·sinφ.
- wall_sided: GZ = sinφ·(GMt + ½·BMt·tan²φ), KN = GZ + KG·sinφ.

In both cases GZ = KN - KG·sinφ. Heel is positive with starboard immersed;
the sweep is taken at level trim.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, List, Optional, Tuple
import time
import logging

from navhydro.core.cancellation import CancellationToken, check_cancelled
from navhydro.core.config import EngineConfig, get_engine_config
from navhydro.core.precision import (
    ZERO, HALF, cos_deg, engine_context, quantize, sin_deg, tan_deg, to_decimal,
)
from navhydro.errors import ArgumentError, InvalidOperationError
from navhydro.geometry.model import HullGeometry, Loadcase
from navhydro.physics.hydrostatics import Buoyancy, HydroResult, HydrostaticsCalculator
from navhydro.physics.sections import SectionalIntegrator, Waterplane
from navhydro.physics.trim import DisplacementType, TrimSolver
from .constants import StabilityMethod
from .results import StabilityCurve, StabilityCurvePoint

logger = logging.getLogger(__name__)

MAX_HEEL_DEG = Decimal(90)

# Wall-sided formula is a fair approximation up to about this heel
WALL_SIDED_VALID_DEG = Decimal(45)


def available_methods() -> List[str]:
    """Names accepted for the `method` argument."""
    return StabilityMethod.values()


def parse_method(method: Any) -> StabilityMethod:
    """StabilityMethod from a member or its name ("full_immersion", "WallSided", ...)."""
    if isinstance(method, StabilityMethod):
        return method
    key = str(method).strip().lower().replace("-", "_")
    for candidate in StabilityMethod:
        if key in (candidate.value, candidate.value.replace("_", "")):
            return candidate
    raise ArgumentError(
        f"Unknown stability method '{method}'. Valid: {available_methods()}",
        param="method", value=method,
    )


def heel_angles(min_angle: Decimal, max_angle: Decimal, increment: Decimal) -> List[Decimal]:
    """min, min+inc, ... up to and including max when it falls on the grid."""
    angles = []
    i = 0
    angle = min_angle
    while angle <= max_angle:
        angles.append(angle)
        i += 1
        angle = min_angle + increment * i
    return angles


# =============================================================================
# STABILITY CALCULATOR
# =============================================================================

class StabilityCalculator:
    """
    Builds the GZ/KN curve for one loadcase.

    Angle of maximum GZ is found by scanning the computed points; the angle
    of vanishing stability is the first zero crossing after it, linearly
    interpolated between curve points.
    """

    def __init__(
        self,
        calculator: Optional[HydrostaticsCalculator] = None,
        trim_solver: Optional[TrimSolver] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or (calculator.config if calculator else get_engine_config())
        self.calculator = calculator or HydrostaticsCalculator(self.config)
        self.trim_solver = trim_solver or TrimSolver(self.calculator, self.config)

    def available_methods(self) -> List[str]:
        return available_methods()

    def compute(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        min_angle: Any = None,
        max_angle: Any = None,
        angle_increment: Any = None,
        method: Any = None,
        draft: Any = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StabilityCurve:
        """
        Calculate the righting-arm curve.

        Args:
            geometry: Hull offsets
            loadcase: Density and KG (required), optional target displacement
            min_angle: First heel angle (degrees, default from config)
            max_angle: Last heel angle (degrees, default from config)
            angle_increment: Heel step (degrees, default from config)
            method: "full_immersion" or "wall_sided"
            draft: Upright draft; when omitted the loadcase target
                displacement is floated level, then the design draft is used
            cancel_token: Checked before every heel angle

        Returns:
            StabilityCurve

        Raises:
            ArgumentError: Missing KG, bad angle range, unknown method or no
                way to determine the draft
            InvalidOperationError: The hull cannot displace the upright volume
                at some heel
            CalculationCancelledError: If cancel_token fires
        """
        start_time = time.perf_counter()
        config = self.config
        with engine_context():
            if loadcase.kg is None:
                raise ArgumentError("Stability calculation requires a loadcase KG", param="kg", value=None)
            kg = loadcase.kg
            method = parse_method(method if method is not None else config.stability_default_method)
            min_angle, max_angle, increment = self._parse_angles(
                config.stability_min_angle if min_angle is None else min_angle,
                config.stability_max_angle if max_angle is None else max_angle,
                config.stability_angle_increment if angle_increment is None else angle_increment,
            )
            angles = heel_angles(min_angle, max_angle, increment)

            warnings: List[str] = []
            draft = self._resolve_draft(geometry, loadcase, draft, warnings)
            upright = self.calculator.compute_at(geometry, loadcase, draft)
            warnings.extend(upright.warnings)

            if method is StabilityMethod.WALL_SIDED:
                if any(abs(a) == MAX_HEEL_DEG for a in angles):
                    raise ArgumentError("Wall-sided formula is undefined at 90° heel",
                                        param="max_angle", value=max_angle)
                if any(abs(a) > WALL_SIDED_VALID_DEG for a in angles):
                    warnings.append(
                        f"GZ values beyond {WALL_SIDED_VALID_DEG}° use wall-sided approximation, "
                        "actual values depend on hull shape"
                    )
                points = self._wall_sided(upright, kg, angles, cancel_token)
            else:
                points = self._full_immersion(geometry, draft, kg, angles, warnings, cancel_token)

            max_point = max(points, key=lambda p: p.gz)
            vanishing = self._vanishing_angle(points, max_point)
            elapsed_ms = int((time.perf_counter() - start_time) * 1000)

            logger.info(
                f"Computed GZ curve ({method.value}) at T={upright.draft}: {len(points)} points, "
                f"max GZ {max_point.gz} m at {max_point.heel_angle}°"
            )
            return StabilityCurve(
                method=method,
                draft=upright.draft,
                displacement=upright.disp_weight,
                kg=kg,
                initial_gmt=upright.gmt,
                points=tuple(points),
                max_gz=max_point.gz,
                angle_of_max_gz=max_point.heel_angle,
                angle_of_vanishing_stability=vanishing,
                computation_time_ms=elapsed_ms,
                warnings=tuple(warnings),
            )

    # =========================================================================
    # METHODS
    # =========================================================================

    def _wall_sided(
        self,
        upright: HydroResult,
        kg: Decimal,
        angles: List[Decimal],
        cancel_token: Optional[CancellationToken],
    ) -> List[StabilityCurvePoint]:
        digits = self.config.fractional_digits
        points = []
        for i, angle in enumerate(angles):
            check_cancelled(cancel_token, "stability_curve", f"{i}/{len(angles)}")
            sin_phi = sin_deg(angle)
            tan_phi = tan_deg(angle)
            gz = sin_phi * (upright.gmt + HALF * upright.bmt * tan_phi * tan_phi)
            kn = gz + kg * sin_phi
            points.append(StabilityCurvePoint(angle, quantize(gz, digits), quantize(kn, digits)))
        return points

    def _full_immersion(
        self,
        geometry: HullGeometry,
        draft: Decimal,
        kg: Decimal,
        angles: List[Decimal],
        warnings: List[str],
        cancel_token: Optional[CancellationToken],
    ) -> List[StabilityCurvePoint]:
        digits = self.config.fractional_digits
        integrator = self.calculator.integrator(geometry)

        # Upright reference volume; heeled sections share the upright panels
        reference = self.calculator.buoyancy(integrator, Waterplane.level(draft, geometry.x_mid))
        if reference.volume <= 0:
            raise InvalidOperationError(f"No immersed volume at draft {draft}", draft=draft)

        points = []
        for i, angle in enumerate(angles):
            check_cancelled(cancel_token, "stability_curve", f"{i}/{len(angles)}")
            if angle.is_zero():
                points.append(StabilityCurvePoint(angle, quantize(ZERO, digits), quantize(ZERO, digits)))
                continue

            sin_phi = sin_deg(angle)
            cos_phi = cos_deg(angle)
            buoyancy, converged = self._equilibrium(integrator, reference.volume, angle, sin_phi, cos_phi)
            if not converged:
                warnings.append(f"Heeled waterline at {angle}° not converged")

            kn = (buoyancy.moment_y * cos_phi + buoyancy.moment_z * sin_phi) / buoyancy.volume
            gz = kn - kg * sin_phi
            points.append(StabilityCurvePoint(angle, quantize(gz, digits), quantize(kn, digits)))
        return points

    def _equilibrium(
        self,
        integrator: SectionalIntegrator,
        volume: Decimal,
        angle: Decimal,
        sin_phi: Decimal,
        cos_phi: Decimal,
    ) -> Tuple[Buoyancy, bool]:
        """
        Inclined waterplane height that displaces `volume` at this heel.

        Illinois variant of regula falsi on V(h) - volume, bracketed by the
        lowest and highest points of the heeled sections.

        Returns:
            (buoyancy at the solution, converged)
        """
        config = self.config
        ranges = [integrator.height_range(i, sin_phi, cos_phi) for i in range(integrator.geometry.station_count)]
        low = min(r[0] for r in ranges)
        high = max(r[1] for r in ranges)
        tolerance = config.heel_volume_rel_tolerance * volume
        x_mid = integrator.geometry.x_mid

        def displaced(height: Decimal) -> Buoyancy:
            waterplane = Waterplane(height=height, x_ref=x_mid, heel=angle, sin_heel=sin_phi, cos_heel=cos_phi)
            return self.calculator.buoyancy(integrator, waterplane)

        top = displaced(high)
        if top.volume < volume:
            raise InvalidOperationError(
                f"Hull cannot displace {quantize(volume, 3)} m³ at {angle}° heel "
                f"(closed volume {quantize(top.volume, 3)} m³)",
                heel_angle=angle,
            )

        a, fa = low, -volume
        b, fb = high, top.volume - volume
        best = top
        last = 0
        for k in range(config.heel_max_iterations):
            h = (a * fb - b * fa) / (fb - fa)
            best = displaced(h)
            fh = best.volume - volume
            if abs(fh) <= tolerance:
                logger.debug(f"Heel {angle}°: waterline h={h} after {k + 1} iterations")
                return best, True
            if fh > 0:
                b, fb = h, fh
                if last > 0:
                    fa /= 2
                last = 1
            else:
                a, fa = h, fh
                if last < 0:
                    fb /= 2
                last = -1

        logger.warning(f"Heeled waterline at {angle}° not converged; volume error {fh}")
        return best, False

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _resolve_draft(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        draft: Any,
        warnings: List[str],
    ) -> Decimal:
        """Explicit draft, else float the target displacement level, else the design draft."""
        if draft is not None:
            try:
                draft = to_decimal(draft, "draft")
            except (TypeError, ValueError) as e:
                raise ArgumentError(str(e), param="draft", value=draft) from None
            if draft <= 0:
                raise ArgumentError(f"draft must be positive: {draft}", param="draft", value=draft)
            return draft

        if loadcase.target_displacement is not None:
            start = geometry.design_draft or (geometry.keel_z + geometry.max_z) / 2
            result = self.trim_solver.solve(
                geometry, loadcase, loadcase.target_displacement, start, start,
                displacement_type=DisplacementType.WEIGHT,
            )
            if not result.converged:
                warnings.append(
                    f"Draft for target displacement not converged (residual {result.residual} kg)"
                )
            return result.mean_draft

        if geometry.design_draft is not None:
            return geometry.design_draft

        raise ArgumentError(
            "No draft given and neither a loadcase target displacement nor a design draft is available",
            param="draft", value=None,
        )

    @staticmethod
    def _parse_angles(min_angle: Any, max_angle: Any, increment: Any) -> Tuple[Decimal, Decimal, Decimal]:
        try:
            low = to_decimal(min_angle, "min_angle")
            high = to_decimal(max_angle, "max_angle")
            step = to_decimal(increment, "angle_increment")
        except (TypeError, ValueError) as e:
            raise ArgumentError(str(e)) from None
        if step <= 0:
            raise ArgumentError(f"Angle increment must be positive: {step}", param="angle_increment", value=step)
        if low >= high:
            raise ArgumentError(
                f"Min angle ({low}) must be less than max angle ({high})",
                param="min_angle", value=low,
            )
        for name, value in (("min_angle", low), ("max_angle", high)):
            if abs(value) > MAX_HEEL_DEG:
                raise ArgumentError(f"{name} out of range: {value}° (limit {MAX_HEEL_DEG}°)",
                                    param=name, value=value)
        return low, high, step

    @staticmethod
    def _vanishing_angle(
        points: List[StabilityCurvePoint],
        max_point: StabilityCurvePoint,
    ) -> Optional[Decimal]:
        if max_point.gz <= 0:
            return None
        start = points.index(max_point)
        for prev, p in zip(points[start:], points[start + 1:]):
            if p.gz <= 0:
                t = prev.gz / (prev.gz - p.gz)
                return quantize(prev.heel_angle + t * (p.heel_angle - prev.heel_angle), 3)
        return None
