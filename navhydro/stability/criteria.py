"""
NAVHYDRO Stability Criteria

Evaluates a completed GZ curve against the IMO A.749(18) general intact
stability criteria. A pure function of the curve: the same curve always
gives the same verdict.

Areas are trapezoidal in radians between linearly interpolated bounds.
A criterion whose angles lie outside the computed curve fails with a note
rather than being extrapolated.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, List, Optional, Sequence
import logging

from navhydro.core.precision import ZERO, TWO, engine_context, quantize, radians, to_decimal
from navhydro.errors import ArgumentError, InvalidOperationError
from .constants import IMO_INTACT, IMOIntactCriteria, MIN_CURVE_POINTS
from .results import CriteriaResult, CriterionResult, StabilityCurve, StabilityCurvePoint

logger = logging.getLogger(__name__)

AREA_UNIT = "m·rad"


def interpolate_gz(points: Sequence[StabilityCurvePoint], angle: Decimal) -> Optional[Decimal]:
    """GZ at `angle` by linear interpolation; None outside the curve."""
    if not points or angle < points[0].heel_angle or angle > points[-1].heel_angle:
        return None
    for lower, upper in zip(points, points[1:]):
        if lower.heel_angle <= angle <= upper.heel_angle:
            fraction = (angle - lower.heel_angle) / (upper.heel_angle - lower.heel_angle)
            return lower.gz + fraction * (upper.gz - lower.gz)
    return points[-1].gz


def area_under_curve(points: Sequence[StabilityCurvePoint], from_angle: Decimal, to_angle: Decimal) -> Optional[Decimal]:
    """
    ∫ GZ dφ from `from_angle` to `to_angle` (m·rad), trapezoidal.

    Returns None when the curve does not span the interval.
    """
    start = interpolate_gz(points, from_angle)
    end = interpolate_gz(points, to_angle)
    if start is None or end is None:
        return None

    nodes = [(from_angle, start)]
    nodes.extend((p.heel_angle, p.gz) for p in points if from_angle < p.heel_angle < to_angle)
    nodes.append((to_angle, end))

    area = ZERO
    for (a0, gz0), (a1, gz1) in zip(nodes, nodes[1:]):
        area += (gz0 + gz1) / TWO * radians(a1 - a0)
    return area


class CriteriaChecker:
    """
    Intact stability criteria checker.

    Criteria, in order:
    1. Area under GZ 0°-30°
    2. Area under GZ 0°-40° (or downflooding angle)
    3. Area under GZ 30°-40° (or downflooding angle)
    4. Angle of maximum GZ
    5. Initial GMt
    6. GZ at 30°
    """

    def __init__(self, criteria: IMOIntactCriteria = IMO_INTACT, fractional_digits: int = 6):
        self.criteria = criteria
        self.digits = fractional_digits

    def check(self, curve: StabilityCurve, downflooding_angle: Any = None) -> CriteriaResult:
        """
        Check a GZ curve.

        Args:
            curve: Completed stability curve
            downflooding_angle: Optional angle (degrees) capping the 40° limits

        Returns:
            CriteriaResult

        Raises:
            InvalidOperationError: Fewer than 3 curve points
            ArgumentError: Non-positive downflooding angle
        """
        c = self.criteria
        if len(curve.points) < MIN_CURVE_POINTS:
            raise InvalidOperationError(
                f"Stability criteria need at least {MIN_CURVE_POINTS} curve points, got {len(curve.points)}",
                points=len(curve.points),
            )

        with engine_context():
            upper = c.angle_40_deg
            if downflooding_angle is not None:
                try:
                    flooding = to_decimal(downflooding_angle, "downflooding_angle")
                except (TypeError, ValueError) as e:
                    raise ArgumentError(str(e), param="downflooding_angle", value=downflooding_angle) from None
                if flooding <= 0:
                    raise ArgumentError(f"downflooding_angle must be positive: {flooding}",
                                        param="downflooding_angle", value=flooding)
                upper = min(upper, flooding)

            points = sorted(curve.points, key=lambda p: p.heel_angle)
            results: List[CriterionResult] = [
                self._area("area_0_30", points, ZERO, c.angle_30_deg, c.area_0_30_min_m_rad),
                self._area("area_0_40", points, ZERO, upper, c.area_0_40_min_m_rad),
                self._area_30_40(points, upper),
                self._angle_of_max_gz(points),
                self._initial_gmt(curve),
                self._gz_at_30(points),
            ]

        all_passed = all(r.passed for r in results)
        result = CriteriaResult(all_passed=all_passed, criteria=tuple(results), standard=c.standard)
        passed = sum(1 for r in results if r.passed)
        logger.info(f"Stability criteria check completed: {passed}/{len(results)} passed")
        return result

    # =========================================================================
    # CRITERIA
    # =========================================================================

    def _area(
        self,
        key: str,
        points: Sequence[StabilityCurvePoint],
        from_angle: Decimal,
        to_angle: Decimal,
        required: Decimal,
    ) -> CriterionResult:
        name = f"Area under GZ curve ({from_angle}° to {to_angle}°)"
        area = area_under_curve(points, from_angle, to_angle)
        if area is None:
            return CriterionResult(key, name, required, None, AREA_UNIT, False,
                                   self._coverage_note(points, from_angle, to_angle))
        area = quantize(area, self.digits)
        degrees = quantize(area * 180 / radians(Decimal(180)), 3)
        return CriterionResult(key, name, required, area, AREA_UNIT, area >= required,
                               f"Equivalent to {degrees} m·deg")

    def _area_30_40(self, points: Sequence[StabilityCurvePoint], upper: Decimal) -> CriterionResult:
        c = self.criteria
        if upper <= c.angle_30_deg:
            return CriterionResult(
                "area_30_40", f"Area under GZ curve ({c.angle_30_deg}° to {upper}°)",
                c.area_30_40_min_m_rad, ZERO, AREA_UNIT, False,
                f"Downflooding angle {upper}° is not above {c.angle_30_deg}°",
            )
        return self._area("area_30_40", points, c.angle_30_deg, upper, c.area_30_40_min_m_rad)

    def _angle_of_max_gz(self, points: Sequence[StabilityCurvePoint]) -> CriterionResult:
        required = self.criteria.angle_gz_max_min_deg
        best = max(points, key=lambda p: p.gz)
        return CriterionResult(
            "angle_of_max_gz", "Angle at maximum GZ", required, best.heel_angle, "degrees",
            best.heel_angle >= required, f"Maximum GZ = {quantize(best.gz, 3)} m",
        )

    def _initial_gmt(self, curve: StabilityCurve) -> CriterionResult:
        required = self.criteria.gm_min_m
        return CriterionResult(
            "initial_gmt", "Initial metacentric height (GMT)", required, curve.initial_gmt, "m",
            curve.initial_gmt >= required,
        )

    def _gz_at_30(self, points: Sequence[StabilityCurvePoint]) -> CriterionResult:
        c = self.criteria
        name = f"Righting arm at {c.angle_30_deg}° heel"
        gz = interpolate_gz(points, c.angle_30_deg)
        if gz is None:
            return CriterionResult("gz_at_30", name, c.gz_30_min_m, None, "m", False,
                                   self._coverage_note(points, c.angle_30_deg, c.angle_30_deg))
        gz = quantize(gz, self.digits)
        return CriterionResult("gz_at_30", name, c.gz_30_min_m, gz, "m", gz >= c.gz_30_min_m)

    @staticmethod
    def _coverage_note(points: Sequence[StabilityCurvePoint], from_angle: Decimal, to_angle: Decimal) -> str:
        return (
            f"Curve covers {points[0].heel_angle}° to {points[-1].heel_angle}°; "
            f"criterion needs {from_angle}° to {to_angle}°"
        )
