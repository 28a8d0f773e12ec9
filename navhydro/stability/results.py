"""
NAVHYDRO Stability Results

Result dataclasses for righting-arm curves and criteria evaluation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from navhydro.core.precision import to_decimal
from .constants import StabilityMethod


def _str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _dec(data: Dict[str, Any], key: str) -> Optional[Decimal]:
    value = data.get(key)
    return None if value is None else to_decimal(value, key)


# =============================================================================
# GZ CURVE RESULTS
# =============================================================================

@dataclass(frozen=True)
class StabilityCurvePoint:
    """A single point on the righting-arm curve."""
    heel_angle: Decimal  # degrees
    gz: Decimal          # righting arm about G (m)
    kn: Decimal          # righting arm about the keel (m)

    def to_dict(self) -> Dict[str, str]:
        return {
            "heel_angle": str(self.heel_angle),
            "gz": str(self.gz),
            "kn": str(self.kn),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StabilityCurvePoint":
        return cls(
            heel_angle=to_decimal(data["heel_angle"], "heel_angle"),
            gz=to_decimal(data["gz"], "gz"),
            kn=to_decimal(data.get("kn", 0), "kn"),
        )


@dataclass(frozen=True)
class StabilityCurve:
    """
    Righting-arm curve for one loadcase.

    Points are in strictly increasing heel order. The angle of maximum GZ
    is the first point carrying the largest GZ.
    """
    method: StabilityMethod
    draft: Decimal
    displacement: Decimal                  # kg
    kg: Decimal
    initial_gmt: Decimal
    points: Tuple[StabilityCurvePoint, ...]
    max_gz: Decimal
    angle_of_max_gz: Decimal
    angle_of_vanishing_stability: Optional[Decimal] = None  # None when GZ stays positive
    computation_time_ms: int = 0
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def gz_at(self, heel_angle: Decimal) -> Optional[Decimal]:
        """GZ at an exact curve angle, or None."""
        for point in self.points:
            if point.heel_angle == heel_angle:
                return point.gz
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value,
            "draft": str(self.draft),
            "displacement": str(self.displacement),
            "kg": str(self.kg),
            "initial_gmt": str(self.initial_gmt),
            "points": [p.to_dict() for p in self.points],
            "max_gz": str(self.max_gz),
            "angle_of_max_gz": str(self.angle_of_max_gz),
            "angle_of_vanishing_stability": _str(self.angle_of_vanishing_stability),
            "computation_time_ms": self.computation_time_ms,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StabilityCurve":
        return cls(
            method=StabilityMethod(data.get("method", StabilityMethod.FULL_IMMERSION.value)),
            draft=to_decimal(data.get("draft", 0), "draft"),
            displacement=to_decimal(data.get("displacement", 0), "displacement"),
            kg=to_decimal(data.get("kg", 0), "kg"),
            initial_gmt=to_decimal(data.get("initial_gmt", 0), "initial_gmt"),
            points=tuple(StabilityCurvePoint.from_dict(p) for p in data.get("points", [])),
            max_gz=to_decimal(data.get("max_gz", 0), "max_gz"),
            angle_of_max_gz=to_decimal(data.get("angle_of_max_gz", 0), "angle_of_max_gz"),
            angle_of_vanishing_stability=_dec(data, "angle_of_vanishing_stability"),
            computation_time_ms=data.get("computation_time_ms", 0),
            warnings=tuple(data.get("warnings", ())),
        )


# =============================================================================
# CRITERIA RESULTS
# =============================================================================

@dataclass(frozen=True)
class CriterionResult:
    """Verdict for one named criterion."""
    key: str
    name: str
    required: Decimal
    actual: Optional[Decimal]   # None when the curve cannot supply a value
    unit: str
    passed: bool
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "required": str(self.required),
            "actual": _str(self.actual),
            "unit": self.unit,
            "passed": self.passed,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class CriteriaResult:
    """Overall verdict plus per-criterion results."""
    all_passed: bool
    criteria: Tuple[CriterionResult, ...]
    standard: str

    @property
    def failed(self) -> Tuple[CriterionResult, ...]:
        return tuple(c for c in self.criteria if not c.passed)

    @property
    def summary(self) -> str:
        passed = sum(1 for c in self.criteria if c.passed)
        verdict = "PASS" if self.all_passed else "FAIL"
        return f"{self.standard}: {verdict} ({passed}/{len(self.criteria)} criteria met)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "all_passed": self.all_passed,
            "standard": self.standard,
            "summary": self.summary,
            "criteria": [c.to_dict() for c in self.criteria],
        }
