"""
NAVHYDRO Stability

Righting-arm curves over a heel sweep and intact stability criteria.
"""

from .constants import (
    StabilityMethod,
    IMOIntactCriteria,
    IMO_INTACT,
)

from .results import (
    StabilityCurvePoint,
    StabilityCurve,
    CriterionResult,
    CriteriaResult,
)

from .calculators import (
    StabilityCalculator,
    available_methods,
    parse_method,
)

from .criteria import (
    CriteriaChecker,
    area_under_curve,
    interpolate_gz,
)

__all__ = [
    # Constants
    "StabilityMethod",
    "IMOIntactCriteria",
    "IMO_INTACT",
    # Results
    "StabilityCurvePoint",
    "StabilityCurve",
    "CriterionResult",
    "CriteriaResult",
    # Calculators
    "StabilityCalculator",
    "available_methods",
    "parse_method",
    # Criteria
    "CriteriaChecker",
    "area_under_curve",
    "interpolate_gz",
]
