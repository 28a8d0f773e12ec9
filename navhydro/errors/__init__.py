"""
NAVHYDRO Error Taxonomy

Exception hierarchy returned to callers of the engine.
"""

from .taxonomy import (
    ErrorSeverity,
    ErrorCategory,
    ErrorCode,
    HydrostaticsError,
    ArgumentError,
    GeometryIncompleteError,
    InvalidOperationError,
    GeometryOutOfRangeError,
    MonotonicityError,
    NotFoundError,
    CalculationCancelledError,
)

__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "HydrostaticsError",
    "ArgumentError",
    "GeometryIncompleteError",
    "InvalidOperationError",
    "GeometryOutOfRangeError",
    "MonotonicityError",
    "NotFoundError",
    "CalculationCancelledError",
]
