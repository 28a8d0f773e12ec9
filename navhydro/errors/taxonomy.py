"""
errors/taxonomy.py - Error classification system

Structured error types for the hydrostatic engine. The engine never
formats user-facing messages; callers translate these into whatever
representation they use (http_status is provided as a hint).

Non-convergence of the trim solver is NOT an error: it is reported as
TrimSolverResult.converged = False.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""
    WARNING = "warning"
    ERROR = "error"


class ErrorCategory(Enum):
    """Error categories."""
    # Validation errors (1xxx)
    VALIDATION = "validation"

    # Geometry errors (2xxx)
    GEOMETRY = "geometry"

    # Numerical errors (3xxx)
    NUMERICAL = "numerical"

    # Lookup errors (4xxx)
    NOT_FOUND = "not_found"

    # Cancellation (5xxx)
    CANCELLED = "cancelled"


class ErrorCode(Enum):
    """Specific error codes."""

    # Validation (1xxx)
    ARG_INVALID = 1001

    # Geometry (2xxx)
    GEOM_INCOMPLETE = 2001
    GEOM_OUT_OF_RANGE = 2002

    # Numerical (3xxx)
    OP_INVALID = 3001
    OP_NOT_MONOTONIC = 3002

    # Lookup (4xxx)
    NOT_FOUND = 4001

    # Cancellation (5xxx)
    CANCELLED = 5001


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (int, float, str, bool, list, dict, type(None))):
        return value
    return str(value)


# =============================================================================
# BASE ERROR CLASS
# =============================================================================

class HydrostaticsError(Exception):
    """
    Base class for engine errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Message for logs and diagnostics
    - Detailed context (offending parameter values, indices)
    """

    code: ErrorCode = ErrorCode.OP_INVALID
    category: ErrorCategory = ErrorCategory.NUMERICAL
    severity: ErrorSeverity = ErrorSeverity.ERROR
    http_status: int = 400

    def __init__(
        self,
        message: str = "",
        *,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Hydrostatics error"
        self.details = dict(details or {})
        self.details.update(kwargs)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for the calling layer."""
        return {
            "code": self.code.value,
            "error_type": self.code.name,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": {k: _plain(v) for k, v in self.details.items()},
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


# =============================================================================
# SPECIFIC ERROR TYPES
# =============================================================================

class ArgumentError(HydrostaticsError):
    """Malformed caller input."""

    code = ErrorCode.ARG_INVALID
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, param: Optional[str] = None, value: Any = None, **kwargs):
        if param is not None:
            kwargs["param"] = param
            kwargs["value"] = value
        super().__init__(message, **kwargs)
        self.param = param
        self.value = value


class GeometryIncompleteError(HydrostaticsError):
    """Hull geometry is insufficient to integrate."""

    code = ErrorCode.GEOM_INCOMPLETE
    category = ErrorCategory.GEOMETRY


class InvalidOperationError(HydrostaticsError):
    """Operation cannot be performed at the requested condition."""

    code = ErrorCode.OP_INVALID
    category = ErrorCategory.NUMERICAL


class GeometryOutOfRangeError(InvalidOperationError):
    """Lookup above the highest defined waterline with the ERROR policy."""

    code = ErrorCode.GEOM_OUT_OF_RANGE
    category = ErrorCategory.GEOMETRY

    def __init__(self, station_index: int, z: Any, max_z: Any, **kwargs):
        super().__init__(
            f"Height {z} above highest defined offset {max_z} at station {station_index}",
            station_index=station_index,
            z=z,
            max_z=max_z,
            **kwargs,
        )


class MonotonicityError(InvalidOperationError):
    """Displacement decreased with increasing draft (geometry or integration defect)."""

    code = ErrorCode.OP_NOT_MONOTONIC

    def __init__(self, curve_type: str, draft_before: Any, draft_after: Any,
                 value_before: Any, value_after: Any, **kwargs):
        super().__init__(
            f"{curve_type} curve decreases between draft {draft_before} "
            f"({value_before}) and {draft_after} ({value_after})",
            curve_type=curve_type,
            draft_before=draft_before,
            draft_after=draft_after,
            value_before=value_before,
            value_after=value_after,
            **kwargs,
        )


class NotFoundError(HydrostaticsError):
    """Referenced vessel, geometry or loadcase does not resolve."""

    code = ErrorCode.NOT_FOUND
    category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, kind: str, identifier: str, **kwargs):
        super().__init__(f"{kind} '{identifier}' not found", kind=kind, identifier=identifier, **kwargs)
        self.kind = kind
        self.identifier = identifier


class CalculationCancelledError(HydrostaticsError):
    """Calculation aborted by a cancellation request or deadline."""

    code = ErrorCode.CANCELLED
    category = ErrorCategory.CANCELLED
    severity = ErrorSeverity.WARNING
    http_status = 499

    def __init__(self, operation: str = "", reason: str = "", progress: Optional[str] = None, **kwargs):
        message = f"{operation or 'Calculation'} cancelled"
        if reason:
            message += f": {reason}"
        super().__init__(message, operation=operation, reason=reason, progress=progress, **kwargs)
