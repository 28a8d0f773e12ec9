"""
NAVHYDRO Service

Engine facade keyed by vessel/loadcase id, request validation and the
in-memory vessel repository.
"""

from .repository import (
    GeometryProvider,
    InMemoryVesselRepository,
)

from .requests import (
    ComputeAtRequest,
    TableRequest,
    TrimRequest,
    CurveRequest,
    StabilityRequest,
)

from .engine import (
    HydrostaticsEngine,
    validate_request,
)

__all__ = [
    "GeometryProvider",
    "InMemoryVesselRepository",
    "ComputeAtRequest",
    "TableRequest",
    "TrimRequest",
    "CurveRequest",
    "StabilityRequest",
    "HydrostaticsEngine",
    "validate_request",
]
