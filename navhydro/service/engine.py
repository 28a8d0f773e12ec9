"""
service/engine.py - Hydrostatics engine facade.

Entry point for the calling layer. Each operation validates its request,
resolves the vessel geometry and loadcase snapshot through the provider,
and delegates to the calculators:

    compute_at / compute_table   -> HydrostaticsCalculator
    solve_trim                   -> TrimSolver
    generate_curves              -> CurveGenerator
    compute_stability_curve      -> StabilityCalculator
    check_criteria               -> CriteriaChecker

The engine holds no per-request state; concurrent calls are independent.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError

from navhydro.core.cancellation import CancellationToken
from navhydro.core.config import EngineConfig, get_engine_config
from navhydro.errors import ArgumentError
from navhydro.geometry.model import HullGeometry, Loadcase
from navhydro.physics.curves import Curve, CurveGenerator
from navhydro.physics.hydrostatics import HydroResult, HydrostaticsCalculator
from navhydro.physics.trim import DisplacementType, TrimSolver, TrimSolverResult
from navhydro.stability.calculators import StabilityCalculator, available_methods
from navhydro.stability.criteria import CriteriaChecker
from navhydro.stability.results import CriteriaResult, StabilityCurve
from .repository import GeometryProvider
from .requests import (
    ComputeAtRequest,
    CurveRequest,
    StabilityRequest,
    TableRequest,
    TrimRequest,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def validate_request(model: Type[RequestT], **values: Any) -> RequestT:
    """
    Build a request model, translating pydantic errors to ArgumentError.

    Raises:
        ArgumentError: details["errors"] lists each failing field
    """
    try:
        return model(**values)
    except ValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        first = errors[0] if errors else {"field": None, "message": str(e)}
        raise ArgumentError(
            f"Invalid {model.__name__}: {first['field']}: {first['message']}",
            param=first["field"],
            errors=errors,
        ) from None


class HydrostaticsEngine:
    """Hydrostatic operations keyed by vessel and loadcase id."""

    def __init__(self, provider: GeometryProvider, config: Optional[EngineConfig] = None):
        self.provider = provider
        self.config = config or get_engine_config()
        self.hydrostatics = HydrostaticsCalculator(self.config)
        self.trim_solver = TrimSolver(self.hydrostatics, self.config)
        self.curve_generator = CurveGenerator(self.hydrostatics, self.config)
        self.stability = StabilityCalculator(self.hydrostatics, self.trim_solver, self.config)
        self.criteria_checker = CriteriaChecker(fractional_digits=self.config.fractional_digits)

    # =========================================================================
    # HYDROSTATICS
    # =========================================================================

    def compute_at(
        self,
        vessel_id: str,
        draft: Any,
        trim_angle: Any = None,
        heel_angle: Any = None,
        loadcase_id: Optional[str] = None,
    ) -> HydroResult:
        """Hydrostatics at one draft, trim and heel."""
        request = validate_request(
            ComputeAtRequest, vessel_id=vessel_id, loadcase_id=loadcase_id,
            draft=draft, trim_angle=trim_angle, heel_angle=heel_angle,
        )
        geometry, loadcase = self._snapshot(request.vessel_id, request.loadcase_id)
        return self.hydrostatics.compute_at(
            geometry, loadcase, request.draft, request.trim_angle, request.heel_angle,
        )

    def compute_table(
        self,
        vessel_id: str,
        drafts: List[Any],
        loadcase_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[HydroResult]:
        """Hydrostatics at each draft, level and upright."""
        request = validate_request(TableRequest, vessel_id=vessel_id, loadcase_id=loadcase_id, drafts=drafts)
        geometry, loadcase = self._snapshot(request.vessel_id, request.loadcase_id)
        return self.hydrostatics.compute_table(geometry, loadcase, request.drafts, cancel_token)

    # =========================================================================
    # EQUILIBRIUM
    # =========================================================================

    def solve_trim(
        self,
        vessel_id: str,
        target_displacement: Any,
        initial_draft_fwd: Any,
        initial_draft_aft: Any,
        max_iterations: Optional[int] = None,
        tolerance: Any = None,
        loadcase_id: Optional[str] = None,
        displacement_type: str = "weight",
        balance_trim: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> TrimSolverResult:
        """Drafts at which the vessel floats at the target displacement."""
        request = validate_request(
            TrimRequest, vessel_id=vessel_id, loadcase_id=loadcase_id,
            target_displacement=target_displacement,
            initial_draft_fwd=initial_draft_fwd, initial_draft_aft=initial_draft_aft,
            max_iterations=max_iterations, tolerance=tolerance,
            displacement_type=displacement_type, balance_trim=balance_trim,
        )
        geometry, loadcase = self._snapshot(request.vessel_id, request.loadcase_id)
        return self.trim_solver.solve(
            geometry, loadcase, request.target_displacement,
            request.initial_draft_fwd, request.initial_draft_aft,
            max_iterations=request.max_iterations,
            tolerance=request.tolerance,
            displacement_type=DisplacementType(request.displacement_type),
            balance_trim=request.balance_trim,
            cancel_token=cancel_token,
        )

    # =========================================================================
    # CURVES
    # =========================================================================

    def generate_curves(
        self,
        vessel_id: str,
        curve_types: List[str],
        min_draft: Any,
        max_draft: Any,
        points: Optional[int] = None,
        loadcase_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Curve]:
        """Hydrostatic and Bonjean curves over a draft range."""
        request = validate_request(
            CurveRequest, vessel_id=vessel_id, loadcase_id=loadcase_id,
            curve_types=curve_types, min_draft=min_draft, max_draft=max_draft, points=points,
        )
        geometry, loadcase = self._snapshot(request.vessel_id, request.loadcase_id)
        return self.curve_generator.generate(
            geometry, loadcase, request.curve_types, request.min_draft, request.max_draft,
            request.points, cancel_token,
        )

    # =========================================================================
    # STABILITY
    # =========================================================================

    def compute_stability_curve(
        self,
        vessel_id: str,
        loadcase_id: str,
        min_angle: Any = None,
        max_angle: Any = None,
        angle_increment: Any = None,
        method: Optional[str] = None,
        draft: Any = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StabilityCurve:
        """GZ/KN curve for a loadcase across a heel sweep."""
        request = validate_request(
            StabilityRequest, vessel_id=vessel_id, loadcase_id=loadcase_id,
            min_angle=min_angle, max_angle=max_angle, angle_increment=angle_increment,
            method=method, draft=draft,
        )
        geometry, loadcase = self._snapshot(request.vessel_id, request.loadcase_id)
        return self.stability.compute(
            geometry, loadcase,
            min_angle=request.min_angle,
            max_angle=request.max_angle,
            angle_increment=request.angle_increment,
            method=request.method,
            draft=request.draft,
            cancel_token=cancel_token,
        )

    def check_criteria(self, curve: Any, downflooding_angle: Any = None) -> CriteriaResult:
        """Evaluate a StabilityCurve (or its to_dict() form) against IMO A.749(18)."""
        if isinstance(curve, dict):
            curve = StabilityCurve.from_dict(curve)
        elif not isinstance(curve, StabilityCurve):
            raise ArgumentError(f"Expected a StabilityCurve, got {type(curve).__name__}",
                                param="curve", value=type(curve).__name__)
        return self.criteria_checker.check(curve, downflooding_angle)

    def available_stability_methods(self) -> List[str]:
        return available_methods()

    def describe(self) -> Dict[str, Any]:
        """Engine configuration summary for diagnostics."""
        return {
            "config": self.config.to_dict(),
            "stability_methods": available_methods(),
        }

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def _snapshot(self, vessel_id: str, loadcase_id: Optional[str]) -> Tuple[HullGeometry, Loadcase]:
        geometry = self.provider.get_geometry(vessel_id)
        if loadcase_id is None:
            loadcase = Loadcase(rho=self.config.default_rho, vessel_id=vessel_id)
        else:
            loadcase = self.provider.get_loadcase(vessel_id, loadcase_id)
        logger.debug(f"Snapshot vessel={vessel_id} loadcase={loadcase_id or 'default'}")
        return geometry, loadcase
