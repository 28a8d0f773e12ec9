"""
physics/trim.py - Free-floating trim solver.

Finds the aft/forward draft pair at which the hull displaces a target
weight (or volume), optionally with the centre of buoyancy in line with
the centre of gravity (zero trimming moment).

Newton-Raphson on the mean draft:
    T(k+1) = T(k) + (target - Δ(T)) / (dΔ/dT)
The derivative comes from a finite-difference perturbation of the draft,
falling back to ρ·Awp when the estimate collapses. Each step is limited to
a fraction of the waterline span. The deeper end is kept at or below the
highest waterline and the mean draft above the keel; the shallower end may
run dry, where its sections simply contribute nothing.

With balance_trim the unknowns are (mean draft, trim) and the second
residual is LCB - LCG, solved with a finite-difference Jacobian.

Every iteration is an immutable TrimIteration; non-convergence is a
normal result (converged=False), not an exception.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

from navhydro.core.cancellation import CancellationToken, check_cancelled
from navhydro.core.config import EngineConfig, get_engine_config
from navhydro.core.precision import ZERO, TWO, engine_context, quantize, to_decimal
from navhydro.errors import ArgumentError
from navhydro.geometry.model import HullGeometry, Loadcase
from .hydrostatics import HydroResult, HydrostaticsCalculator
from .sections import SectionalIntegrator

logger = logging.getLogger(__name__)

# Jacobian determinant below which the 2-D update degrades to 1-D
SINGULAR_DETERMINANT = Decimal("1E-12")


class DisplacementType(Enum):
    """Units of the target displacement."""
    WEIGHT = "weight"   # kg
    VOLUME = "volume"   # m³


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class TrimIteration:
    """One Newton step: the evaluated state and the update derived from it."""
    iteration: int
    draft_aft: Decimal
    draft_fwd: Decimal
    mean_draft: Decimal
    trim: Decimal                         # draft_aft - draft_fwd (m)
    displacement: Decimal
    residual: Decimal                     # target - displacement
    lever: Optional[Decimal] = None       # LCB - LCG when balancing trim
    derivative: Optional[Decimal] = None  # dΔ/dT used for the update
    step: Optional[Decimal] = None        # Mean draft change applied

    def to_dict(self) -> Dict[str, Any]:
        return {
            key: (str(value) if isinstance(value, Decimal) else value)
            for key, value in self.__dict__.items()
        }


@dataclass(frozen=True)
class TrimSolverResult:
    """Solution of the trim problem plus the solver's diagnostic trail."""
    target_displacement: Decimal
    displacement_type: DisplacementType
    draft_aft: Decimal
    draft_fwd: Decimal
    mean_draft: Decimal
    trim: Decimal
    trim_angle: Decimal
    converged: bool
    iterations: int
    residual: Decimal
    hydro: HydroResult
    lcf: Decimal
    mct: Decimal
    lever_residual: Optional[Decimal] = None
    trace: Tuple[TrimIteration, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_displacement": str(self.target_displacement),
            "displacement_type": self.displacement_type.value,
            "draft_aft": str(self.draft_aft),
            "draft_fwd": str(self.draft_fwd),
            "mean_draft": str(self.mean_draft),
            "trim": str(self.trim),
            "trim_angle": str(self.trim_angle),
            "converged": self.converged,
            "iterations": self.iterations,
            "residual": str(self.residual),
            "lever_residual": None if self.lever_residual is None else str(self.lever_residual),
            "lcf": str(self.lcf),
            "mct": str(self.mct),
            "hydro": self.hydro.to_dict(),
            "trace": [step.to_dict() for step in self.trace],
        }


@dataclass(frozen=True)
class _State:
    mean: Decimal
    trim: Decimal

    @property
    def draft_aft(self) -> Decimal:
        return self.mean + self.trim / TWO

    @property
    def draft_fwd(self) -> Decimal:
        return self.mean - self.trim / TWO


# =============================================================================
# TRIM SOLVER
# =============================================================================

class TrimSolver:
    """Newton-Raphson equilibrium solver on top of HydrostaticsCalculator."""

    def __init__(
        self,
        calculator: Optional[HydrostaticsCalculator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or (calculator.config if calculator else get_engine_config())
        self.calculator = calculator or HydrostaticsCalculator(self.config)

    def solve(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        target_displacement: Any,
        initial_draft_fwd: Any,
        initial_draft_aft: Any,
        *,
        max_iterations: Optional[int] = None,
        tolerance: Any = None,
        displacement_type: DisplacementType = DisplacementType.WEIGHT,
        balance_trim: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> TrimSolverResult:
        """
        Solve for the drafts that float the hull at a target displacement.

        Args:
            geometry: Hull offsets
            loadcase: Density (and LCG when balance_trim)
            target_displacement: Target in kg (WEIGHT) or m³ (VOLUME)
            initial_draft_fwd: Starting draft at the foremost station (m)
            initial_draft_aft: Starting draft at the aftmost station (m)
            max_iterations: Iteration budget (default from config)
            tolerance: Allowed |residual| in target units (default from config)
            displacement_type: Units of the target
            balance_trim: Also drive LCB - LCG to zero
            cancel_token: Checked before every iteration

        Returns:
            TrimSolverResult (converged=False when the budget runs out)

        Raises:
            ArgumentError: Non-positive target, drafts, tolerance or budget,
                or balance_trim without loadcase.lcg
            CalculationCancelledError: If cancel_token fires
        """
        config = self.config
        with engine_context():
            target = self._positive(target_displacement, "target_displacement")
            fwd = self._positive(initial_draft_fwd, "initial_draft_fwd")
            aft = self._positive(initial_draft_aft, "initial_draft_aft")
            if max_iterations is None:
                max_iterations = config.trim_max_iterations
            if max_iterations < 1:
                raise ArgumentError(f"max_iterations must be at least 1: {max_iterations}",
                                    param="max_iterations", value=max_iterations)
            if tolerance is None:
                tolerance = (config.trim_weight_tolerance if displacement_type is DisplacementType.WEIGHT
                             else config.trim_volume_tolerance)
            tolerance = self._positive(tolerance, "tolerance")
            if balance_trim and loadcase.lcg is None:
                raise ArgumentError("balance_trim requires a loadcase LCG", param="lcg", value=None)
            if loadcase.rho <= 0:
                raise ArgumentError(f"Density must be positive: {loadcase.rho}", param="rho", value=loadcase.rho)

            run = _TrimRun(self.calculator, geometry, loadcase, target, tolerance,
                           displacement_type, balance_trim, config)
            return run.solve(_State((aft + fwd) / TWO, aft - fwd), max_iterations, cancel_token)

    def is_displacement_achievable(
        self,
        geometry: HullGeometry,
        loadcase: Loadcase,
        target_displacement: Any,
        displacement_type: DisplacementType = DisplacementType.WEIGHT,
    ) -> bool:
        """True if a level draft within the waterline range reaches the target."""
        with engine_context():
            target = self._positive(target_displacement, "target_displacement")
            hydro = self.calculator.compute_at(geometry, loadcase, geometry.max_z)
            capacity = hydro.disp_weight if displacement_type is DisplacementType.WEIGHT else hydro.disp_volume
            return target <= capacity

    @staticmethod
    def _positive(value: Any, name: str) -> Decimal:
        try:
            value = to_decimal(value, name)
        except (TypeError, ValueError) as e:
            raise ArgumentError(str(e), param=name, value=value) from None
        if value <= 0:
            raise ArgumentError(f"{name} must be positive: {value}", param=name, value=value)
        return value


class _TrimRun:
    """Inputs shared by the iterations of one solve() call."""

    def __init__(
        self,
        calculator: HydrostaticsCalculator,
        geometry: HullGeometry,
        loadcase: Loadcase,
        target: Decimal,
        tolerance: Decimal,
        displacement_type: DisplacementType,
        balance_trim: bool,
        config: EngineConfig,
    ):
        self.calculator = calculator
        self.integrator: SectionalIntegrator = calculator.integrator(geometry)
        self.geometry = geometry
        self.loadcase = loadcase
        self.target = target
        self.tolerance = tolerance
        self.displacement_type = displacement_type
        self.balance_trim = balance_trim
        self.digits = config.fractional_digits
        self.fd_step = config.trim_fd_step
        self.lever_tolerance = config.trim_lever_tolerance

        # Mean draft stays clear of the keel, the deeper end below the top waterline
        self.min_draft = max(geometry.keel_z, ZERO) + self.fd_step
        self.max_draft = geometry.max_z
        self.max_step = config.trim_damping_fraction * (geometry.max_z - geometry.keel_z)

    # -------------------------------------------------------------------------

    def solve(
        self,
        initial: _State,
        max_iterations: int,
        cancel_token: Optional[CancellationToken],
    ) -> TrimSolverResult:
        state = self._clamp(initial)
        trace: List[TrimIteration] = []
        evaluated: List[HydroResult] = []
        converged = False

        for k in range(1, max_iterations + 1):
            check_cancelled(cancel_token, "solve_trim", f"iteration {k}")
            hydro = self._evaluate(state)
            displacement = self._displacement(hydro)
            residual = self.target - displacement
            lever = hydro.lcb - self.loadcase.lcg if self.balance_trim else None
            evaluated.append(hydro)

            if self._within_tolerance(residual, lever):
                trace.append(self._record(k, state, displacement, residual, lever))
                converged = True
                break

            next_state, derivative = self._step(state, hydro, displacement, residual, lever)
            trace.append(self._record(k, state, displacement, residual, lever,
                                      derivative, next_state.mean - state.mean))
            logger.debug(
                f"Trim iteration {k}: T={state.mean} trim={state.trim} "
                f"residual={residual} lever={lever}"
            )
            state = next_state

        if converged:
            best = len(trace) - 1
        else:
            best = min(range(len(trace)), key=lambda i: (abs(trace[i].residual), abs(trace[i].lever or ZERO)))
            logger.info(
                f"Trim solver did not converge in {max_iterations} iterations; "
                f"best residual {trace[best].residual}"
            )

        step = trace[best]
        hydro = evaluated[best]
        return TrimSolverResult(
            target_displacement=self.target,
            displacement_type=self.displacement_type,
            draft_aft=step.draft_aft,
            draft_fwd=step.draft_fwd,
            mean_draft=step.mean_draft,
            trim=step.trim,
            trim_angle=hydro.trim_angle,
            converged=converged,
            iterations=len(trace) if converged else max_iterations,
            residual=step.residual,
            lever_residual=step.lever,
            hydro=hydro,
            lcf=hydro.lcf,
            mct=hydro.mct,
            trace=tuple(trace),
        )

    # -------------------------------------------------------------------------

    def _evaluate(self, state: _State) -> HydroResult:
        return self.calculator.compute_drafts_unchecked(
            self.integrator, self.geometry, self.loadcase, state.draft_aft, state.draft_fwd,
        )

    def _displacement(self, hydro: HydroResult) -> Decimal:
        if self.displacement_type is DisplacementType.WEIGHT:
            return hydro.disp_weight
        return hydro.disp_volume

    def _within_tolerance(self, residual: Decimal, lever: Optional[Decimal]) -> bool:
        if abs(residual) > self.tolerance:
            return False
        return lever is None or abs(lever) <= self.lever_tolerance

    def _record(self, k, state, displacement, residual, lever, derivative=None, step=None) -> TrimIteration:
        return TrimIteration(
            iteration=k,
            draft_aft=state.draft_aft,
            draft_fwd=state.draft_fwd,
            mean_draft=state.mean,
            trim=state.trim,
            displacement=displacement,
            residual=residual,
            lever=lever,
            derivative=derivative,
            step=step,
        )

    def _step(
        self,
        state: _State,
        hydro: HydroResult,
        displacement: Decimal,
        residual: Decimal,
        lever: Optional[Decimal],
    ) -> Tuple[_State, Decimal]:
        """Newton update from `state`; returns (next state, dΔ/dT)."""
        d_mean, disp_m, lcb_m = self._perturb(state, self.fd_step, ZERO)
        derivative = (disp_m - displacement) / d_mean
        if derivative <= 0:
            # Finite difference collapsed (e.g. clamped range); use ρ·Awp
            derivative = hydro.awp
            if self.displacement_type is DisplacementType.WEIGHT:
                derivative *= self.loadcase.rho

        dm = dt = ZERO
        if lever is not None:
            d_trim, disp_t, lcb_t = self._perturb(state, ZERO, self.fd_step)
            a = derivative
            b = (disp_t - displacement) / d_trim
            c = (lcb_m - hydro.lcb) / d_mean
            d = (lcb_t - hydro.lcb) / d_trim
            det = a * d - b * c
            if abs(det) > SINGULAR_DETERMINANT:
                dm = (residual * d + b * lever) / det
                dt = (-a * lever - c * residual) / det
            elif derivative > 0:
                dm = residual / derivative
        elif derivative > 0:
            dm = residual / derivative
        else:
            dm = self.max_step if residual > 0 else -self.max_step

        dm = max(-self.max_step, min(self.max_step, dm))
        dt = max(-self.max_step, min(self.max_step, dt))
        return self._clamp(_State(state.mean + dm, state.trim + dt)), derivative

    def _perturb(self, state: _State, d_mean: Decimal, d_trim: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
        """
        Evaluate a perturbed state, stepping backward near the top of the range.

        Returns:
            (signed perturbation applied, displacement, LCB)
        """
        delta = d_mean or d_trim
        candidate = _State(state.mean + d_mean, state.trim + d_trim)
        if candidate.draft_aft > self.max_draft or candidate.draft_fwd > self.max_draft:
            delta = -delta
            candidate = _State(state.mean - d_mean, state.trim - d_trim)
        hydro = self._evaluate(candidate)
        return delta, self._displacement(hydro), hydro.lcb

    def _clamp(self, state: _State) -> _State:
        """Shift (and if needed flatten) the waterline into the defined range."""
        limit = TWO * (self.max_draft - self.min_draft)
        trim = max(-limit, min(limit, state.trim))
        mean = max(state.mean, self.min_draft)
        high = mean + abs(trim) / TWO
        if high > self.max_draft:
            mean -= high - self.max_draft
        return _State(quantize(mean, self.digits), quantize(trim, self.digits))
