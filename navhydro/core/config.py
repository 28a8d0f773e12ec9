"""
core/config.py - Engine configuration

Provides numeric policy and solver defaults for the hydrostatic engine.
Every calculator takes an optional EngineConfig; when omitted, the process
default from get_engine_config() is used.
"""

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
import os
import logging

from .constants import SEAWATER_DENSITY_KG_M3
from .precision import DEFAULT_FRACTIONAL_DIGITS

logger = logging.getLogger(__name__)


# =============================================================================
# GEOMETRY LOOKUP POLICY
# =============================================================================

class OutOfRangePolicy(Enum):
    """Behaviour of half-breadth lookups above the highest defined waterline."""
    CLAMP = "clamp"   # Use the highest defined half-breadth (vertical sides)
    ERROR = "error"   # Raise GeometryOutOfRangeError


# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the hydrostatic engine."""

    # Numeric policy
    fractional_digits: int = DEFAULT_FRACTIONAL_DIGITS
    default_rho: Decimal = SEAWATER_DENSITY_KG_M3
    out_of_range_policy: OutOfRangePolicy = OutOfRangePolicy.CLAMP

    # Trim solver
    trim_max_iterations: int = 20
    trim_weight_tolerance: Decimal = Decimal("100")     # kg
    trim_volume_tolerance: Decimal = Decimal("0.1")     # m³
    trim_fd_step: Decimal = Decimal("0.01")             # m
    trim_damping_fraction: Decimal = Decimal("0.1")     # of waterline span
    trim_lever_tolerance: Decimal = Decimal("0.001")    # m

    # Heeled equilibrium search
    heel_volume_rel_tolerance: Decimal = Decimal("1E-10")
    heel_max_iterations: int = 100

    # Sweeps
    curve_default_points: int = 20
    stability_min_angle: Decimal = Decimal("0")
    stability_max_angle: Decimal = Decimal("90")
    stability_angle_increment: Decimal = Decimal("5")
    stability_default_method: str = "full_immersion"

    def __post_init__(self):
        """Validate configuration."""
        if not 0 <= self.fractional_digits <= 12:
            raise ValueError(f"fractional_digits must be in [0, 12]: {self.fractional_digits}")
        if self.default_rho <= 0:
            raise ValueError(f"default_rho must be positive: {self.default_rho}")
        if self.trim_max_iterations < 1:
            raise ValueError("trim_max_iterations must be at least 1")
        if self.trim_fd_step <= 0:
            raise ValueError("trim_fd_step must be positive")
        if not 0 < self.trim_damping_fraction <= 1:
            raise ValueError("trim_damping_fraction must be in (0, 1]")
        if self.heel_max_iterations < 1:
            raise ValueError("heel_max_iterations must be at least 1")
        if self.curve_default_points < 2:
            raise ValueError("curve_default_points must be at least 2")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create configuration from environment variables."""
        policy = os.getenv("NAVHYDRO_OUT_OF_RANGE_POLICY", "clamp").lower()
        try:
            out_of_range_policy = OutOfRangePolicy(policy)
        except ValueError:
            logger.warning(f"Invalid NAVHYDRO_OUT_OF_RANGE_POLICY '{policy}', using clamp")
            out_of_range_policy = OutOfRangePolicy.CLAMP

        return cls(
            fractional_digits=int(os.getenv("NAVHYDRO_FRACTIONAL_DIGITS", str(DEFAULT_FRACTIONAL_DIGITS))),
            default_rho=Decimal(os.getenv("NAVHYDRO_DEFAULT_RHO", str(SEAWATER_DENSITY_KG_M3))),
            out_of_range_policy=out_of_range_policy,
            trim_max_iterations=int(os.getenv("NAVHYDRO_TRIM_MAX_ITERATIONS", "20")),
            trim_weight_tolerance=Decimal(os.getenv("NAVHYDRO_TRIM_WEIGHT_TOLERANCE", "100")),
            trim_volume_tolerance=Decimal(os.getenv("NAVHYDRO_TRIM_VOLUME_TOLERANCE", "0.1")),
            trim_fd_step=Decimal(os.getenv("NAVHYDRO_TRIM_FD_STEP", "0.01")),
            trim_damping_fraction=Decimal(os.getenv("NAVHYDRO_TRIM_DAMPING_FRACTION", "0.1")),
            trim_lever_tolerance=Decimal(os.getenv("NAVHYDRO_TRIM_LEVER_TOLERANCE", "0.001")),
            heel_volume_rel_tolerance=Decimal(os.getenv("NAVHYDRO_HEEL_VOLUME_TOLERANCE", "1E-10")),
            heel_max_iterations=int(os.getenv("NAVHYDRO_HEEL_MAX_ITERATIONS", "100")),
            curve_default_points=int(os.getenv("NAVHYDRO_CURVE_POINTS", "20")),
            stability_min_angle=Decimal(os.getenv("NAVHYDRO_STABILITY_MIN_ANGLE", "0")),
            stability_max_angle=Decimal(os.getenv("NAVHYDRO_STABILITY_MAX_ANGLE", "90")),
            stability_angle_increment=Decimal(os.getenv("NAVHYDRO_STABILITY_ANGLE_INCREMENT", "5")),
            stability_default_method=os.getenv("NAVHYDRO_STABILITY_METHOD", "full_immersion"),
        )

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary; decimals as strings."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, Enum):
                value = value.value
            data[f.name] = value
        return data


# Default configuration
DEFAULT_ENGINE_CONFIG = EngineConfig()

_engine_config: Optional[EngineConfig] = None


def get_engine_config() -> EngineConfig:
    """Get the process-wide engine configuration."""
    global _engine_config
    if _engine_config is None:
        _engine_config = EngineConfig.from_env()
    return _engine_config


def set_engine_config(config: Optional[EngineConfig]) -> None:
    """Set the process-wide engine configuration (None resets to environment)."""
    global _engine_config
    _engine_config = config
