"""
NAVHYDRO Core

Physical constants, decimal precision policy, engine configuration and
cooperative cancellation shared by every calculator.
"""

from .constants import (
    SEAWATER_DENSITY_KG_M3,
    FRESHWATER_DENSITY_KG_M3,
)

from .precision import (
    DEFAULT_FRACTIONAL_DIGITS,
    ZERO,
    ONE,
    to_decimal,
    quantize,
    engine_context,
    sin_deg,
    cos_deg,
    tan_deg,
    atan_deg,
)

from .config import (
    OutOfRangePolicy,
    EngineConfig,
    DEFAULT_ENGINE_CONFIG,
    get_engine_config,
    set_engine_config,
)

from .cancellation import CancellationToken

__all__ = [
    # Constants
    "SEAWATER_DENSITY_KG_M3",
    "FRESHWATER_DENSITY_KG_M3",
    # Precision
    "DEFAULT_FRACTIONAL_DIGITS",
    "ZERO",
    "ONE",
    "to_decimal",
    "quantize",
    "engine_context",
    "sin_deg",
    "cos_deg",
    "tan_deg",
    "atan_deg",
    # Config
    "OutOfRangePolicy",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "get_engine_config",
    "set_engine_config",
    # Cancellation
    "CancellationToken",
]
