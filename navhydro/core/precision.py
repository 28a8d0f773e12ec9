"""
NAVHYDRO Decimal Precision Policy

All hydrostatic inputs and outputs are fixed-precision decimals rather than
binary floats, so results are reproducible and can be audited against hand
calculations.

- Intermediate arithmetic runs in a 28-digit context with banker's rounding.
- Published results are quantized to DEFAULT_FRACTIONAL_DIGITS places.
- Trigonometric values come from math on floats and are converted through
  their shortest repr, so the same angle always yields the same Decimal.
"""

from __future__ import annotations
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Any, Optional
import math


# =============================================================================
# PRECISION SETTINGS
# =============================================================================

# Significant digits carried through intermediate calculations
CALCULATION_PRECISION = 28

# Fractional digits of published results (m, m², m³, kg, degrees)
DEFAULT_FRACTIONAL_DIGITS = 6

ZERO = Decimal(0)
ONE = Decimal(1)
TWO = Decimal(2)
HALF = Decimal("0.5")


def engine_context():
    """
    Context manager installing the engine's arithmetic context.

    decimal contexts are thread-local, so concurrent calculations never
    share rounding state.
    """
    return localcontext(Context(prec=CALCULATION_PRECISION, rounding=ROUND_HALF_EVEN))


# =============================================================================
# CONVERSION
# =============================================================================

def to_decimal(value: Any, name: str = "value") -> Decimal:
    """
    Convert int/str/float/Decimal to Decimal.

    Floats go through repr() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Raises:
        TypeError: If value is not numeric
        ValueError: If value is NaN or infinite
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise TypeError(f"{name} must be numeric, got bool")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"{name} is not a number: {value!r}") from None
    else:
        raise TypeError(f"{name} must be numeric, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


def optional_decimal(value: Any, name: str = "value") -> Optional[Decimal]:
    """to_decimal() that passes None through."""
    if value is None:
        return None
    return to_decimal(value, name)


def quantize(value: Decimal, digits: int = DEFAULT_FRACTIONAL_DIGITS) -> Decimal:
    """Round to a fixed number of fractional digits (ROUND_HALF_EVEN)."""
    result = value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_EVEN)
    # Normalise -0.000000 to 0.000000
    if result.is_zero():
        return abs(result)
    return result


def _from_float(value: float) -> Decimal:
    return Decimal(repr(value))


# =============================================================================
# TRIGONOMETRY
# =============================================================================

def sin_deg(angle_deg: Decimal) -> Decimal:
    if angle_deg.is_zero():
        return ZERO
    return _from_float(math.sin(math.radians(float(angle_deg))))


def cos_deg(angle_deg: Decimal) -> Decimal:
    if angle_deg.is_zero():
        return ONE
    if abs(angle_deg) == 90:
        return ZERO
    return _from_float(math.cos(math.radians(float(angle_deg))))


def tan_deg(angle_deg: Decimal) -> Decimal:
    if angle_deg.is_zero():
        return ZERO
    return _from_float(math.tan(math.radians(float(angle_deg))))


def atan_deg(ratio: Decimal) -> Decimal:
    """Inverse tangent in degrees."""
    if ratio.is_zero():
        return ZERO
    return _from_float(math.degrees(math.atan(float(ratio))))


def radians(angle_deg: Decimal) -> Decimal:
    return _from_float(math.radians(float(angle_deg)))
