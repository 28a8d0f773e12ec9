"""
physics/integration.py - Numerical quadrature over tabulated data.

Simpson's rule, its composite form with a trapezoidal fallback, and the
quadrature weights used for longitudinal integration along the stations.

Weights policy (simpson_weights):
- Fewer than 2 points: nothing to integrate
- 2 points: trapezoidal rule
- Node pairs use Simpson's rule, in its non-uniform form when the two
  intervals differ
- A trailing odd interval uses the trapezoidal rule
- A pair whose non-uniform Simpson weights would be negative falls back to
  the trapezoidal rule, so every weight is >= 0 and integrals of
  non-negative data stay non-negative
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Sequence

from navhydro.core.precision import ZERO, TWO
from navhydro.errors import ArgumentError

SIX = Decimal(6)

# Relative spacing mismatch accepted as "equally spaced"
SPACING_TOLERANCE = Decimal("0.001")


def _check_lengths(x: Sequence[Decimal], y: Sequence[Decimal]) -> None:
    if len(x) != len(y):
        raise ArgumentError(
            f"x and y must have the same length ({len(x)} != {len(y)})",
            param="y", value=len(y),
        )


def is_equally_spaced(x: Sequence[Decimal], tolerance: Decimal = SPACING_TOLERANCE) -> bool:
    """True when every interval matches the first within `tolerance` (relative)."""
    if len(x) < 3:
        return True
    h = x[1] - x[0]
    return all(abs((x[i + 1] - x[i]) - h) <= tolerance * abs(h) for i in range(len(x) - 1))


# =============================================================================
# BASIC RULES
# =============================================================================

def trapezoidal_rule(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """Trapezoidal rule for arbitrary spacing."""
    _check_lengths(x, y)
    if len(x) < 2:
        raise ArgumentError("Trapezoidal rule requires at least 2 points", param="points", value=len(x))
    total = ZERO
    for i in range(len(x) - 1):
        total += (x[i + 1] - x[i]) * (y[i] + y[i + 1]) / TWO
    return total


def simpsons_rule(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """
    Simpson's 1/3 rule.

    Raises:
        ArgumentError: Even point count, fewer than 3 points, or unequal spacing
    """
    _check_lengths(x, y)
    n = len(x)
    if n < 3 or n % 2 == 0:
        raise ArgumentError(
            f"Simpson's rule requires an odd number of points >= 3, got {n}",
            param="points", value=n,
        )
    if not is_equally_spaced(x):
        raise ArgumentError("Simpson's rule requires equally spaced points", param="x")

    h = (x[-1] - x[0]) / (n - 1)
    total = y[0] + y[-1]
    for i in range(1, n - 1):
        total += (4 if i % 2 == 1 else 2) * y[i]
    return h * total / 3


def composite_simpson(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """
    Simpson's rule that accepts any point count >= 2.

    Even point counts integrate the first n-1 points by Simpson and the last
    interval by the trapezoidal rule; 2 points use the trapezoidal rule.

    Raises:
        ArgumentError: Fewer than 2 points or unequal spacing
    """
    _check_lengths(x, y)
    n = len(x)
    if n < 2:
        raise ArgumentError("Integration requires at least 2 points", param="points", value=n)
    if n == 2:
        return trapezoidal_rule(x, y)
    if n % 2 == 1:
        return simpsons_rule(x, y)
    return simpsons_rule(x[:-1], y[:-1]) + trapezoidal_rule(x[-2:], y[-2:])


# =============================================================================
# QUADRATURE WEIGHTS
# =============================================================================

def pair_weights(h0: Decimal, h1: Decimal) -> List[Decimal]:
    """
    Simpson weights for two adjacent intervals of widths h0, h1.

    Reduces to h/3·(1, 4, 1) for equal intervals.
    """
    span = h0 + h1
    return [
        span / SIX * (TWO - h1 / h0),
        span / SIX * span * span / (h0 * h1),
        span / SIX * (TWO - h0 / h1),
    ]


def simpson_weights(x: Sequence[Decimal]) -> List[Decimal]:
    """
    Non-negative composite Simpson weights for abscissae `x`.

    ∫ f dx ≈ Σ w[i]·f(x[i]).
    """
    n = len(x)
    weights = [ZERO] * n
    if n < 2:
        return weights

    i = 0
    while i + 2 < n:
        h0 = x[i + 1] - x[i]
        h1 = x[i + 2] - x[i + 1]
        pair = pair_weights(h0, h1)
        if pair[0] < 0 or pair[2] < 0:
            weights[i] += h0 / TWO
            weights[i + 1] += (h0 + h1) / TWO
            weights[i + 2] += h1 / TWO
        else:
            weights[i] += pair[0]
            weights[i + 1] += pair[1]
            weights[i + 2] += pair[2]
        i += 2

    if i + 1 < n:
        h = x[i + 1] - x[i]
        weights[i] += h / TWO
        weights[i + 1] += h / TWO
    return weights


def integrate(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """∫ y dx with simpson_weights(); zero for fewer than 2 points."""
    _check_lengths(x, y)
    return sum((w * v for w, v in zip(simpson_weights(x), y)), ZERO)


def first_moment(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """∫ x·y dx."""
    _check_lengths(x, y)
    return integrate(x, [xi * yi for xi, yi in zip(x, y)])


def second_moment(x: Sequence[Decimal], y: Sequence[Decimal]) -> Decimal:
    """∫ x²·y dx."""
    _check_lengths(x, y)
    return integrate(x, [xi * xi * yi for xi, yi in zip(x, y)])
