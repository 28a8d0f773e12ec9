"""
NAVHYDRO Physics

Numerical integration, hydrostatics, trim equilibrium and hydrostatic curves.
"""

from .integration import (
    trapezoidal_rule,
    simpsons_rule,
    composite_simpson,
    simpson_weights,
    integrate,
    first_moment,
    second_moment,
)

from .sections import (
    Waterplane,
    SectionProperties,
    SectionalIntegrator,
)

from .hydrostatics import (
    HydroResult,
    HydrostaticsCalculator,
)

from .trim import (
    DisplacementType,
    TrimIteration,
    TrimSolverResult,
    TrimSolver,
)

from .curves import (
    CurveType,
    CurvePoint,
    Curve,
    CurveGenerator,
)

__all__ = [
    # Integration
    "trapezoidal_rule",
    "simpsons_rule",
    "composite_simpson",
    "simpson_weights",
    "integrate",
    "first_moment",
    "second_moment",
    # Sections
    "Waterplane",
    "SectionProperties",
    "SectionalIntegrator",
    # Hydrostatics
    "HydroResult",
    "HydrostaticsCalculator",
    # Trim
    "DisplacementType",
    "TrimIteration",
    "TrimSolverResult",
    "TrimSolver",
    # Curves
    "CurveType",
    "CurvePoint",
    "Curve",
    "CurveGenerator",
]
