"""
NAVHYDRO Hydrostatic Integration & Equilibrium-Solving Engine

Turns a discretized hull (stations x waterlines -> half-breadth offsets)
into hydrostatic properties, and solves trim and heeled-stability
equilibrium problems on top of that integration.
"""

__version__ = "1.0.0"
