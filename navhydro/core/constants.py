"""
NAVHYDRO Physical Constants

Constants used by the hydrostatic calculators. Values are exact decimal
strings so that they enter the fixed-precision arithmetic unchanged.
"""

from decimal import Decimal

# ==================== Physical Constants ====================

# Water properties
SEAWATER_DENSITY_KG_M3 = Decimal("1025")  # kg/m³ at 15°C, 35 ppt salinity
FRESHWATER_DENSITY_KG_M3 = Decimal("1000")  # kg/m³ at 15°C

# ==================== Unit Conversions ====================

CM_PER_M = Decimal("100")
