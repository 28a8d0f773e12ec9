"""
NAVHYDRO Stability Constants

IMO intact stability criteria and the stability calculation methods.

References:
- IMO Resolution A.749(18), Code on Intact Stability, Section 3.1.2
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List


# =============================================================================
# STABILITY METHODS
# =============================================================================

class StabilityMethod(Enum):
    """How the righting lever is obtained at each heel angle."""
    FULL_IMMERSION = "full_immersion"   # Heeled equilibrium waterline, direct integration
    WALL_SIDED = "wall_sided"           # Wall-sided formula from upright GMt/BMt

    @classmethod
    def values(cls) -> List[str]:
        return [m.value for m in cls]


# =============================================================================
# IMO INTACT STABILITY CRITERIA (A.749(18) 3.1.2)
# =============================================================================

@dataclass(frozen=True)
class IMOIntactCriteria:
    """
    IMO general intact stability criteria for all ships.

    Areas are under the GZ curve, in metre-radians.
    """
    # Area under GZ curve criteria (m·rad)
    area_0_30_min_m_rad: Decimal = Decimal("0.055")    # 0° to 30°
    area_0_40_min_m_rad: Decimal = Decimal("0.090")    # 0° to 40° (or downflooding)
    area_30_40_min_m_rad: Decimal = Decimal("0.030")   # 30° to 40° (or downflooding)

    # GZ curve criteria
    gz_30_min_m: Decimal = Decimal("0.20")             # GZ at 30° or greater
    angle_gz_max_min_deg: Decimal = Decimal("25")      # Angle of maximum GZ

    # Metacentric height
    gm_min_m: Decimal = Decimal("0.15")

    # Standard heel angles the criteria refer to (degrees)
    angle_30_deg: Decimal = Decimal("30")
    angle_40_deg: Decimal = Decimal("40")

    standard: str = "IMO A.749(18)"

    def to_dict(self) -> Dict[str, str]:
        return {
            "area_0_30_min_m_rad": str(self.area_0_30_min_m_rad),
            "area_0_40_min_m_rad": str(self.area_0_40_min_m_rad),
            "area_30_40_min_m_rad": str(self.area_30_40_min_m_rad),
            "gz_30_min_m": str(self.gz_30_min_m),
            "angle_gz_max_min_deg": str(self.angle_gz_max_min_deg),
            "gm_min_m": str(self.gm_min_m),
            "standard": self.standard,
        }


# Singleton instance
IMO_INTACT = IMOIntactCriteria()


# Minimum number of curve points the criteria checker accepts
MIN_CURVE_POINTS = 3
