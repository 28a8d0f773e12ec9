"""
service/requests.py - Request models for the engine facade.

Pydantic models validate caller input before any geometry is loaded.
Numbers arrive as int, float, str or Decimal and are held as Decimal.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from navhydro.physics.curves import CurveType
from navhydro.physics.trim import DisplacementType
from navhydro.stability.constants import StabilityMethod


class VesselRequest(BaseModel):
    """Common vessel/loadcase selection."""
    vessel_id: str = Field(..., min_length=1, description="Vessel identifier")
    loadcase_id: Optional[str] = Field(None, description="Loadcase identifier (default: seawater, no KG)")


class ComputeAtRequest(VesselRequest):
    """Hydrostatics at one floating condition."""
    draft: Decimal = Field(..., gt=0, description="Draft amidships (m)")
    trim_angle: Optional[Decimal] = Field(None, gt=-45, lt=45, description="Trim (degrees, by the stern)")
    heel_angle: Optional[Decimal] = Field(None, ge=-90, le=90, description="Heel (degrees, starboard down)")


class TableRequest(VesselRequest):
    """Hydrostatics at a list of drafts."""
    drafts: List[Decimal] = Field(..., min_length=1, description="Drafts amidships (m)")

    @field_validator('drafts')
    @classmethod
    def validate_drafts(cls, v):
        for draft in v:
            if draft <= 0:
                raise ValueError(f'drafts must be positive: {draft}')
        return v


class TrimRequest(VesselRequest):
    """Free-floating equilibrium at a target displacement."""
    target_displacement: Decimal = Field(..., gt=0, description="Target (kg, or m³ for volume)")
    initial_draft_fwd: Decimal = Field(..., gt=0, description="Starting forward draft (m)")
    initial_draft_aft: Decimal = Field(..., gt=0, description="Starting aft draft (m)")
    max_iterations: Optional[int] = Field(None, ge=1, description="Iteration budget")
    tolerance: Optional[Decimal] = Field(None, gt=0, description="Allowed |residual|")
    displacement_type: str = Field(default="weight", description="weight or volume")
    balance_trim: bool = Field(default=False, description="Also balance LCB against LCG")

    @field_validator('displacement_type')
    @classmethod
    def validate_displacement_type(cls, v):
        valid = [t.value for t in DisplacementType]
        if v.lower() not in valid:
            raise ValueError(f'Invalid displacement type: {v}. Valid: {valid}')
        return v.lower()


class CurveRequest(VesselRequest):
    """Hydrostatic curves over a draft range."""
    curve_types: List[str] = Field(..., min_length=1, description="Curve types to generate")
    min_draft: Decimal = Field(..., gt=0, description="Lowest draft (m)")
    max_draft: Decimal = Field(..., gt=0, description="Highest draft (m)")
    points: Optional[int] = Field(None, ge=2, description="Drafts in the sweep")

    @field_validator('curve_types')
    @classmethod
    def validate_curve_types(cls, v):
        valid = [t.value for t in CurveType]
        normalized = [t.lower() for t in v]
        for curve_type in normalized:
            if curve_type not in valid:
                raise ValueError(f'Invalid curve type: {curve_type}. Valid: {valid}')
        return normalized


class StabilityRequest(VesselRequest):
    """Righting-arm curve for one loadcase."""
    loadcase_id: str = Field(..., min_length=1, description="Loadcase identifier (KG required)")
    min_angle: Optional[Decimal] = Field(None, ge=-90, le=90, description="First heel angle (degrees)")
    max_angle: Optional[Decimal] = Field(None, ge=-90, le=90, description="Last heel angle (degrees)")
    angle_increment: Optional[Decimal] = Field(None, gt=0, description="Heel step (degrees)")
    method: Optional[str] = Field(None, description=f"One of {StabilityMethod.values()}")
    draft: Optional[Decimal] = Field(None, gt=0, description="Upright draft (m)")
