# app/schemas/fleet.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr


class FavoriteToggle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_email: constr(strip_whitespace=True, min_length=3) = Field(..., alias="userEmail")
    vehicle_ref: constr(strip_whitespace=True, min_length=1) = Field(..., alias="vehicleRef")
    vehicle_name: Optional[str] = Field(None, alias="vehicleName")
    is_favorite: bool = Field(..., alias="isFavorite")


class FavoriteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_email: str
    vehicle_ref: str
    vehicle_name: Optional[str] = None
    created_at: Optional[datetime] = None


class ComplianceTargetIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    customer_ref: constr(strip_whitespace=True, min_length=1) = Field(..., alias="customerRef")
    type: constr(strip_whitespace=True, min_length=1)
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    target_washes_per_week: conint(ge=1)
    applies_to: Optional[str] = "all"


class ComplianceTargetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_ref: str
    type: str
    name: str
    target_washes_per_week: int
    applies_to: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
