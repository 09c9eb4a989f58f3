# app/schemas/preferences.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

DigestFrequency = Literal["daily", "weekly", "monthly"]


class DigestPreferenceIn(BaseModel):
    """Save payload; camelCase like the dashboard sends it."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: Optional[bool] = None
    frequency: Optional[DigestFrequency] = None
    send_time: Optional[constr(pattern=r"^\d{2}:\d{2}$")] = Field(None, alias="sendTime")
    include_compliance: Optional[bool] = Field(None, alias="includeCompliance")
    include_maintenance: Optional[bool] = Field(None, alias="includeMaintenance")
    include_alerts: Optional[bool] = Field(None, alias="includeAlerts")
    include_activity: Optional[bool] = Field(None, alias="includeActivity")
    only_if_changes: Optional[bool] = Field(None, alias="onlyIfChanges")


class DigestPreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    user_email: Optional[str] = None
    enabled: bool = True
    frequency: str = "daily"
    send_time: str = "08:00"
    include_compliance: bool = True
    include_maintenance: bool = True
    include_alerts: bool = True
    include_activity: bool = True
    only_if_changes: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
