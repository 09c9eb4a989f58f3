# app/schemas/notification.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint


class NotificationCheckResult(BaseModel):
    success: bool
    notifications_created: int
    message: str


class NotificationPreferenceIn(BaseModel):
    email_notifications_enabled: Optional[bool] = None
    notify_maintenance_due: Optional[bool] = None
    notify_maintenance_overdue: Optional[bool] = None
    maintenance_due_days: Optional[conint(ge=1, le=365)] = None
    notify_low_compliance: Optional[bool] = None
    compliance_threshold: Optional[float] = Field(None, ge=0, le=100)


class NotificationPreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_email: str
    email_notifications_enabled: bool
    notify_maintenance_due: bool
    notify_maintenance_overdue: bool
    maintenance_due_days: int
    notify_low_compliance: bool
    compliance_threshold: float
    is_default: bool = False
