# app/crud/preferences.py
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.preferences import EmailDigestPreference, NotificationPreference
from app.schemas.notification import NotificationPreferenceIn
from app.schemas.preferences import DigestPreferenceIn
from app.services.notification_rules import DEFAULT_PREFERENCES

DIGEST_DEFAULTS: Dict[str, Any] = {
    "enabled": True,
    "frequency": "daily",
    "send_time": "08:00",
    "include_compliance": True,
    "include_maintenance": True,
    "include_alerts": True,
    "include_activity": True,
    "only_if_changes": False,
}


# -----------------------------
# Notification preferences
# -----------------------------
def get_notification_preference(db: Session, user_email: str) -> Optional[NotificationPreference]:
    return (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_email == user_email)
        .first()
    )


def default_notification_preference(user_email: str) -> Dict[str, Any]:
    return {"user_email": user_email, **DEFAULT_PREFERENCES, "is_default": True}


def upsert_notification_preference(
    db: Session, user_email: str, data: NotificationPreferenceIn
) -> NotificationPreference:
    # Partial update; a new row starts from the defaults
    obj = get_notification_preference(db, user_email)
    if obj is None:
        obj = NotificationPreference(user_email=user_email, **DEFAULT_PREFERENCES)
        db.add(obj)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(obj, field, value)
    db.commit()
    db.refresh(obj)
    return obj


# -----------------------------
# Digest preferences
# -----------------------------
def get_digest_preference(db: Session, user_email: str) -> Optional[EmailDigestPreference]:
    return (
        db.query(EmailDigestPreference)
        .filter(EmailDigestPreference.user_email == user_email)
        .first()
    )


def save_digest_preference(
    db: Session, user_email: str, data: DigestPreferenceIn
) -> EmailDigestPreference:
    """Full save: fields left out of the payload fall back to the defaults."""
    values = dict(DIGEST_DEFAULTS)
    values.update(data.model_dump(exclude_none=True))

    obj = get_digest_preference(db, user_email)
    if obj is None:
        obj = EmailDigestPreference(user_email=user_email)
        db.add(obj)
    for field, value in values.items():
        setattr(obj, field, value)
    db.commit()
    db.refresh(obj)
    return obj
