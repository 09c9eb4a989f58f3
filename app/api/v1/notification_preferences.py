# app/api/v1/notification_preferences.py
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import preferences as crud
from app.db.session import get_db
from app.schemas.notification import NotificationPreferenceIn, NotificationPreferenceOut

router = APIRouter(prefix="/notification-preferences", tags=["notifications"])


@router.get("/{user_email}", response_model=NotificationPreferenceOut)
def get_notification_preferences(user_email: str, db: Session = Depends(get_db)) -> Any:
    obj = crud.get_notification_preference(db, user_email)
    if obj is None:
        return crud.default_notification_preference(user_email)
    return obj


@router.put("/{user_email}", response_model=NotificationPreferenceOut)
def save_notification_preferences(
    user_email: str,
    payload: NotificationPreferenceIn,
    db: Session = Depends(get_db),
) -> Any:
    return crud.upsert_notification_preference(db, user_email, payload)
