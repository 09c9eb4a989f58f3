# app/api/v1/notifications.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.schemas.notification import NotificationCheckResult
from app.services import notifications as svc

router = APIRouter(prefix="/notifications", tags=["notifications"])


# -----------------------------
# Rule evaluation (cron / manual trigger)
# -----------------------------
@router.post("/check", response_model=NotificationCheckResult)
def check_notifications(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Evaluate maintenance and compliance rules for every user, store new
    notifications (skipping unread duplicates) and email opted-in users.
    """
    return svc.check_notifications(db)


# -----------------------------
# Inbox
# -----------------------------
@router.get("")
def list_notifications(
    user_email: str = Query(..., min_length=3),
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return svc.list_notifications(
        db, user_email=user_email, unread_only=unread_only, limit=limit, offset=offset
    )


@router.post("/read-all")
def mark_all_read(
    user_email: str = Query(..., min_length=3),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"updated": svc.mark_all_read(db, user_email=user_email)}


@router.post("/{notification_id}/read")
def mark_read(notification_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    obj = svc.mark_read(db, notification_id)
    if obj is None:
        raise NotFoundError("Notification not found")
    return svc.notification_out(obj)
