# app/services/notifications.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core import config
from app.models.maintenance import MaintenanceRecord
from app.models.notification import Notification
from app.models.preferences import NotificationPreference
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services import notification_rules as rules
from app.services.mailer import build_message, send_email

log = logging.getLogger("app.notifications")

EMAIL_FOOTER = "This is an automated notification from Fleet Compliance Portal."
SNAPSHOT_LIMIT = 1000

SendFn = Callable[[EmailMessage], Any]


# ---------------------------------
# Snapshot loading
# ---------------------------------
def _vehicle_row(v: Vehicle) -> Dict[str, Any]:
    return {
        "id": v.id,
        "name": v.name,
        "site_id": v.site_id,
        "washes_completed": v.washes_completed,
        "target": v.target,
    }


def _maintenance_row(m: MaintenanceRecord) -> Dict[str, Any]:
    return {
        "id": m.id,
        "vehicle_id": m.vehicle_id,
        "vehicle_name": m.vehicle_name,
        "service_type": m.service_type,
        "next_service_date": m.next_service_date,
    }


def _user_row(u: User) -> Dict[str, Any]:
    return {
        "email": u.email,
        "role": u.role,
        "assigned_sites": list(u.assigned_sites or []),
        "assigned_vehicles": list(u.assigned_vehicles or []),
    }


def preference_row(p: NotificationPreference) -> Dict[str, Any]:
    return {
        "user_email": p.user_email,
        "email_notifications_enabled": bool(p.email_notifications_enabled),
        "notify_maintenance_due": bool(p.notify_maintenance_due),
        "notify_maintenance_overdue": bool(p.notify_maintenance_overdue),
        "maintenance_due_days": p.maintenance_due_days,
        "notify_low_compliance": bool(p.notify_low_compliance),
        "compliance_threshold": p.compliance_threshold,
    }


def load_snapshot(db: Session, *, limit: int = SNAPSHOT_LIMIT) -> Dict[str, List[Dict[str, Any]]]:
    """Read everything the rule evaluator needs (plain dicts, detached from the session)."""
    vehicles = db.query(Vehicle).order_by(Vehicle.updated_at.desc()).limit(limit).all()
    records = (
        db.query(MaintenanceRecord)
        .order_by(MaintenanceRecord.service_date.desc())
        .limit(limit)
        .all()
    )
    users = db.query(User).filter(User.is_active.is_(True)).all()
    prefs = db.query(NotificationPreference).all()
    return {
        "vehicles": [_vehicle_row(v) for v in vehicles],
        "maintenance_records": [_maintenance_row(m) for m in records],
        "users": [_user_row(u) for u in users],
        "preferences": [preference_row(p) for p in prefs],
    }


# ---------------------------------
# Deduplication
# ---------------------------------
def _dedupe_key(candidate: Mapping[str, Any]) -> Tuple[str, str, Any]:
    meta = candidate.get("metadata") or {}
    if candidate["type"] == rules.TYPE_LOW_COMPLIANCE:
        ref = meta.get("vehicle_id")
    else:
        ref = meta.get("maintenance_id")
    return (candidate["user_email"], candidate["type"], ref)


def has_unread_duplicate(db: Session, candidate: Mapping[str, Any]) -> bool:
    """
    True if the user already has an unread notification of the same type about the
    same subject (maintenance id for maintenance alerts, vehicle id for low compliance).
    """
    email, notif_type, ref = _dedupe_key(candidate)
    q = db.query(Notification.id).filter(
        Notification.user_email == email,
        Notification.type == notif_type,
        Notification.read.is_(False),
    )
    if notif_type == rules.TYPE_LOW_COMPLIANCE:
        q = q.filter(Notification.vehicle_id == (str(ref) if ref is not None else None))
    else:
        q = q.filter(Notification.maintenance_id == ref)
    return q.first() is not None


def dedupe_candidates(db: Session, candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen = set()
    out: List[Dict[str, Any]] = []
    for c in candidates:
        key = _dedupe_key(c)
        if key in seen:
            continue
        seen.add(key)
        if has_unread_duplicate(db, c):
            continue
        out.append(c)
    return out


# ---------------------------------
# Dispatch
# ---------------------------------
def persist_notification(db: Session, candidate: Mapping[str, Any]) -> Notification:
    meta = dict(candidate.get("metadata") or {})
    vehicle_id = meta.get("vehicle_id")
    obj = Notification(
        user_email=candidate["user_email"],
        title=candidate["title"],
        message=candidate["message"],
        type=candidate["type"],
        severity=candidate["severity"],
        vehicle_id=str(vehicle_id) if vehicle_id is not None else None,
        maintenance_id=meta.get("maintenance_id"),
        payload=meta,
        read=False,
        created_at=datetime.utcnow(),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def email_notification(notification: Notification, *, send: SendFn = send_email) -> Any:
    msg = build_message(
        notification.title,
        f"{notification.message}\n\n{EMAIL_FOOTER}",
        config.mail_from_notifications(),
        notification.user_email,
    )
    return send(msg)


def dispatch_notifications(
    db: Session,
    candidates: List[Dict[str, Any]],
    prefs_by_email: Mapping[str, Mapping[str, Any]],
    *,
    send: Optional[SendFn] = None,
) -> List[Notification]:
    """
    Persist every candidate (each in its own commit), then email it when the
    recipient opted in. Failures are logged per item and never abort the batch;
    an email failure never removes the stored notification.
    """
    send = send or send_email
    created: List[Notification] = []

    for candidate in candidates:
        try:
            obj = persist_notification(db, candidate)
        except Exception:
            db.rollback()
            log.exception(
                "failed to store notification type=%s user=%s",
                candidate.get("type"),
                candidate.get("user_email"),
            )
            continue
        created.append(obj)

        prefs = prefs_by_email.get(obj.user_email)
        if not (prefs and prefs.get("email_notifications_enabled")):
            continue
        try:
            email_notification(obj, send=send)
        except Exception:
            log.exception("failed to email notification id=%s to %s", obj.id, obj.user_email)

    return created


# ---------------------------------
# Entry point
# ---------------------------------
def check_notifications(
    db: Session,
    *,
    now: Optional[datetime] = None,
    send: Optional[SendFn] = None,
) -> Dict[str, Any]:
    """Evaluate rules, drop duplicates, store and email. Returns the API response dict."""
    now = now or datetime.now(timezone.utc)
    snapshot = load_snapshot(db)

    candidates = rules.evaluate(now=now, **snapshot)
    fresh = dedupe_candidates(db, candidates)
    prefs_by_email = {p["user_email"]: p for p in snapshot["preferences"]}
    created = dispatch_notifications(db, fresh, prefs_by_email, send=send)

    log.info(
        "notification check: candidates=%s new=%s created=%s",
        len(candidates),
        len(fresh),
        len(created),
    )
    return {
        "success": True,
        "notifications_created": len(created),
        "message": f"Created {len(created)} notifications",
    }


# ---------------------------------
# Inbox
# ---------------------------------
def notification_out(n: Notification) -> Dict[str, Any]:
    return {
        "id": n.id,
        "user_email": n.user_email,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "severity": n.severity,
        "metadata": n.payload or {},
        "read": bool(n.read),
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


def list_notifications(
    db: Session,
    *,
    user_email: str,
    unread_only: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    q = db.query(Notification).filter(Notification.user_email == user_email)
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    total = q.with_entities(func.count(Notification.id)).scalar() or 0
    rows = (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {"items": [notification_out(n) for n in rows], "count": int(total)}


def mark_read(db: Session, notification_id: int) -> Optional[Notification]:
    obj = db.get(Notification, notification_id)
    if obj is None:
        return None
    if not obj.read:
        obj.read = True
        db.commit()
        db.refresh(obj)
    return obj


def mark_all_read(db: Session, *, user_email: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_email == user_email, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return int(updated or 0)
