# app/services/notification_rules.py
"""
Notification rule evaluation over an in-memory snapshot.

Everything here is pure: callers load vehicles, maintenance records, users and
preferences (plain dicts, as returned by ``.mappings()`` or built in tests),
pass an explicit ``now`` and get back a list of candidate notifications.
Deduplication and persistence live in ``app.services.notifications``.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

# ---------------------------------
# Constants
# ---------------------------------
TYPE_MAINTENANCE_DUE = "maintenance_due"
TYPE_MAINTENANCE_OVERDUE = "maintenance_overdue"
TYPE_LOW_COMPLIANCE = "low_compliance"

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_CRITICAL = "critical"

URGENT_DUE_DAYS = 3
CRITICAL_COMPLIANCE_RATE = 25.0

# Used for users without a stored notification_preferences row.
DEFAULT_PREFERENCES: Dict[str, Any] = {
    "email_notifications_enabled": False,
    "notify_maintenance_due": True,
    "notify_maintenance_overdue": True,
    "maintenance_due_days": 7,
    "notify_low_compliance": True,
    "compliance_threshold": 50,
}

_DAY_SECONDS = 86400.0


# ---------------------------------
# Helpers
# ---------------------------------
def _as_utc(v: Any) -> Optional[datetime]:
    """date / datetime / ISO string -> aware UTC datetime (date-only means 00:00 UTC)."""
    if v is None or v == "":
        return None
    if isinstance(v, str):
        s = v.strip()
        if len(s) == 10:
            v = date.fromisoformat(s)
        else:
            v = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if isinstance(v, datetime):
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)
    if isinstance(v, date):
        return datetime.combine(v, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Unsupported date value: {v!r}")


def days_until(next_service_date: Any, now: datetime) -> int:
    """Whole days until the service date, rounded up (negative when overdue)."""
    target = _as_utc(next_service_date)
    current = _as_utc(now)
    if target is None or current is None:
        raise ValueError("next_service_date and now are required")
    return int(math.ceil((target - current).total_seconds() / _DAY_SECONDS))


def compliance_rate(washes_completed: Any, target: Any) -> Optional[float]:
    """washes_completed / target * 100, or None if there is nothing to measure."""
    if washes_completed is None or not target:
        return None
    # zero washes against a real target is measured (0%), only a missing count skips
    return float(washes_completed) / float(target) * 100.0


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _service_label(service_type: Optional[str]) -> str:
    return (service_type or "scheduled").replace("_", " ")


def effective_preferences(
    prefs_by_email: Mapping[str, Mapping[str, Any]], email: str
) -> Dict[str, Any]:
    """Stored preferences (missing fields filled with defaults) or the defaults."""
    stored = prefs_by_email.get(email)
    out = dict(DEFAULT_PREFERENCES)
    if stored:
        for k in DEFAULT_PREFERENCES:
            if stored.get(k) is not None:
                out[k] = stored[k]
    return out


def resolve_recipients(
    users: Iterable[Mapping[str, Any]],
    *,
    vehicle_id: Any,
    site_id: Any,
) -> List[Mapping[str, Any]]:
    """
    Users who should hear about a vehicle:
      - admin: always
      - site_manager: vehicle's site is in assigned_sites
      - driver: vehicle id is in assigned_vehicles
      - anyone else: never
    """
    out: List[Mapping[str, Any]] = []
    for u in users:
        role = u.get("role")
        if role == "admin":
            out.append(u)
        elif role == "site_manager":
            if site_id is not None and site_id in (u.get("assigned_sites") or []):
                out.append(u)
        elif role == "driver":
            if vehicle_id in (u.get("assigned_vehicles") or []):
                out.append(u)
    return out


# ---------------------------------
# Rules
# ---------------------------------
def evaluate_maintenance(
    record: Mapping[str, Any],
    vehicles_by_id: Mapping[Any, Mapping[str, Any]],
    users: List[Mapping[str, Any]],
    prefs_by_email: Mapping[str, Mapping[str, Any]],
    now: datetime,
) -> List[Dict[str, Any]]:
    if not record.get("next_service_date") or not record.get("vehicle_id"):
        return []

    vehicle_id = record["vehicle_id"]
    vehicle = vehicles_by_id.get(vehicle_id)
    days = days_until(record["next_service_date"], now)
    vehicle_name = record.get("vehicle_name") or (vehicle or {}).get("name") or str(vehicle_id)
    label = _service_label(record.get("service_type"))
    metadata = {"vehicle_id": vehicle_id, "maintenance_id": record.get("id")}

    candidates: List[Dict[str, Any]] = []
    recipients = resolve_recipients(
        users,
        vehicle_id=vehicle_id,
        site_id=(vehicle or {}).get("site_id"),
    )
    for user in recipients:
        prefs = effective_preferences(prefs_by_email, user["email"])

        if days < 0 and prefs["notify_maintenance_overdue"]:
            candidates.append(
                {
                    "user_email": user["email"],
                    "title": "Overdue Maintenance",
                    "message": f"{vehicle_name} has overdue {label} service ({abs(days)} days overdue)",
                    "type": TYPE_MAINTENANCE_OVERDUE,
                    "severity": SEVERITY_CRITICAL,
                    "metadata": dict(metadata),
                }
            )
        elif 0 < days <= int(prefs["maintenance_due_days"]) and prefs["notify_maintenance_due"]:
            candidates.append(
                {
                    "user_email": user["email"],
                    "title": "Maintenance Due Soon",
                    "message": f"{vehicle_name} has {label} service due in {days} days",
                    "type": TYPE_MAINTENANCE_DUE,
                    "severity": SEVERITY_WARNING if days <= URGENT_DUE_DAYS else SEVERITY_INFO,
                    "metadata": dict(metadata),
                }
            )
    return candidates


def evaluate_compliance(
    vehicle: Mapping[str, Any],
    users: List[Mapping[str, Any]],
    prefs_by_email: Mapping[str, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    rate = compliance_rate(vehicle.get("washes_completed"), vehicle.get("target"))
    if rate is None:
        return []

    candidates: List[Dict[str, Any]] = []
    recipients = resolve_recipients(
        users, vehicle_id=vehicle.get("id"), site_id=vehicle.get("site_id")
    )
    for user in recipients:
        prefs = effective_preferences(prefs_by_email, user["email"])
        if rate < float(prefs["compliance_threshold"]) and prefs["notify_low_compliance"]:
            candidates.append(
                {
                    "user_email": user["email"],
                    "title": "Low Compliance Alert",
                    "message": (
                        f"{vehicle.get('name')} is at {_round_half_up(rate)}% compliance "
                        f"({vehicle.get('washes_completed')}/{vehicle.get('target')} washes)"
                    ),
                    "type": TYPE_LOW_COMPLIANCE,
                    "severity": SEVERITY_CRITICAL if rate < CRITICAL_COMPLIANCE_RATE else SEVERITY_WARNING,
                    "metadata": {"vehicle_id": vehicle.get("id"), "compliance_rate": rate},
                }
            )
    return candidates


def evaluate(
    *,
    vehicles: List[Mapping[str, Any]],
    maintenance_records: List[Mapping[str, Any]],
    users: List[Mapping[str, Any]],
    preferences: List[Mapping[str, Any]],
    now: datetime,
) -> List[Dict[str, Any]]:
    """All candidate notifications for this snapshot: maintenance first, then compliance."""
    prefs_by_email = {p["user_email"]: p for p in preferences}
    vehicles_by_id = {v["id"]: v for v in vehicles}

    candidates: List[Dict[str, Any]] = []
    for record in maintenance_records:
        candidates.extend(
            evaluate_maintenance(record, vehicles_by_id, users, prefs_by_email, now)
        )
    for vehicle in vehicles:
        candidates.extend(evaluate_compliance(vehicle, users, prefs_by_email))
    return candidates
