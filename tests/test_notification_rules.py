from datetime import date, datetime, timezone

import pytest

from app.services import notification_rules as rules

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

ADMIN = {"email": "admin@fleetco.com.au", "role": "admin", "assigned_sites": [], "assigned_vehicles": []}


def _maintenance(next_service_date, vehicle_id="V1", **kw):
    row = {
        "id": 1,
        "vehicle_id": vehicle_id,
        "vehicle_name": "Truck 1",
        "service_type": "oil_change",
        "next_service_date": next_service_date,
    }
    row.update(kw)
    return row


def _evaluate(vehicles=(), records=(), users=(ADMIN,), prefs=()):
    return rules.evaluate(
        vehicles=list(vehicles),
        maintenance_records=list(records),
        users=list(users),
        preferences=list(prefs),
        now=NOW,
    )


def test_days_until_rounds_up_partial_days():
    assert rules.days_until(date(2026, 3, 13), NOW) == 3
    assert rules.days_until(date(2026, 3, 9), NOW) == -1
    assert rules.days_until("2026-03-10T12:00:00Z", NOW) == 0


def test_due_in_three_days_is_warning():
    out = _evaluate(records=[_maintenance(date(2026, 3, 13))])
    assert len(out) == 1
    n = out[0]
    assert n["type"] == rules.TYPE_MAINTENANCE_DUE
    assert n["severity"] == rules.SEVERITY_WARNING
    assert n["title"] == "Maintenance Due Soon"
    assert n["message"] == "Truck 1 has oil change service due in 3 days"
    assert n["metadata"] == {"vehicle_id": "V1", "maintenance_id": 1}


def test_due_later_within_window_is_info():
    out = _evaluate(records=[_maintenance(date(2026, 3, 16))])
    assert [n["severity"] for n in out] == [rules.SEVERITY_INFO]


def test_due_beyond_window_creates_nothing():
    assert _evaluate(records=[_maintenance(date(2026, 3, 20))]) == []


def test_custom_due_window_from_preferences():
    prefs = [{"user_email": ADMIN["email"], "maintenance_due_days": 14}]
    out = _evaluate(records=[_maintenance(date(2026, 3, 20))], prefs=prefs)
    assert [n["type"] for n in out] == [rules.TYPE_MAINTENANCE_DUE]


def test_overdue_since_yesterday_is_critical():
    out = _evaluate(records=[_maintenance(date(2026, 3, 9))])
    assert len(out) == 1
    assert out[0]["type"] == rules.TYPE_MAINTENANCE_OVERDUE
    assert out[0]["severity"] == rules.SEVERITY_CRITICAL
    assert "1 days overdue" in out[0]["message"]


def test_due_today_creates_nothing():
    assert _evaluate(records=[_maintenance("2026-03-10T12:00:00+00:00")]) == []


def test_disabled_overdue_toggle_suppresses_alert():
    prefs = [{"user_email": ADMIN["email"], "notify_maintenance_overdue": False}]
    assert _evaluate(records=[_maintenance(date(2026, 3, 1))], prefs=prefs) == []


def test_records_without_date_or_vehicle_are_skipped():
    records = [_maintenance(None), _maintenance(date(2026, 3, 12), vehicle_id=None)]
    assert _evaluate(records=records) == []


@pytest.mark.parametrize(
    "washes,target,expected",
    [
        (10, 50, rules.SEVERITY_CRITICAL),
        (20, 50, rules.SEVERITY_WARNING),
        (30, 50, None),
        (0, 50, rules.SEVERITY_CRITICAL),
        (5, 0, None),
        (None, 50, None),
    ],
)
def test_low_compliance_severity(washes, target, expected):
    vehicle = {"id": "V1", "name": "Truck 1", "site_id": "S1", "washes_completed": washes, "target": target}
    out = _evaluate(vehicles=[vehicle])
    assert [n["severity"] for n in out] == ([expected] if expected else [])


def test_low_compliance_message():
    vehicle = {"id": "V1", "name": "Truck 1", "site_id": "S1", "washes_completed": 10, "target": 50}
    (n,) = _evaluate(vehicles=[vehicle])
    assert n["title"] == "Low Compliance Alert"
    assert n["message"] == "Truck 1 is at 20% compliance (10/50 washes)"
    assert n["metadata"]["vehicle_id"] == "V1"


def test_driver_only_hears_about_assigned_vehicle():
    driver = {"email": "d@fleetco.com.au", "role": "driver", "assigned_sites": [], "assigned_vehicles": ["V1"]}
    vehicles = [
        {"id": "V1", "name": "One", "site_id": "S1", "washes_completed": 1, "target": 10},
        {"id": "V2", "name": "Two", "site_id": "S1", "washes_completed": 1, "target": 10},
    ]
    out = _evaluate(vehicles=vehicles, users=[driver])
    assert [n["metadata"]["vehicle_id"] for n in out] == ["V1"]


def test_site_manager_scoped_by_vehicle_site():
    manager = {"email": "m@fleetco.com.au", "role": "site_manager", "assigned_sites": ["S2"], "assigned_vehicles": []}
    vehicles = [
        {"id": "V1", "name": "One", "site_id": "S1"},
        {"id": "V2", "name": "Two", "site_id": "S2"},
    ]
    records = [
        _maintenance(date(2026, 3, 12), vehicle_id="V1", id=1),
        _maintenance(date(2026, 3, 12), vehicle_id="V2", id=2),
        _maintenance(date(2026, 3, 12), vehicle_id="V9", id=3),
    ]
    out = _evaluate(vehicles=vehicles, records=records, users=[manager])
    assert [n["metadata"]["maintenance_id"] for n in out] == [2]


def test_other_roles_get_nothing():
    viewer = {"email": "v@fleetco.com.au", "role": "viewer"}
    vehicle = {"id": "V1", "name": "One", "site_id": "S1", "washes_completed": 0, "target": 10}
    assert _evaluate(vehicles=[vehicle], users=[viewer]) == []


def test_effective_preferences_fills_defaults():
    prefs = rules.effective_preferences({"a@x.com.au": {"compliance_threshold": 80}}, "a@x.com.au")
    assert prefs["compliance_threshold"] == 80
    assert prefs["maintenance_due_days"] == 7
    assert prefs["email_notifications_enabled"] is False
    assert rules.effective_preferences({}, "b@x.com.au") == rules.DEFAULT_PREFERENCES
