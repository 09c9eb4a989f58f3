from datetime import date

import pytest

from app.core.errors import NotFoundError, UpstreamAPIError
from app.models.fleet import ClientBranding
from app.models.user import User
from app.schemas.report import ReportSendRequest
from app.services import reporting
from factories import NOW, add_company, add_maintenance, add_report_pref, add_user, add_vehicle


def _fleet(db):
    company = add_company(db)
    add_user(db, "admin@fleetco.com.au", role="admin", company_id=company.id)
    add_user(
        db,
        "manager@fleetco.com.au",
        role="site_manager",
        company_id=company.id,
        assigned_sites=["S2"],
    )
    add_user(db, "viewer@fleetco.com.au", role="viewer", company_id=company.id)
    add_vehicle(db, "V1", name="Alpha", site_id="S1", washes=9, target=10, company_id=company.id)
    add_vehicle(db, "V2", name="Bravo", site_id="S2", washes=2, target=10, company_id=company.id)
    add_maintenance(db, "V1", date(2026, 3, 8), service_date=date(2026, 2, 10), cost=150.0)
    add_maintenance(db, "V2", date(2026, 3, 14), service_date=date(2026, 1, 5), cost=99.5)
    add_maintenance(db, "V2", date(2026, 6, 1), service_date=date(2026, 2, 20), cost=50.0)
    return company


def _req(**kw):
    return ReportSendRequest.model_validate(kw)


def test_compliance_section_counts_at_risk(db):
    company = _fleet(db)
    vehicles = reporting._company_vehicles(db, company.id)
    section = reporting.build_compliance_section(vehicles)

    assert section["summary"]["totalVehicles"] == 2
    assert section["summary"]["compliantVehicles"] == 1
    assert section["summary"]["atRiskVehicles"] == 1
    assert section["summary"]["averageCompliance"] == 55
    assert section["summary"]["alerts"][0]["title"] == "Low Compliance Alert"


def test_maintenance_section_orders_by_days(db):
    company = _fleet(db)
    vehicles = reporting._company_vehicles(db, company.id)
    records = reporting._records_for(db, vehicles)
    section = reporting.build_maintenance_section(vehicles, records, now=NOW)

    assert section["summary"] == {"upcomingCount": 2, "overdueCount": 1}
    statuses = [(m["vehicleName"], m["status"]) for m in section["upcomingMaintenance"]]
    assert statuses == [("Alpha", "Overdue"), ("Bravo", "Urgent")]


def test_cost_section_filters_by_service_date(db):
    company = _fleet(db)
    vehicles = reporting._company_vehicles(db, company.id)
    records = reporting._records_for(db, vehicles)
    section = reporting.build_cost_section(
        vehicles, records, start=date(2026, 2, 1), end=date(2026, 2, 28)
    )
    assert section == {"summary": {"totalCost": 200, "recordCount": 2}}


def test_scope_vehicles_by_role(db):
    company = _fleet(db)
    vehicles = reporting._company_vehicles(db, company.id)
    def scoped(email):
        user = db.query(User).filter_by(email=email).one()
        return [v.id for v in reporting.scope_vehicles(user, vehicles)]

    assert scoped("admin@fleetco.com.au") == ["V1", "V2"]
    assert scoped("manager@fleetco.com.au") == ["V2"]
    assert scoped("viewer@fleetco.com.au") == []


def test_send_to_single_user(db, outbox):
    _fleet(db)
    result = reporting.send_report(
        db,
        _req(userEmail="admin@fleetco.com.au", reportTypes=["compliance", "costs"]),
        now=NOW,
        send=outbox,
    )

    assert result["sentTo"] == ["admin@fleetco.com.au"]
    assert result["failed"] == []
    msg = outbox.messages[0]
    assert msg["Subject"] == "ELORA Solutions - Fleet Compliance Report"
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "Compliance Overview" in html
    assert "Maintenance Costs" in html
    assert "Maintenance Status" not in html


def test_send_uses_client_branding(db, outbox):
    _fleet(db)
    db.add(
        ClientBranding(
            client_email_domain="fleetco.com.au",
            company_name="FleetCo",
            primary_color="#123456",
        )
    )
    db.commit()

    reporting.send_report(db, _req(userEmail="admin@fleetco.com.au"), now=NOW, send=outbox)

    msg = outbox.messages[0]
    assert msg["Subject"] == "FleetCo - Fleet Compliance Report"
    assert "#123456" in msg.get_body(preferencelist=("html",)).get_content()


def test_unknown_user_is_not_found(db, outbox):
    with pytest.raises(NotFoundError):
        reporting.send_report(db, _req(userEmail="ghost@fleetco.com.au"), now=NOW, send=outbox)


def test_company_mode_sends_to_enabled_recipients(db, outbox):
    company = _fleet(db)
    add_report_pref(db, "admin@fleetco.com.au", company.id)
    add_report_pref(db, "cfo@fleetco.com.au", company.id)
    add_report_pref(db, "gone@fleetco.com.au", company.id, enabled=False)

    result = reporting.send_report(
        db,
        _req(cronMode=True, companyId=company.id, dateRange={"start": "2026-02-01", "end": "2026-02-28"}),
        now=NOW,
        send=outbox,
    )

    assert result["sentTo"] == ["admin@fleetco.com.au", "cfo@fleetco.com.au"]
    assert outbox.recipients == ["admin@fleetco.com.au", "cfo@fleetco.com.au"]


def test_company_without_recipients(db, outbox):
    company = _fleet(db)
    result = reporting.send_report(db, _req(companyId=company.id), now=NOW, send=outbox)
    assert result["sentTo"] == []
    assert outbox.messages == []


def test_partial_failure_is_reported(db, outbox):
    company = _fleet(db)
    add_report_pref(db, "admin@fleetco.com.au", company.id)
    add_report_pref(db, "cfo@fleetco.com.au", company.id)
    outbox.fail_for.add("cfo@fleetco.com.au")

    result = reporting.send_report(db, _req(companyId=company.id), now=NOW, send=outbox)

    assert result["sentTo"] == ["admin@fleetco.com.au"]
    assert [f["email"] for f in result["failed"]] == ["cfo@fleetco.com.au"]


def test_all_failed_raises_upstream_error(db, outbox):
    _fleet(db)
    outbox.fail_for.add("admin@fleetco.com.au")
    with pytest.raises(UpstreamAPIError) as exc:
        reporting.send_report(db, _req(userEmail="admin@fleetco.com.au"), now=NOW, send=outbox)
    assert exc.value.status_code == 502


def test_preview_does_not_send(db, outbox):
    _fleet(db)
    result = reporting.send_report(
        db,
        _req(
            userEmail="admin@fleetco.com.au",
            reportTypes=["compliance"],
            previewOnly=True,
            includeCharts=False,
        ),
        now=NOW,
        send=outbox,
    )
    assert result["preview"] is True
    assert "ELORA Solutions" in result["html"]
    assert "Alpha" not in result["html"]
    assert outbox.messages == []


def test_user_report_stays_inside_own_company(db, outbox):
    _fleet(db)
    other = add_company(db, "Other Freight")
    add_vehicle(db, "X1", name="Secret Truck", company_id=other.id)

    result = reporting.send_report(
        db,
        _req(userEmail="admin@fleetco.com.au", previewOnly=True),
        now=NOW,
        send=outbox,
    )

    assert "Alpha" in result["html"]
    assert "Secret Truck" not in result["html"]


def test_user_report_for_another_company_is_not_found(db, outbox):
    _fleet(db)
    other = add_company(db, "Other Freight")
    add_vehicle(db, "X1", name="Secret Truck", company_id=other.id)

    with pytest.raises(NotFoundError):
        reporting.send_report(
            db,
            _req(userEmail="admin@fleetco.com.au", companyId=other.id, previewOnly=True),
            now=NOW,
            send=outbox,
        )
    assert outbox.messages == []


def test_user_without_company_gets_empty_fleet(db, outbox):
    _fleet(db)
    add_user(db, "floating@fleetco.com.au", role="admin")

    result = reporting.send_report(
        db,
        _req(userEmail="floating@fleetco.com.au", reportTypes=["compliance"], previewOnly=True),
        now=NOW,
        send=outbox,
    )

    assert "Alpha" not in result["html"]
    assert "Bravo" not in result["html"]


# -----------------------------
# HTTP
# -----------------------------
def test_send_endpoint(client, db, monkeypatch, outbox):
    _fleet(db)
    monkeypatch.setattr(reporting, "send_email", outbox)

    resp = client.post("/api/v1/reports/send", json={"userEmail": "admin@fleetco.com.au"})

    assert resp.status_code == 200
    assert resp.json()["sentTo"] == ["admin@fleetco.com.au"]


def test_send_endpoint_requires_a_target(client):
    resp = client.post("/api/v1/reports/send", json={"cronMode": True})
    assert resp.status_code == 422
    assert resp.json()["error"] == "Validation failed."


def test_send_endpoint_unknown_company(client):
    resp = client.post("/api/v1/reports/send", json={"companyId": 42})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Company not found"


def test_send_endpoint_all_failed_is_502(client, db, monkeypatch, outbox):
    _fleet(db)
    outbox.fail_for.add("admin@fleetco.com.au")
    monkeypatch.setattr(reporting, "send_email", outbox)

    resp = client.post("/api/v1/reports/send", json={"userEmail": "admin@fleetco.com.au"})

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "Failed to send email"
    assert body["details"][0]["email"] == "admin@fleetco.com.au"
