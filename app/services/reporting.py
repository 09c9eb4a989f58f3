# app/services/reporting.py
from __future__ import annotations

import logging
from pathlib import Path
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from app.core import config
from app.core.errors import NotFoundError, UpstreamAPIError
from app.models.company import Company
from app.models.fleet import ClientBranding
from app.models.maintenance import MaintenanceRecord
from app.models.preferences import EmailReportPreference
from app.models.user import User
from app.models.vehicle import Vehicle
from app.schemas.report import ReportSendRequest
from app.services.mailer import build_message, send_email
from app.services.notification_rules import compliance_rate, days_until

log = logging.getLogger("app.reports")

COMPLIANT_RATE = 80.0
UPCOMING_WINDOW_DAYS = 30
URGENT_WINDOW_DAYS = 7
DEFAULT_RANGE_DAYS = 30
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

DEFAULT_BRANDING: Dict[str, Any] = {
    "company_name": "ELORA Solutions",
    "logo_url": None,
    "primary_color": "#7CB342",
    "secondary_color": "#9CCC65",
}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


# -----------------------------
# Scoping helpers
# -----------------------------
def _wants(report_types: Optional[Iterable[str]], name: str) -> bool:
    types = list(report_types or [])
    return not types or name in types


def resolve_date_range(
    date_range: Optional[Any], *, now: datetime
) -> Tuple[date, date]:
    if date_range is not None:
        return date_range.start, date_range.end
    end = now.date()
    return end - timedelta(days=DEFAULT_RANGE_DAYS), end


def scope_vehicles(user: Optional[User], vehicles: List[Vehicle]) -> List[Vehicle]:
    """
    Vehicles a recipient may see: admins (and company-level recipients without a
    user row) get everything passed in; others get their assigned sites, else
    their assigned vehicles, else nothing.
    """
    if user is None or user.role == "admin":
        return list(vehicles)
    sites = list(user.assigned_sites or [])
    if sites:
        return [v for v in vehicles if v.site_id in sites]
    assigned = list(user.assigned_vehicles or [])
    if assigned:
        return [v for v in vehicles if v.id in assigned]
    return []


def lookup_branding(db: Session, email: str) -> Dict[str, Any]:
    domain = email.split("@", 1)[-1].lower()
    row = (
        db.query(ClientBranding)
        .filter(ClientBranding.client_email_domain == domain)
        .first()
    )
    if row is None:
        return dict(DEFAULT_BRANDING)
    return {
        "company_name": row.company_name or DEFAULT_BRANDING["company_name"],
        "logo_url": row.logo_url,
        "primary_color": row.primary_color or DEFAULT_BRANDING["primary_color"],
        "secondary_color": row.secondary_color or DEFAULT_BRANDING["secondary_color"],
    }


# -----------------------------
# Report sections
# -----------------------------
def build_compliance_section(vehicles: List[Vehicle]) -> Dict[str, Any]:
    rows = []
    for v in vehicles:
        rate = compliance_rate(v.washes_completed, v.target) or 0.0
        rows.append(
            {
                "name": v.name or "Unknown",
                "site": v.site_name or "N/A",
                "complianceRate": round(rate),
                "washesCompleted": v.washes_completed or 0,
                "targetWashes": v.target or 0,
                "status": "Compliant" if rate >= COMPLIANT_RATE else "At Risk",
            }
        )

    at_risk = [r for r in rows if r["status"] == "At Risk"]
    average = round(sum(r["complianceRate"] for r in rows) / len(rows)) if rows else 0

    alerts = []
    if at_risk:
        alerts.append(
            {
                "title": "Low Compliance Alert",
                "message": (
                    f"{len(at_risk)} vehicle(s) are below the {int(COMPLIANT_RATE)}% "
                    "compliance threshold and require attention."
                ),
                "type": "warning",
            }
        )

    return {
        "summary": {
            "averageCompliance": average,
            "totalVehicles": len(rows),
            "compliantVehicles": len(rows) - len(at_risk),
            "atRiskVehicles": len(at_risk),
            "alerts": alerts,
        },
        "vehicles": rows[:20],
    }


def build_maintenance_section(
    vehicles: List[Vehicle], records: List[MaintenanceRecord], *, now: datetime
) -> Dict[str, Any]:
    names = {v.id: v.name for v in vehicles}
    upcoming = []
    overdue = 0

    for r in records:
        if not r.next_service_date or r.vehicle_id not in names:
            continue
        days = days_until(r.next_service_date, now)
        if days < 0:
            overdue += 1
        if days <= UPCOMING_WINDOW_DAYS:
            upcoming.append(
                {
                    "vehicleName": names.get(r.vehicle_id) or r.vehicle_name or "Unknown",
                    "serviceType": (r.service_type or "Maintenance").replace("_", " "),
                    "dueDate": r.next_service_date.isoformat(),
                    "daysUntil": max(0, days),
                    "status": "Overdue" if days < 0 else ("Urgent" if days <= URGENT_WINDOW_DAYS else "Scheduled"),
                }
            )

    upcoming.sort(key=lambda m: m["daysUntil"])
    return {
        "summary": {"upcomingCount": len(upcoming), "overdueCount": overdue},
        "upcomingMaintenance": upcoming[:15],
    }


def build_cost_section(
    vehicles: List[Vehicle], records: List[MaintenanceRecord], *, start: date, end: date
) -> Dict[str, Any]:
    ids = {v.id for v in vehicles}
    in_range = [
        r
        for r in records
        if r.vehicle_id in ids and r.service_date and start <= r.service_date <= end
    ]
    total = sum(float(r.cost or 0) for r in in_range)
    return {"summary": {"totalCost": round(total), "recordCount": len(in_range)}}


def build_report(
    vehicles: List[Vehicle],
    records: List[MaintenanceRecord],
    *,
    report_types: Optional[List[str]],
    start: date,
    end: date,
    now: datetime,
) -> Dict[str, Any]:
    reports: Dict[str, Any] = {}
    if _wants(report_types, "compliance"):
        reports["compliance"] = build_compliance_section(vehicles)
    if _wants(report_types, "maintenance"):
        reports["maintenance"] = build_maintenance_section(vehicles, records, now=now)
    if _wants(report_types, "costs"):
        reports["costs"] = build_cost_section(vehicles, records, start=start, end=end)
    return reports


def render_report_html(
    reports: Dict[str, Any],
    branding: Dict[str, Any],
    *,
    start: date,
    end: date,
    include_charts: bool = True,
    now: Optional[datetime] = None,
) -> str:
    template = _env.get_template("report_email.html")
    return template.render(
        reports=reports,
        branding=branding,
        start=start.isoformat(),
        end=end.isoformat(),
        include_charts=include_charts,
        year=(now or datetime.now(timezone.utc)).year,
    )


# -----------------------------
# Recipients
# -----------------------------
def _company_vehicles(db: Session, company_id: Optional[int]) -> List[Vehicle]:
    if company_id is None:
        return []
    return (
        db.query(Vehicle)
        .filter(Vehicle.company_id == company_id)
        .order_by(Vehicle.name.asc())
        .all()
    )


def _records_for(db: Session, vehicles: List[Vehicle]) -> List[MaintenanceRecord]:
    ids = [v.id for v in vehicles]
    if not ids:
        return []
    return (
        db.query(MaintenanceRecord)
        .filter(MaintenanceRecord.vehicle_id.in_(ids))
        .all()
    )


def _recipients(db: Session, req: ReportSendRequest) -> Tuple[List[Tuple[str, Optional[User]]], Optional[int]]:
    """[(email, user_or_None)], company scope."""
    if req.user_email:
        user = db.query(User).filter(User.email == str(req.user_email)).first()
        if user is None:
            raise NotFoundError("User not found")
        if req.company_id is not None and req.company_id != user.company_id:
            raise NotFoundError("User not found in company")
        return [(user.email, user)], user.company_id

    company = db.get(Company, req.company_id)
    if company is None:
        raise NotFoundError("Company not found")
    prefs = (
        db.query(EmailReportPreference)
        .filter(
            EmailReportPreference.company_id == company.id,
            EmailReportPreference.enabled.is_(True),
        )
        .order_by(EmailReportPreference.id.asc())
        .all()
    )
    emails: List[str] = []
    for p in prefs:
        if p.user_email not in emails:
            emails.append(p.user_email)
    # company-wide report for every recipient
    return [(e, None) for e in emails], company.id


# -----------------------------
# Entry point
# -----------------------------
def send_report(
    db: Session,
    req: ReportSendRequest,
    *,
    now: Optional[datetime] = None,
    send=None,
) -> Dict[str, Any]:
    """
    Build and email the fleet report for a user or for every scheduled recipient
    of a company. Per-recipient failures are collected, not raised; if every
    recipient failed an UpstreamAPIError (502) is raised.
    """
    now = now or datetime.now(timezone.utc)
    send = send or send_email
    start, end = resolve_date_range(req.date_range, now=now)

    recipients, company_id = _recipients(db, req)
    vehicles = _company_vehicles(db, company_id)
    records = _records_for(db, vehicles)

    log.info(
        "report send: cron=%s company=%s recipients=%s range=%s..%s",
        req.cron_mode,
        company_id,
        len(recipients),
        start,
        end,
    )

    if req.preview_only:
        email, user = recipients[0] if recipients else ("", None)
        reports = build_report(
            scope_vehicles(user, vehicles),
            records,
            report_types=req.report_types,
            start=start,
            end=end,
            now=now,
        )
        html = render_report_html(
            reports,
            lookup_branding(db, email) if email else dict(DEFAULT_BRANDING),
            start=start,
            end=end,
            include_charts=req.include_charts,
            now=now,
        )
        return {"success": True, "preview": True, "html": html}

    if not recipients:
        return {"success": True, "sentTo": [], "failed": [], "message": "No recipients"}

    sent_to: List[str] = []
    failed: List[Dict[str, str]] = []
    for email, user in recipients:
        try:
            reports = build_report(
                scope_vehicles(user, vehicles),
                records,
                report_types=req.report_types,
                start=start,
                end=end,
                now=now,
            )
            branding = lookup_branding(db, email)
            html = render_report_html(
                reports,
                branding,
                start=start,
                end=end,
                include_charts=req.include_charts,
                now=now,
            )
            msg = build_message(
                f"{branding['company_name']} - Fleet Compliance Report",
                f"Fleet compliance report for {start.isoformat()} to {end.isoformat()}.",
                config.mail_from_reports(),
                email,
                html=html,
            )
            send(msg)
            sent_to.append(email)
        except Exception as e:
            log.exception("report send failed for %s", email)
            failed.append({"email": email, "error": str(e)})

    if not sent_to:
        raise UpstreamAPIError(
            "Failed to send email",
            status_code=502,
            details=failed,
        )
    return {"success": True, "sentTo": sent_to, "failed": failed}
