# app/worker/report_cron.py
"""
Scheduled report drivers.

- run_weekly_reports: per-user weekly digest, sent once the user's scheduled
  day/time (in their own timezone) has passed by at least 30 minutes.
- run_monthly_reports: company-wide report for last calendar month.

Both hand each payload to a ``sender`` (HTTP call to the reports endpoint or
in-process), log and skip individual failures, and never retry.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

import requests
from sqlalchemy.orm import Session

from app.core import config
from app.db.session import SessionLocal
from app.models.company import Company
from app.models.preferences import EmailReportPreference
from app.schemas.report import ReportSendRequest
from app.services.reporting import send_report

log = logging.getLogger("app.cron")

DEFAULT_TIMEZONE = "Australia/Sydney"
DEFAULT_SCHEDULED_TIME = "09:00"
DEFAULT_DAY_OF_WEEK = 1  # Monday (0=Sun .. 6=Sat)
DEFAULT_WEEKLY_REPORT_TYPES = ["compliance", "costs"]
SEND_WINDOW = timedelta(minutes=30)
MIN_DAYS_BETWEEN_SENDS = 6.5

Sender = Callable[[Dict[str, Any]], Dict[str, Any]]


class ReportSendError(Exception):
    pass


# -----------------------------
# Time helpers
# -----------------------------
def _aware(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _parse_hhmm(value: Optional[str]) -> Tuple[int, int]:
    """'HH:MM' (seconds ignored, bare 'H' means on the hour)."""
    parts = (value or DEFAULT_SCHEDULED_TIME).strip().split(":")
    return int(parts[0]), (int(parts[1]) if len(parts) > 1 else 0)


def _zone(name: Optional[str]) -> ZoneInfo:
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def last_month_range(now: datetime, tz: str = DEFAULT_TIMEZONE) -> Dict[str, str]:
    """First and last day of the previous calendar month in ``tz``."""
    local = _aware(now).astimezone(ZoneInfo(tz)).date()
    end = local.replace(day=1) - timedelta(days=1)
    start = end.replace(day=1)
    return {"start": start.isoformat(), "end": end.isoformat()}


def last_week_range(pref: EmailReportPreference, now: datetime) -> Dict[str, str]:
    """Seven days ending yesterday, in the user's timezone."""
    local = _aware(now).astimezone(_zone(pref.timezone)).date()
    end: date = local - timedelta(days=1)
    start = end - timedelta(days=6)
    return {"start": start.isoformat(), "end": end.isoformat()}


def should_send_now(pref: EmailReportPreference, now: datetime) -> bool:
    """
    Weekly schedules only. True when, in the user's timezone, today is the
    scheduled weekday, at least 30 minutes have passed since the scheduled
    time and the last send (if any) is at least 6.5 days old.
    """
    if (pref.frequency or "weekly") != "weekly":
        return False

    tz = _zone(pref.timezone)
    local_now = _aware(now).astimezone(tz)

    day = pref.scheduled_day_of_week
    if day is None:
        day = DEFAULT_DAY_OF_WEEK
    if local_now.isoweekday() % 7 != day:
        return False

    hour, minute = _parse_hhmm(pref.scheduled_time)
    scheduled = datetime.combine(local_now.date(), time(hour, minute), tzinfo=tz)
    if local_now < scheduled + SEND_WINDOW:
        return False

    if pref.last_sent is not None:
        elapsed = local_now - _aware(pref.last_sent)
        if elapsed.total_seconds() / 86400.0 < MIN_DAYS_BETWEEN_SENDS:
            return False

    return True


# -----------------------------
# Senders
# -----------------------------
class HttpReportSender:
    """POSTs payloads to the reports endpoint of a running API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        timeout: float = 120.0,
    ):
        self.url = f"{base_url or config.reports_api_url()}/api/v1/reports/send"
        self.token = token if token is not None else config.service_role_key()
        self.timeout = timeout

    def __call__(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        resp = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        try:
            body = resp.json()
        except ValueError:
            raise ReportSendError(f"{resp.status_code} - {resp.text[:300]}")

        if not resp.ok or (isinstance(body, dict) and body.get("error")):
            err = body.get("error") if isinstance(body, dict) else None
            raise ReportSendError(f"{resp.status_code} - {err or resp.text[:300]}")
        return body


class LocalReportSender:
    """Runs the report in-process with its own DB session."""

    def __init__(self, session_factory=SessionLocal, send=None):
        self.session_factory = session_factory
        self.send = send

    def __call__(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        req = ReportSendRequest.model_validate(payload)
        db = self.session_factory()
        try:
            return send_report(db, req, send=self.send)
        finally:
            db.close()


# -----------------------------
# Drivers
# -----------------------------
def run_monthly_reports(
    db: Session, sender: Sender, now: Optional[datetime] = None
) -> Dict[str, Any]:
    now = _aware(now or datetime.now(timezone.utc))
    log.info("Monthly client report cron started")

    companies = (
        db.query(Company)
        .filter(
            Company.is_active.is_(True),
            Company.scheduled_email_reports_enabled.is_(True),
        )
        .order_by(Company.id.asc())
        .all()
    )
    if not companies:
        log.info("No companies with scheduled client reports enabled")
        return {"success": True, "sent": 0}

    date_range = last_month_range(now, config.reports_timezone())
    log.info("Date range: %s to %s, %s companies", date_range["start"], date_range["end"], len(companies))

    sent = 0
    for company in companies:
        try:
            result = sender(
                {"cronMode": True, "companyId": company.id, "dateRange": date_range}
            )
        except Exception as e:
            log.error("Send error %s (%s): %s", company.name, company.id, e)
            continue
        log.info(
            "Sent to %s: %s recipient(s)",
            company.name,
            len((result or {}).get("sentTo") or []),
        )
        sent += 1

    log.info("Done. Sent reports for %s companies", sent)
    return {"success": True, "sent": sent}


def run_weekly_reports(
    db: Session, sender: Sender, now: Optional[datetime] = None
) -> Dict[str, Any]:
    now = _aware(now or datetime.now(timezone.utc))
    log.info("Scheduled email reports cron started")

    prefs = (
        db.query(EmailReportPreference)
        .filter(EmailReportPreference.enabled.is_(True))
        .order_by(EmailReportPreference.id.asc())
        .all()
    )
    if not prefs:
        log.info("No enabled email report preferences")
        return {"success": True, "sent": 0}

    company_ids = {p.company_id for p in prefs if p.company_id is not None}
    companies = (
        {c.id: c for c in db.query(Company).filter(Company.id.in_(company_ids)).all()}
        if company_ids
        else {}
    )

    due = []
    for pref in prefs:
        company = companies.get(pref.company_id)
        if company is not None and company.scheduled_email_reports_enabled is False:
            log.info("Skip %s: company has scheduled emails disabled", pref.user_email)
            continue
        try:
            if should_send_now(pref, now):
                due.append((pref, last_week_range(pref, now)))
        except Exception:
            log.exception(
                "Skip %s: bad schedule (time=%r, tz=%r)",
                pref.user_email,
                pref.scheduled_time,
                pref.timezone,
            )
    log.info("%s of %s schedules ready to send", len(due), len(prefs))

    sent = 0
    for pref, date_range in due:
        payload = {
            "userEmail": pref.user_email,
            "companyId": pref.company_id,
            "reportTypes": pref.report_types or list(DEFAULT_WEEKLY_REPORT_TYPES),
            "includeCharts": pref.include_charts is not False,
            "cronMode": True,
            "dateRange": date_range,
        }
        try:
            sender(payload)
        except Exception as e:
            log.error("Send failed %s: %s", pref.user_email, e)
            continue

        try:
            pref.last_sent = now.astimezone(timezone.utc)
            db.commit()
        except Exception:
            db.rollback()
            log.exception("Could not stamp last_sent for %s", pref.user_email)
            continue

        log.info("Sent to %s for %s to %s", pref.user_email, date_range["start"], date_range["end"])
        sent += 1

    log.info("Done. Sent %s reports", sent)
    return {"success": True, "sent": sent}
