# app/worker/scheduler.py
from __future__ import annotations

import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from tzlocal import get_localzone

from app.db.session import SessionLocal
from app.services.notifications import check_notifications
from app.worker.report_cron import (
    LocalReportSender,
    run_monthly_reports,
    run_weekly_reports,
)

log = logging.getLogger("app.cron")


def _with_db(fn, *args, **kwargs) -> dict:
    """Run a job with a fresh DB session; failures are logged and yield {}."""
    db = SessionLocal()
    try:
        return fn(db, *args, **kwargs) or {}
    except Exception:
        db.rollback()
        log.exception("scheduled job %s failed", getattr(fn, "__name__", fn))
        return {}
    finally:
        db.close()


def run_daily_notifications() -> dict:
    result = _with_db(check_notifications)
    log.info("daily notifications: %s", result)
    return result


def run_weekly_report_job() -> dict:
    return _with_db(run_weekly_reports, LocalReportSender())


def run_monthly_report_job() -> dict:
    return _with_db(run_monthly_reports, LocalReportSender())


def make_scheduler() -> BackgroundScheduler:
    """
    Create and return a BackgroundScheduler instance configured from env:
      - APP_TIMEZONE           (default: system tz via tzlocal or 'UTC')
      - APP_SCHEDULER_HOUR     (default: 6)
      - APP_SCHEDULER_MINUTE   (default: 0)

    Jobs:
      - daily notification check at HOUR:MINUTE
      - weekly report driver every 6 hours (each schedule decides if it is due)
      - monthly report driver on the 1st at HOUR:MINUTE
    """
    try:
        tzname = os.getenv("APP_TIMEZONE") or str(get_localzone())
    except Exception:
        tzname = "UTC"

    hour = int(os.getenv("APP_SCHEDULER_HOUR", "6"))
    minute = int(os.getenv("APP_SCHEDULER_MINUTE", "0"))

    sched = BackgroundScheduler(timezone=tzname)

    sched.add_job(
        run_daily_notifications,
        CronTrigger(hour=hour, minute=minute),
        id="daily_notifications",
        replace_existing=True,
    )
    sched.add_job(
        run_weekly_report_job,
        CronTrigger(hour="0,6,12,18", minute=0),
        id="weekly_reports",
        replace_existing=True,
    )
    sched.add_job(
        run_monthly_report_job,
        CronTrigger(day=1, hour=hour, minute=minute),
        id="monthly_reports",
        replace_existing=True,
    )

    log.info("scheduler configured tz=%s daily=%02d:%02d", tzname, hour, minute)
    return sched
