# app/main.py
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI

# ---------------------------
# Env loading (root .env first, then app/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from app.core import config  # noqa: E402
from app.core.errors import register_exception_handlers  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import engine  # noqa: E402
from app.middleware.request_logging import RequestLoggingMiddleware  # noqa: E402
from app.worker.scheduler import make_scheduler  # noqa: E402

# ---------------------------
# MODELS (registers every table on Base)
# ---------------------------
import app.models  # noqa: E402,F401

# ---------------------------
# ROUTERS
# ---------------------------
from app.api import health  # noqa: E402
from app.api.v1 import (  # noqa: E402
    compliance_targets,
    digest_preferences,
    elora,
    favorites,
    notification_preferences,
    notifications,
    reports,
)

log = logging.getLogger("app")

# ---------------------------
# CREATE TABLES (dev-only; guard with env)
# ---------------------------
if config.create_all_enabled():
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(
    title="Fleet Compliance Portal",
    version="1.0.0",
    description="Elora telemetry proxy, fleet notifications and scheduled reports",
)

register_exception_handlers(app)
app.add_middleware(RequestLoggingMiddleware)

# ---------------------------
# ROUTER MOUNT
# ---------------------------
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(notification_preferences.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(elora.router, prefix="/api/v1")
app.include_router(digest_preferences.router, prefix="/api/v1")
app.include_router(favorites.router, prefix="/api/v1")
app.include_router(compliance_targets.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api")


# ---------------------------
# Scheduler (notifications + report drivers)
# ---------------------------
@app.on_event("startup")
def _start_scheduler():
    app.state.scheduler = None
    if not config.scheduler_enabled():
        return
    try:
        app.state.scheduler = make_scheduler()
        app.state.scheduler.start()
    except Exception:
        # keep the API running without background jobs
        log.exception("scheduler failed to start")
        app.state.scheduler = None


@app.on_event("shutdown")
def _stop_scheduler():
    sched = getattr(app.state, "scheduler", None)
    if sched:
        try:
            sched.shutdown(wait=False)
        except Exception:
            log.exception("scheduler shutdown failed")
