"""Shared setup for the cron entry points (env, logging, DB session)."""
import logging
import os
import sys

# enable 'app.' imports
sys.path.append(os.getcwd())

from dotenv import load_dotenv  # noqa: E402

REQUIRED_ENV = ("REPORTS_API_URL", "SERVICE_ROLE_KEY")


def setup(log_file: str) -> logging.Logger:
    """Load .env, log to stdout and to ``log_file``, fail fast on missing env."""
    load_dotenv()

    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(fmt)
        root.addHandler(handler)

    log = logging.getLogger("app.cron")
    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        log.error("Missing %s", " or ".join(missing))
        sys.exit(1)
    return log


def run(driver, log: logging.Logger) -> int:
    from app.db.session import SessionLocal
    from app.worker.report_cron import HttpReportSender

    db = SessionLocal()
    try:
        result = driver(db, HttpReportSender())
    except Exception as e:
        log.exception("Fatal: %s", e)
        return 1
    finally:
        db.close()
    return 0 if result.get("success") else 1
