#!/usr/bin/env python3
"""
Monthly client report: last calendar month (Australia/Sydney) for every active
company with scheduled reports enabled. Run on the 1st of the month.
Log lines also go to client-report-cron.log.
"""
import sys

from _cron_common import run, setup


def main() -> int:
    log = setup("client-report-cron.log")
    from app.worker.report_cron import run_monthly_reports

    return run(run_monthly_reports, log)


if __name__ == "__main__":
    sys.exit(main())
