#!/usr/bin/env python3
"""
Weekly scheduled email reports.

Meant to run every 6 hours (00, 06, 12, 18 UTC). Each enabled schedule is sent
once its day and time (in the user's timezone) have passed by 30 minutes and
the previous send is at least 6.5 days old. Log lines also go to email-cron.log.
"""
import sys

from _cron_common import run, setup


def main() -> int:
    log = setup("email-cron.log")
    from app.worker.report_cron import run_weekly_reports

    return run(run_weekly_reports, log)


if __name__ == "__main__":
    sys.exit(main())
