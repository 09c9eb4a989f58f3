# app/api/v1/reports.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.report import ReportSendRequest
from app.services.reporting import send_report as _send_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/send")
def send_report(payload: ReportSendRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Email the fleet report to one user (``userEmail``) or to every enabled
    report recipient of a company (``companyId``). ``previewOnly`` returns the
    rendered HTML instead of sending.
    """
    return _send_report(db, payload)
