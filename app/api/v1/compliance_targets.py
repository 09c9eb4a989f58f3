# app/api/v1/compliance_targets.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.crud import fleet as crud
from app.db.session import get_db
from app.schemas.fleet import ComplianceTargetIn, ComplianceTargetOut

router = APIRouter(prefix="/compliance-targets", tags=["compliance_targets"])


def _out(obj) -> Dict[str, Any]:
    return ComplianceTargetOut.model_validate(obj).model_dump(mode="json")


@router.get("")
def list_compliance_targets(
    customer_ref: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"success": True, "data": [_out(t) for t in crud.list_targets(db, customer_ref)]}


@router.post("")
def save_compliance_target(payload: ComplianceTargetIn, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Create a target, or update the one named by ``id``."""
    obj = crud.save_target(db, payload)
    if obj is None:
        raise NotFoundError("Compliance target not found")
    return {"success": True, "data": _out(obj)}


@router.delete("/{target_id}")
def delete_compliance_target(target_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    obj = crud.get_target(db, target_id)
    if obj is None:
        raise NotFoundError("Compliance target not found")
    crud.delete_target(db, obj)
    return {"success": True, "message": "Target deleted successfully"}
