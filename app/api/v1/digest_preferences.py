# app/api/v1/digest_preferences.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import preferences as crud
from app.db.session import get_db
from app.schemas.preferences import DigestPreferenceIn, DigestPreferenceOut

router = APIRouter(prefix="/digest-preferences", tags=["preferences"])


@router.get("/{user_email}")
def get_digest_preferences(user_email: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    obj = crud.get_digest_preference(db, user_email)
    if obj is None:
        data = DigestPreferenceOut(**crud.DIGEST_DEFAULTS)
    else:
        data = DigestPreferenceOut.model_validate(obj)
    return {"success": True, "data": data.model_dump(mode="json")}


@router.put("/{user_email}")
def save_digest_preferences(
    user_email: str,
    payload: DigestPreferenceIn,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    obj = crud.save_digest_preference(db, user_email, payload)
    return {
        "success": True,
        "message": "Preferences saved successfully",
        "data": DigestPreferenceOut.model_validate(obj).model_dump(mode="json"),
    }
