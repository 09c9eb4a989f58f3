# app/api/v1/favorites.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud import fleet as crud
from app.db.session import get_db
from app.schemas.fleet import FavoriteOut, FavoriteToggle

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _out(obj) -> Dict[str, Any]:
    return FavoriteOut.model_validate(obj).model_dump(mode="json")


@router.get("")
def list_favorites(
    user_email: str = Query(..., min_length=3),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"success": True, "data": [_out(f) for f in crud.list_favorites(db, user_email)]}


@router.post("/toggle")
def toggle_favorite(payload: FavoriteToggle, db: Session = Depends(get_db)) -> Dict[str, Any]:
    message, obj = crud.toggle_favorite(db, payload)
    body: Dict[str, Any] = {"success": True, "message": message}
    if obj is not None:
        body["data"] = _out(obj)
    return body
