# app/crud/fleet.py
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.fleet import ComplianceTarget, FavoriteVehicle
from app.schemas.fleet import ComplianceTargetIn, FavoriteToggle


# -----------------------------
# Favorites
# -----------------------------
def list_favorites(db: Session, user_email: str) -> List[FavoriteVehicle]:
    return (
        db.query(FavoriteVehicle)
        .filter(FavoriteVehicle.user_email == user_email)
        .order_by(FavoriteVehicle.created_at.desc(), FavoriteVehicle.id.desc())
        .all()
    )


def get_favorite(db: Session, user_email: str, vehicle_ref: str) -> Optional[FavoriteVehicle]:
    return (
        db.query(FavoriteVehicle)
        .filter(
            FavoriteVehicle.user_email == user_email,
            FavoriteVehicle.vehicle_ref == vehicle_ref,
        )
        .first()
    )


def toggle_favorite(db: Session, data: FavoriteToggle) -> Tuple[str, Optional[FavoriteVehicle]]:
    """Returns (message, favorite or None when removed)."""
    existing = get_favorite(db, data.user_email, data.vehicle_ref)

    if data.is_favorite:
        if existing is not None:
            return "Already in favorites", existing
        obj = FavoriteVehicle(
            user_email=data.user_email,
            vehicle_ref=data.vehicle_ref,
            vehicle_name=data.vehicle_name,
        )
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return "Added to favorites", obj

    if existing is not None:
        db.delete(existing)
        db.commit()
    return "Removed from favorites", None


# -----------------------------
# Compliance targets
# -----------------------------
def list_targets(db: Session, customer_ref: Optional[str] = None) -> List[ComplianceTarget]:
    q = db.query(ComplianceTarget)
    if customer_ref:
        q = q.filter(ComplianceTarget.customer_ref == customer_ref)
    return q.order_by(ComplianceTarget.id.asc()).all()


def get_target(db: Session, target_id: int) -> Optional[ComplianceTarget]:
    return db.get(ComplianceTarget, target_id)


def save_target(db: Session, data: ComplianceTargetIn) -> Optional[ComplianceTarget]:
    """Create, or update when ``data.id`` is set. None if that id does not exist."""
    values = data.model_dump(exclude={"id"})
    values["applies_to"] = values.get("applies_to") or "all"

    if data.id is not None:
        obj = get_target(db, data.id)
        if obj is None:
            return None
    else:
        obj = ComplianceTarget()
        db.add(obj)

    for field, value in values.items():
        setattr(obj, field, value)
    db.commit()
    db.refresh(obj)
    return obj


def delete_target(db: Session, target: ComplianceTarget) -> None:
    db.delete(target)
    db.commit()
