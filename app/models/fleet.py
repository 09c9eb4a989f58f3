# app/models/fleet.py
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from app.db.base import Base


class FavoriteVehicle(Base):
    __tablename__ = "favorite_vehicles"
    __table_args__ = (
        UniqueConstraint("user_email", "vehicle_ref", name="uq_favorite_vehicles_user_vehicle"),
    )

    id = Column(Integer, primary_key=True)
    user_email = Column(String(255), nullable=False, index=True)
    vehicle_ref = Column(String(64), nullable=False)
    vehicle_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ComplianceTarget(Base):
    __tablename__ = "compliance_targets"

    id = Column(Integer, primary_key=True)
    customer_ref = Column(String(64), nullable=False, index=True)
    type = Column(String(40), nullable=False)  # e.g. "vehicle", "site"
    name = Column(String(255), nullable=False)
    target_washes_per_week = Column(Integer, nullable=False)
    applies_to = Column(String(255), nullable=False, default="all")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ClientBranding(Base):
    __tablename__ = "client_branding"

    id = Column(Integer, primary_key=True)
    client_email_domain = Column(String(255), unique=True, index=True, nullable=False)
    company_name = Column(String(255), nullable=False)
    logo_url = Column(String(500), nullable=True)
    primary_color = Column(String(16), nullable=True)
    secondary_color = Column(String(16), nullable=True)
