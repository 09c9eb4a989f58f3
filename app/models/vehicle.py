# app/models/vehicle.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.db.base import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    # Elora vehicleRef
    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)

    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    site_id = Column(String(64), nullable=True, index=True)
    site_name = Column(String(255), nullable=True)

    # wash counters for the current period
    washes_completed = Column(Integer, nullable=True)
    target = Column(Integer, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
