# app/models/maintenance.py
from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String

from app.db.base import Base


class MaintenanceRecord(Base):
    __tablename__ = "maintenance_records"

    id = Column(Integer, primary_key=True)
    vehicle_id = Column(String(64), ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=True, index=True)
    vehicle_name = Column(String(255), nullable=True)

    service_type = Column(String(64), nullable=True)  # e.g. "oil_change", "tyre_rotation"
    service_date = Column(Date, nullable=True)
    next_service_date = Column(Date, nullable=True, index=True)
    cost = Column(Float, nullable=True)
