# app/models/notification.py
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text, text

from app.db.base import Base


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_dedupe", "user_email", "type", "read"),
    )

    id = Column(Integer, primary_key=True)
    user_email = Column(String(255), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(40), nullable=False)  # maintenance_due|maintenance_overdue|low_compliance
    severity = Column(String(20), nullable=False, default="info")  # info|warning|critical

    # metadata ids (also kept in payload)
    vehicle_id = Column(String(64), nullable=True, index=True)
    maintenance_id = Column(Integer, nullable=True, index=True)
    payload = Column(JSON, nullable=True)

    read = Column(Boolean, nullable=False, default=False, server_default=text("0"))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
