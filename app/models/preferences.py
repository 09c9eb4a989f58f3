# app/models/preferences.py
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    text,
)

from app.db.base import Base


class NotificationPreference(Base):
    """Per-user alert thresholds/toggles, keyed by email."""

    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True)
    user_email = Column(String(255), unique=True, index=True, nullable=False)

    email_notifications_enabled = Column(Boolean, nullable=False, default=False, server_default=text("0"))
    notify_maintenance_due = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    notify_maintenance_overdue = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    maintenance_due_days = Column(Integer, nullable=False, default=7, server_default=text("7"))
    notify_low_compliance = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    compliance_threshold = Column(Float, nullable=False, default=50, server_default=text("50"))


class EmailReportPreference(Base):
    """Schedule for the weekly report email of one user."""

    __tablename__ = "email_report_preferences"

    id = Column(Integer, primary_key=True)
    user_email = Column(String(255), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)

    enabled = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    frequency = Column(String(20), nullable=False, default="weekly")
    scheduled_time = Column(String(5), nullable=True)  # "HH:MM"
    scheduled_day_of_week = Column(Integer, nullable=True)  # 0=Sun .. 6=Sat
    timezone = Column(String(64), nullable=True)
    report_types = Column(JSON, nullable=True)
    include_charts = Column(Boolean, nullable=False, default=True, server_default=text("1"))

    last_sent = Column(DateTime(timezone=True), nullable=True)


class EmailDigestPreference(Base):
    __tablename__ = "email_digest_preferences"

    id = Column(Integer, primary_key=True)
    user_email = Column(String(255), unique=True, index=True, nullable=False)

    enabled = Column(Boolean, nullable=False, default=True)
    frequency = Column(String(20), nullable=False, default="daily")
    send_time = Column(String(5), nullable=False, default="08:00")
    include_compliance = Column(Boolean, nullable=False, default=True)
    include_maintenance = Column(Boolean, nullable=False, default=True)
    include_alerts = Column(Boolean, nullable=False, default=True)
    include_activity = Column(Boolean, nullable=False, default=True)
    only_if_changes = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
