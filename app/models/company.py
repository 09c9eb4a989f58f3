# app/models/company.py
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, text

from app.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)

    # tenant key on the Elora side (customerRef)
    elora_customer_ref = Column(String(64), nullable=True, index=True)

    is_active = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    scheduled_email_reports_enabled = Column(
        Boolean, nullable=False, default=True, server_default=text("1")
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
