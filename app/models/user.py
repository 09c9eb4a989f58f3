# app/models/user.py
from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, text
from sqlalchemy.orm import relationship

from app.db.base import Base

ROLE_ADMIN = "admin"
ROLE_SITE_MANAGER = "site_manager"
ROLE_DRIVER = "driver"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)

    # Tenancy / role
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    role = Column(String(50), nullable=False, default="viewer", index=True)  # admin|site_manager|driver|...

    # Scoping lists (site ids / vehicle ids)
    assigned_sites = Column(JSON, nullable=True)
    assigned_vehicles = Column(JSON, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, server_default=text("1"))

    company = relationship("Company", backref="users", passive_deletes=True)
