#!/usr/bin/env python3
"""
Demo seed:
- one company with a few vehicles, maintenance records and users per role
- notification and weekly report preferences for the admin
Safe to run multiple times (idempotent).
"""
import os
import sys
from datetime import date, timedelta

# enable 'app.' imports
sys.path.append(os.getcwd())

from sqlalchemy.orm import Session  # noqa: E402

import app.models  # noqa: E402,F401
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.models.company import Company  # noqa: E402
from app.models.maintenance import MaintenanceRecord  # noqa: E402
from app.models.preferences import EmailReportPreference, NotificationPreference  # noqa: E402
from app.models.user import User  # noqa: E402
from app.models.vehicle import Vehicle  # noqa: E402


def ensure_company(db: Session, name: str, customer_ref: str) -> Company:
    company = db.query(Company).filter(Company.name == name).first()
    if company is None:
        company = Company(name=name, elora_customer_ref=customer_ref)
        db.add(company)
        db.commit()
        db.refresh(company)
    return company


def ensure_user(db: Session, email: str, **fields) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email)
        db.add(user)
    for k, v in fields.items():
        setattr(user, k, v)
    db.commit()
    db.refresh(user)
    return user


def ensure_vehicle(db: Session, ref: str, **fields) -> Vehicle:
    vehicle = db.get(Vehicle, ref)
    if vehicle is None:
        vehicle = Vehicle(id=ref)
        db.add(vehicle)
    for k, v in fields.items():
        setattr(vehicle, k, v)
    db.commit()
    return vehicle


def ensure_maintenance(db: Session, vehicle: Vehicle, service_type: str, next_in_days: int, cost: float) -> None:
    exists = (
        db.query(MaintenanceRecord)
        .filter(
            MaintenanceRecord.vehicle_id == vehicle.id,
            MaintenanceRecord.service_type == service_type,
        )
        .first()
    )
    if exists:
        return
    today = date.today()
    db.add(
        MaintenanceRecord(
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.name,
            service_type=service_type,
            service_date=today - timedelta(days=60),
            next_service_date=today + timedelta(days=next_in_days),
            cost=cost,
        )
    )
    db.commit()


def main():
    domain = os.environ.get("SEED_EMAIL_DOMAIN", "example.com")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        company = ensure_company(db, "Demo Fleet", os.environ.get("SEED_CUSTOMER_REF", "CUST-DEMO"))

        v1 = ensure_vehicle(db, "V-100", name="Truck 100", company_id=company.id,
                            site_id="S-1", site_name="North Depot", washes_completed=9, target=12)
        v2 = ensure_vehicle(db, "V-200", name="Truck 200", company_id=company.id,
                            site_id="S-1", site_name="North Depot", washes_completed=2, target=12)
        v3 = ensure_vehicle(db, "V-300", name="Van 300", company_id=company.id,
                            site_id="S-2", site_name="South Yard", washes_completed=11, target=12)

        ensure_maintenance(db, v1, "oil_change", 3, 420.0)
        ensure_maintenance(db, v2, "tyre_rotation", -2, 180.0)
        ensure_maintenance(db, v3, "brake_inspection", 20, 260.0)

        admin = ensure_user(db, f"admin@{domain}", full_name="Fleet Admin", role="admin", company_id=company.id)
        ensure_user(db, f"manager@{domain}", full_name="Site Manager", role="site_manager",
                    company_id=company.id, assigned_sites=["S-1"])
        ensure_user(db, f"driver@{domain}", full_name="Driver", role="driver",
                    company_id=company.id, assigned_vehicles=["V-300"])

        if not db.query(NotificationPreference).filter_by(user_email=admin.email).first():
            db.add(NotificationPreference(user_email=admin.email, email_notifications_enabled=True))
        if not db.query(EmailReportPreference).filter_by(user_email=admin.email).first():
            db.add(
                EmailReportPreference(
                    user_email=admin.email,
                    company_id=company.id,
                    frequency="weekly",
                    scheduled_time="09:00",
                    scheduled_day_of_week=1,
                    timezone="Australia/Sydney",
                    report_types=["compliance", "maintenance", "costs"],
                )
            )
        db.commit()
        print(f"OK: seeded company {company.name} (id={company.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
