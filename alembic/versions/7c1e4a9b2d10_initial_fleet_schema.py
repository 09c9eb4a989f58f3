"""initial fleet schema (tenants, vehicles, maintenance, notifications, report prefs)

Revision ID: 7c1e4a9b2d10
Revises:
Create Date: 2026-02-02 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c1e4a9b2d10"
down_revision = None
branch_labels = None
depends_on = None


def _true():
    return sa.text("1")


def _false():
    return sa.text("0")


def upgrade():
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("elora_customer_ref", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("scheduled_email_reports_enabled", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_companies_id", "companies", ["id"])
    op.create_index("ix_companies_name", "companies", ["name"])
    op.create_index("ix_companies_elora_customer_ref", "companies", ["elora_customer_ref"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("assigned_sites", sa.JSON(), nullable=True),
        sa.Column("assigned_vehicles", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=_true()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_company_id", "users", ["company_id"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=True),
        sa.Column("site_id", sa.String(64), nullable=True),
        sa.Column("site_name", sa.String(255), nullable=True),
        sa.Column("washes_completed", sa.Integer(), nullable=True),
        sa.Column("target", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_vehicles_company_id", "vehicles", ["company_id"])
    op.create_index("ix_vehicles_site_id", "vehicles", ["site_id"])

    op.create_table(
        "maintenance_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("vehicle_id", sa.String(64), sa.ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=True),
        sa.Column("vehicle_name", sa.String(255), nullable=True),
        sa.Column("service_type", sa.String(64), nullable=True),
        sa.Column("service_date", sa.Date(), nullable=True),
        sa.Column("next_service_date", sa.Date(), nullable=True),
        sa.Column("cost", sa.Float(), nullable=True),
    )
    op.create_index("ix_maintenance_records_vehicle_id", "maintenance_records", ["vehicle_id"])
    op.create_index("ix_maintenance_records_next_service_date", "maintenance_records", ["next_service_date"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("vehicle_id", sa.String(64), nullable=True),
        sa.Column("maintenance_id", sa.Integer(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=_false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notifications_user_email", "notifications", ["user_email"])
    op.create_index("ix_notifications_vehicle_id", "notifications", ["vehicle_id"])
    op.create_index("ix_notifications_maintenance_id", "notifications", ["maintenance_id"])
    op.create_index("ix_notifications_dedupe", "notifications", ["user_email", "type", "read"])

    op.create_table(
        "notification_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("email_notifications_enabled", sa.Boolean(), nullable=False, server_default=_false()),
        sa.Column("notify_maintenance_due", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("notify_maintenance_overdue", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("maintenance_due_days", sa.Integer(), nullable=False, server_default=sa.text("7")),
        sa.Column("notify_low_compliance", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("compliance_threshold", sa.Float(), nullable=False, server_default=sa.text("50")),
    )
    op.create_index("ix_notification_preferences_user_email", "notification_preferences", ["user_email"], unique=True)

    op.create_table(
        "email_report_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("scheduled_time", sa.String(5), nullable=True),
        sa.Column("scheduled_day_of_week", sa.Integer(), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("report_types", sa.JSON(), nullable=True),
        sa.Column("include_charts", sa.Boolean(), nullable=False, server_default=_true()),
        sa.Column("last_sent", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_email_report_preferences_user_email", "email_report_preferences", ["user_email"])
    op.create_index("ix_email_report_preferences_company_id", "email_report_preferences", ["company_id"])

    op.create_table(
        "email_digest_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("send_time", sa.String(5), nullable=False),
        sa.Column("include_compliance", sa.Boolean(), nullable=False),
        sa.Column("include_maintenance", sa.Boolean(), nullable=False),
        sa.Column("include_alerts", sa.Boolean(), nullable=False),
        sa.Column("include_activity", sa.Boolean(), nullable=False),
        sa.Column("only_if_changes", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_email_digest_preferences_user_email", "email_digest_preferences", ["user_email"], unique=True)

    op.create_table(
        "favorite_vehicles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("vehicle_ref", sa.String(64), nullable=False),
        sa.Column("vehicle_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_email", "vehicle_ref", name="uq_favorite_vehicles_user_vehicle"),
    )
    op.create_index("ix_favorite_vehicles_user_email", "favorite_vehicles", ["user_email"])

    op.create_table(
        "compliance_targets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_ref", sa.String(64), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("target_washes_per_week", sa.Integer(), nullable=False),
        sa.Column("applies_to", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_compliance_targets_customer_ref", "compliance_targets", ["customer_ref"])

    op.create_table(
        "client_branding",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_email_domain", sa.String(255), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("logo_url", sa.String(500), nullable=True),
        sa.Column("primary_color", sa.String(16), nullable=True),
        sa.Column("secondary_color", sa.String(16), nullable=True),
    )
    op.create_index("ix_client_branding_client_email_domain", "client_branding", ["client_email_domain"], unique=True)


def downgrade():
    for table in (
        "client_branding",
        "compliance_targets",
        "favorite_vehicles",
        "email_digest_preferences",
        "email_report_preferences",
        "notification_preferences",
        "notifications",
        "maintenance_records",
        "vehicles",
        "users",
        "companies",
    ):
        op.drop_table(table)
