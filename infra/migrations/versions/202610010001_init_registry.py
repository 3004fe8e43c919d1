"""init registry tables

Revision ID: 202610010001
Revises:
Create Date: 2026-10-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202610010001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("event_id"),
    )
    op.create_index("ix_events_event_type", "events", ["event_type"])
    op.create_index("ix_events_barangay_id", "events", ["barangay_id"])
    op.create_index("ix_events_ts", "events", ["ts"])
    op.create_index("ix_events_actor_id", "events", ["actor_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("resource", sa.String(), nullable=False),
        sa.Column("method", sa.String(), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("detail", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_barangay_id", "audit_logs", ["barangay_id"])
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_ts", "audit_logs", ["ts"])

    op.create_table(
        "system_settings",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("barangay_name", sa.String(), nullable=False),
        sa.Column("municipality", sa.String(), nullable=False),
        sa.Column("province", sa.String(), nullable=True),
        sa.Column("region", sa.String(), nullable=True),
        sa.Column("barangay_key", sa.String(), nullable=False),
        sa.Column("municipality_key", sa.String(), nullable=False),
        sa.Column("logo_url", sa.String(), nullable=False),
        sa.Column("reminder_days", sa.Integer(), nullable=False),
        sa.Column("support_email", sa.String(), nullable=False),
        sa.Column("emergency_hotline", sa.String(), nullable=False),
        sa.Column("community_code", sa.String(), nullable=False),
        sa.Column("license_used", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("barangay_key", "municipality_key", name="uq_system_settings_location"),
    )
    op.create_index("ix_system_settings_barangay_id", "system_settings", ["barangay_id"], unique=True)
    op.create_index("ix_system_settings_community_code", "system_settings", ["community_code"], unique=True)
    op.create_index("ix_system_settings_barangay_key", "system_settings", ["barangay_key"])
    op.create_index("ix_system_settings_municipality_key", "system_settings", ["municipality_key"])
    op.create_index("ix_system_settings_created_at", "system_settings", ["created_at"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("username_key", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_sign_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("barangay_id", "username_key", name="uq_profiles_barangay_username"),
    )
    op.create_index("ix_profiles_barangay_id", "profiles", ["barangay_id"])
    op.create_index("ix_profiles_username_key", "profiles", ["username_key"])
    op.create_index("ix_profiles_created_at", "profiles", ["created_at"])

    op.create_table(
        "owners",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("contact_number", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_owners_barangay_id", "owners", ["barangay_id"])
    op.create_index("ix_owners_full_name", "owners", ["full_name"])
    op.create_index("ix_owners_created_at", "owners", ["created_at"])

    op.create_table(
        "pets",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("species", sa.String(), nullable=False),
        sa.Column("breed", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=False),
        sa.Column("sex", sa.String(), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("is_spayed_neutered", sa.Boolean(), nullable=False),
        sa.Column("photo_url", sa.String(), nullable=False),
        sa.Column("registration_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["owners.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pets_barangay_id", "pets", ["barangay_id"])
    op.create_index("ix_pets_owner_id", "pets", ["owner_id"])
    op.create_index("ix_pets_name", "pets", ["name"])
    op.create_index("ix_pets_created_at", "pets", ["created_at"])
    op.create_index("ix_pets_barangay_owner", "pets", ["barangay_id", "owner_id"])

    op.create_table(
        "vaccinations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("pet_id", sa.String(), nullable=False),
        sa.Column("vaccine_name", sa.String(), nullable=False),
        sa.Column("vaccine_type", sa.String(), nullable=False),
        sa.Column("manufacturer", sa.String(), nullable=True),
        sa.Column("lot_number", sa.String(), nullable=False),
        sa.Column("date_given", sa.Date(), nullable=False),
        sa.Column("expiration_date", sa.Date(), nullable=False),
        sa.Column("next_due_date", sa.Date(), nullable=False),
        sa.Column("veterinarian", sa.String(), nullable=False),
        sa.Column("vet_license_no", sa.String(), nullable=False),
        sa.Column("clinic_name", sa.String(), nullable=False),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.ForeignKeyConstraint(["pet_id"], ["pets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vaccinations_barangay_id", "vaccinations", ["barangay_id"])
    op.create_index("ix_vaccinations_pet_id", "vaccinations", ["pet_id"])
    op.create_index("ix_vaccinations_date_given", "vaccinations", ["date_given"])
    op.create_index("ix_vaccinations_next_due_date", "vaccinations", ["next_due_date"])
    op.create_index("ix_vaccinations_created_at", "vaccinations", ["created_at"])
    op.create_index("ix_vaccinations_barangay_pet", "vaccinations", ["barangay_id", "pet_id"])

    op.create_table(
        "incidents",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("pet_id", sa.String(), nullable=True),
        sa.Column("victim_name", sa.String(), nullable=False),
        sa.Column("victim_contact", sa.String(), nullable=False),
        sa.Column("incident_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("body_part_bitten", sa.String(), nullable=False),
        sa.Column("is_provoked", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("observation_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.ForeignKeyConstraint(["pet_id"], ["pets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_incidents_barangay_id", "incidents", ["barangay_id"])
    op.create_index("ix_incidents_pet_id", "incidents", ["pet_id"])
    op.create_index("ix_incidents_incident_date", "incidents", ["incident_date"])
    op.create_index("ix_incidents_created_at", "incidents", ["created_at"])
    op.create_index("ix_incidents_barangay_status", "incidents", ["barangay_id", "status"])

    op.create_table(
        "stray_reports",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("reporter_name", sa.String(), nullable=False),
        sa.Column("reporter_contact", sa.String(), nullable=True),
        sa.Column("species", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("date_reported", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("is_ear_tipped", sa.Boolean(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stray_reports_barangay_id", "stray_reports", ["barangay_id"])
    op.create_index("ix_stray_reports_date_reported", "stray_reports", ["date_reported"])
    op.create_index("ix_stray_reports_barangay_status", "stray_reports", ["barangay_id", "status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_barangay_id", "notifications", ["barangay_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    op.create_table(
        "announcements",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("barangay_id", sa.String(), nullable=False),
        sa.Column("author_id", sa.String(), nullable=False),
        sa.Column("author_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("date_posted", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("link_preview", sa.JSON(), nullable=True),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["barangay_id"], ["system_settings.barangay_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_announcements_barangay_id", "announcements", ["barangay_id"])
    op.create_index("ix_announcements_author_id", "announcements", ["author_id"])
    op.create_index("ix_announcements_date_posted", "announcements", ["date_posted"])

    op.create_table(
        "setup_verifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("location_data", sa.JSON(), nullable=False),
        sa.Column("public_code", sa.String(), nullable=False),
        sa.Column("secret_code", sa.String(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_setup_verifications_public_code", "setup_verifications", ["public_code"])
    op.create_index("ix_setup_verifications_created_at", "setup_verifications", ["created_at"])

    op.create_table(
        "admin_auth_tokens",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admin_auth_tokens_token", "admin_auth_tokens", ["token"], unique=True)
    op.create_index("ix_admin_auth_tokens_created_at", "admin_auth_tokens", ["created_at"])


def downgrade() -> None:
    op.drop_table("admin_auth_tokens")
    op.drop_table("setup_verifications")
    op.drop_table("announcements")
    op.drop_table("notifications")
    op.drop_table("stray_reports")
    op.drop_table("incidents")
    op.drop_table("vaccinations")
    op.drop_table("pets")
    op.drop_table("owners")
    op.drop_table("profiles")
    op.drop_table("system_settings")
    op.drop_table("audit_logs")
    op.drop_table("events")
