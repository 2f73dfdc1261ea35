"""Initial schema: tenants, technicians, leads, notes, consents, events, appointments

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEAD_STATUSES = ("new", "open", "quoted", "scheduled", "in-progress", "done")
APPOINTMENT_STATUSES = ("scheduled", "completed", "canceled")
EVENT_TYPES = (
    "incoming_call",
    "missed_call",
    "call_answered",
    "inbound_sms",
    "auto_text_sent",
    "auto_text_skipped_no_consent",
    "sms_opt_in",
    "owner_notified",
    "appointment_created",
    "lead_updated",
    "lead_note_added",
)


def upgrade() -> None:
    lead_status_enum = postgresql.ENUM(*LEAD_STATUSES, name="lead_status", create_type=False)
    lead_status_enum.create(op.get_bind(), checkfirst=True)
    appointment_status_enum = postgresql.ENUM(*APPOINTMENT_STATUSES, name="appointment_status", create_type=False)
    appointment_status_enum.create(op.get_bind(), checkfirst=True)
    event_type_enum = postgresql.ENUM(*EVENT_TYPES, name="event_type", create_type=False)
    event_type_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "businesses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("owner_name", sa.String, nullable=True),
        sa.Column("owner_phone", sa.String, nullable=False),
        sa.Column("twilio_number", sa.String, nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_businesses_twilio_number"), "businesses", ["twilio_number"], unique=True)

    op.create_table(
        "technicians",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("phone", sa.String, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_technicians_business_id"), "technicians", ["business_id"], unique=False)

    op.create_table(
        "leads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("job_address", sa.String(length=500), nullable=True),
        sa.Column("assigned_tech_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", lead_status_enum, nullable=False, server_default="open"),
        sa.Column("last_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("business_id", "customer_phone", name="uq_leads_business_customer_phone"),
    )
    op.create_index(op.f("ix_leads_business_id"), "leads", ["business_id"], unique=False)
    op.create_index(op.f("ix_leads_status"), "leads", ["status"], unique=False)

    op.create_table(
        "lead_notes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("lead_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_lead_notes_lead_id"), "lead_notes", ["lead_id"], unique=False)
    op.create_index(op.f("ix_lead_notes_business_id"), "lead_notes", ["business_id"], unique=False)

    op.create_table(
        "sms_consents",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=False),
        sa.Column("ip", sa.String, nullable=True),
        sa.Column("user_agent", sa.String, nullable=True),
        sa.Column("source", sa.String, nullable=False, server_default="web_form"),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_sms_consents_business_phone", "sms_consents", ["business_id", "customer_phone"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lead_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("leads.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", event_type_enum, nullable=False),
        sa.Column("payload", postgresql.JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_events_business_id"), "events", ["business_id"], unique=False)
    op.create_index(op.f("ix_events_lead_id"), "events", ["lead_id"], unique=False)
    op.create_index(op.f("ix_events_type"), "events", ["type"], unique=False)
    op.create_index(op.f("ix_events_created_at"), "events", ["created_at"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lead_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("leads.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String, nullable=False, server_default=""),
        sa.Column("address", sa.String, nullable=False, server_default=""),
        sa.Column("starts_at", sa.DateTime, nullable=False),
        sa.Column("ends_at", sa.DateTime, nullable=True),
        sa.Column("status", appointment_status_enum, nullable=False, server_default="scheduled"),
        sa.Column("assigned_tech_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_appointments_business_id"), "appointments", ["business_id"], unique=False)
    op.create_index(op.f("ix_appointments_lead_id"), "appointments", ["lead_id"], unique=False)
    op.create_index(op.f("ix_appointments_starts_at"), "appointments", ["starts_at"], unique=False)
    op.create_index(op.f("ix_appointments_status"), "appointments", ["status"], unique=False)


def downgrade() -> None:
    op.drop_table("appointments")
    op.drop_table("events")
    op.drop_table("sms_consents")
    op.drop_table("lead_notes")
    op.drop_table("leads")
    op.drop_table("technicians")
    op.drop_table("businesses")

    for name in ("event_type", "appointment_status", "lead_status"):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
