from sqlalchemy import Column, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.types import JSON
import uuid
import enum
from datetime import datetime

from app.core.database import Base


class EventType(str, enum.Enum):
    INCOMING_CALL = "incoming_call"
    MISSED_CALL = "missed_call"
    CALL_ANSWERED = "call_answered"
    INBOUND_SMS = "inbound_sms"
    AUTO_TEXT_SENT = "auto_text_sent"
    AUTO_TEXT_SKIPPED_NO_CONSENT = "auto_text_skipped_no_consent"
    SMS_OPT_IN = "sms_opt_in"
    OWNER_NOTIFIED = "owner_notified"
    APPOINTMENT_CREATED = "appointment_created"
    LEAD_UPDATED = "lead_updated"
    LEAD_NOTE_ADDED = "lead_note_added"


class Event(Base):
    """Append-only audit/analytics fact. Never updated."""
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(
        Enum(EventType, name="event_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    payload = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
