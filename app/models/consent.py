"""SMS consent ledger.

Append-only proof that a caller agreed to receive texts from a business.
Any row for (business_id, customer_phone) counts as an opt-in.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
from app.core.database import Base


class SmsConsent(Base):
    __tablename__ = "sms_consents"
    __table_args__ = (
        Index("ix_sms_consents_business_phone", "business_id", "customer_phone"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    ip = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    source = Column(String, nullable=False, default="web_form")  # web_form, voice_gather
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
