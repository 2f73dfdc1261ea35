"""Business (tenant) model.

Each business owns exactly one Twilio number. Inbound calls and texts are
routed to the business whose twilio_number matches the webhook's To field.
Rows are provisioned out-of-band; the webhooks only read them.
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from app.core.database import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    owner_name = Column(String, nullable=True)
    owner_phone = Column(String, nullable=False)  # E.164, the phone we dial and text
    twilio_number = Column(String, unique=True, index=True, nullable=False)  # E.164 inbound number

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    leads = relationship("Lead", back_populates="business")
    technicians = relationship("Technician", back_populates="business")
