"""Lead model.

One lead per (business, customer phone). Created by the first inbound text,
reopened by every later one, edited by hand from the app.
"""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.database import Base


class LeadStatus(str, enum.Enum):
    """Lead status enum."""
    NEW = "new"
    OPEN = "open"
    QUOTED = "quoted"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class Lead(Base):
    """Lead model."""
    __tablename__ = "leads"
    __table_args__ = (
        UniqueConstraint("business_id", "customer_phone", name="uq_leads_business_customer_phone"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)
    customer_phone = Column(String(50), nullable=False)
    customer_name = Column(String(255), nullable=True)
    job_address = Column(String(500), nullable=True)
    assigned_tech_id = Column(UUID(as_uuid=True), ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        Enum(LeadStatus, name="lead_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LeadStatus.OPEN,
        index=True,
    )
    last_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    business = relationship("Business", back_populates="leads")
    notes = relationship("LeadNote", back_populates="lead", order_by="LeadNote.created_at")
