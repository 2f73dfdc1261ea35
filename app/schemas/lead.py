"""Pydantic schemas for Leads and lead notes."""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel
from typing import Optional
from app.models.lead import LeadStatus


class LeadOut(BaseModel):
    """Schema for returning lead details."""
    id: UUID
    business_id: UUID
    customer_phone: str
    customer_name: Optional[str] = None
    job_address: Optional[str] = None
    assigned_tech_id: Optional[UUID] = None
    status: LeadStatus
    last_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadPatch(BaseModel):
    """Fields an owner may edit on a lead. Anything else in the body is ignored."""
    customer_name: Optional[str] = None
    job_address: Optional[str] = None
    status: Optional[LeadStatus] = None
    assigned_tech_id: Optional[UUID] = None

    class Config:
        extra = "ignore"


class LeadEnvelope(BaseModel):
    lead: LeadOut


class LeadListOut(BaseModel):
    leads: list[LeadOut]


class NoteCreate(BaseModel):
    body: Optional[str] = None


class NoteOut(BaseModel):
    id: UUID
    lead_id: UUID
    business_id: UUID
    body: str
    created_at: datetime

    class Config:
        from_attributes = True


class NoteEnvelope(BaseModel):
    note: NoteOut


class NoteListOut(BaseModel):
    notes: list[NoteOut]
