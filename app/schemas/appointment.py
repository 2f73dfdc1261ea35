"""Pydantic schemas for Appointments."""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel
from typing import Optional
from app.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment. starts_at is checked by the service."""
    lead_id: Optional[UUID] = None
    title: Optional[str] = None
    address: Optional[str] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    assigned_tech_id: Optional[UUID] = None


class AppointmentOut(BaseModel):
    """Schema for returning appointment details."""
    id: UUID
    business_id: UUID
    lead_id: Optional[UUID] = None
    title: str
    address: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    status: AppointmentStatus
    assigned_tech_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppointmentEnvelope(BaseModel):
    appointment: AppointmentOut


class AppointmentListOut(BaseModel):
    appointments: list[AppointmentOut]
