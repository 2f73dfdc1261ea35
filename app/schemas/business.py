"""Pydantic schemas for the tenant bootstrap payload."""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field


class BusinessOut(BaseModel):
    id: UUID
    name: str
    owner_name: str | None = None
    owner_phone: str
    twilio_number: str

    class Config:
        from_attributes = True


class TechnicianOut(BaseModel):
    id: UUID
    name: str
    phone: str | None = None
    active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class BootstrapOut(BaseModel):
    """Everything the app shell needs before rendering the inbox."""
    business: BusinessOut
    technicians: list[TechnicianOut]
    lead_status_options: list[str] = Field(alias="leadStatusOptions")

    class Config:
        populate_by_name = True
