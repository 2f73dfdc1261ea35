"""Appointment scheduling for the calendar view."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus
from app.models.technician import Technician
from app.schemas.appointment import AppointmentCreate
from app.services.leads import get_lead

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime | None) -> datetime | None:
    """Stored timestamps are naive UTC; drop the offset from aware inputs."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def list_appointments(
    db: AsyncSession,
    business_id: UUID,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Appointment]:
    """List appointments starting in [start, end), earliest first."""
    query = select(Appointment).where(Appointment.business_id == business_id)
    if start:
        query = query.where(Appointment.starts_at >= _naive_utc(start))
    if end:
        query = query.where(Appointment.starts_at < _naive_utc(end))
    query = query.order_by(Appointment.starts_at.asc())

    result = await db.execute(query)
    return list(result.scalars().all())


async def create_appointment(db: AsyncSession, business_id: UUID, data: AppointmentCreate) -> Appointment:
    if data.starts_at is None:
        raise HTTPException(status_code=400, detail="starts_at is required")

    starts_at = _naive_utc(data.starts_at)
    ends_at = _naive_utc(data.ends_at)
    if ends_at is not None and ends_at < starts_at:
        raise HTTPException(status_code=400, detail="ends_at must not be before starts_at")

    if data.lead_id is not None and await get_lead(db, business_id, data.lead_id) is None:
        raise HTTPException(status_code=400, detail="Unknown lead")

    if data.assigned_tech_id is not None:
        result = await db.execute(
            select(Technician.id).where(
                Technician.id == data.assigned_tech_id,
                Technician.business_id == business_id,
            )
        )
        if result.first() is None:
            raise HTTPException(status_code=400, detail="Unknown technician")

    appointment = Appointment(
        business_id=business_id,
        lead_id=data.lead_id,
        title=(data.title or "").strip(),
        address=(data.address or "").strip(),
        starts_at=starts_at,
        ends_at=ends_at,
        status=AppointmentStatus.SCHEDULED,
        assigned_tech_id=data.assigned_tech_id,
    )
    db.add(appointment)
    await db.commit()
    await db.refresh(appointment)

    logger.info("Appointment %s created for business %s at %s", appointment.id, business_id, starts_at.isoformat())
    return appointment
