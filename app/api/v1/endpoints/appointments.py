"""Scheduling endpoints, scoped by the ``?to=`` tenant selector."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_tenant
from app.core.errors import SERVER_ERROR
from app.models.business import Business
from app.models.event import EventType
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentListOut,
    AppointmentOut,
)
from app.services.appointments import create_appointment, list_appointments
from app.services.events import record_event

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/appointments", response_model=AppointmentListOut)
async def get_appointments(
    start: Optional[datetime] = Query(None, description="Inclusive lower bound on starts_at (ISO 8601)"),
    end: Optional[datetime] = Query(None, description="Exclusive upper bound on starts_at (ISO 8601)"),
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """List appointments in a date range for the calendar view."""
    try:
        appointments = await list_appointments(db, business.id, start, end)
        return AppointmentListOut(appointments=[AppointmentOut.model_validate(a) for a in appointments])
    except HTTPException:
        raise
    except Exception:
        logger.exception("Listing appointments failed for business %s", business.id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.post("/appointments", response_model=AppointmentEnvelope, status_code=201)
async def post_appointment(
    payload: AppointmentCreate,
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Book a job, optionally tied to a lead and a technician."""
    try:
        appointment = await create_appointment(db, business.id, payload)
        await record_event(
            db,
            business.id,
            EventType.APPOINTMENT_CREATED,
            {"appointmentId": str(appointment.id), "starts_at": appointment.starts_at.isoformat()},
            lead_id=appointment.lead_id,
        )
        return AppointmentEnvelope(appointment=AppointmentOut.model_validate(appointment))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Creating appointment failed for business %s", business.id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
