"""Lead store.

Leads are keyed by (business, customer phone). All reads and writes take
the business id so one tenant can never see another tenant's rows.
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lead import Lead, LeadStatus
from app.models.note import LeadNote
from app.models.technician import Technician
from app.schemas.lead import LeadOut, LeadPatch

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100


async def upsert_lead_for_inbound_sms(
    db: AsyncSession,
    business_id: UUID,
    customer_phone: str,
    last_message: str,
) -> Lead:
    """Find-or-create the lead for this caller and reopen it with the new message."""
    result = await db.execute(
        select(Lead).where(
            Lead.business_id == business_id,
            Lead.customer_phone == customer_phone,
        )
    )
    lead = result.scalar_one_or_none()

    if lead:
        lead.last_message = last_message
        lead.status = LeadStatus.OPEN
        lead.updated_at = datetime.utcnow()
        logger.info("Lead %s reopened by inbound SMS from %s", lead.id, customer_phone)
    else:
        lead = Lead(
            business_id=business_id,
            customer_phone=customer_phone,
            status=LeadStatus.OPEN,
            last_message=last_message,
        )
        db.add(lead)
        logger.info("New lead for business %s from %s", business_id, customer_phone)

    await db.commit()
    await db.refresh(lead)
    return lead


def parse_lead_status(value: str | None) -> LeadStatus | None:
    if not value:
        return None
    try:
        return LeadStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in LeadStatus)
        raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: {valid}")


async def list_leads(
    db: AsyncSession,
    business_id: UUID,
    q: str = "",
    status: LeadStatus | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
    offset: int = 0,
) -> list[Lead]:
    """List a tenant's leads, most recently active first."""
    query = select(Lead).where(Lead.business_id == business_id)

    if status:
        query = query.where(Lead.status == status)

    q = (q or "").strip()
    if q:
        pattern = f"%{q}%"
        query = query.where(
            or_(
                Lead.customer_phone.ilike(pattern),
                Lead.customer_name.ilike(pattern),
                Lead.job_address.ilike(pattern),
                Lead.last_message.ilike(pattern),
            )
        )

    query = query.order_by(Lead.updated_at.desc()).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_lead(db: AsyncSession, business_id: UUID, lead_id: UUID) -> Lead | None:
    result = await db.execute(
        select(Lead).where(Lead.id == lead_id, Lead.business_id == business_id)
    )
    return result.scalar_one_or_none()


async def _ensure_technician(db: AsyncSession, business_id: UUID, technician_id: UUID) -> None:
    result = await db.execute(
        select(Technician.id).where(
            Technician.id == technician_id,
            Technician.business_id == business_id,
        )
    )
    if result.first() is None:
        raise HTTPException(status_code=400, detail="Unknown technician")


async def update_lead(db: AsyncSession, lead: Lead, patch: LeadPatch) -> tuple[dict, Lead]:
    """Apply the allow-listed fields of ``patch``. Returns (before, lead)."""
    changes = patch.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No updatable fields")

    if "status" in changes and changes["status"] is None:
        raise HTTPException(status_code=400, detail="Status cannot be empty")

    if changes.get("assigned_tech_id") is not None:
        await _ensure_technician(db, lead.business_id, changes["assigned_tech_id"])

    before = LeadOut.model_validate(lead).model_dump(mode="json")

    for field, value in changes.items():
        setattr(lead, field, value)
    lead.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(lead)
    logger.info("Lead %s updated: %s", lead.id, ", ".join(sorted(changes)))
    return before, lead


async def list_lead_notes(db: AsyncSession, business_id: UUID, lead_id: UUID) -> list[LeadNote]:
    result = await db.execute(
        select(LeadNote)
        .where(LeadNote.business_id == business_id, LeadNote.lead_id == lead_id)
        .order_by(LeadNote.created_at.asc())
    )
    return list(result.scalars().all())


async def add_lead_note(db: AsyncSession, business_id: UUID, lead_id: UUID, body: str | None) -> LeadNote:
    """Append a note. Blank or whitespace-only bodies are rejected."""
    text = (body or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Note body is required")

    note = LeadNote(lead_id=lead_id, business_id=business_id, body=text)
    db.add(note)
    await db.commit()
    await db.refresh(note)
    logger.info("Note %s added to lead %s", note.id, lead_id)
    return note
