"""Lead inbox endpoints. Every route is scoped by the ``?to=`` tenant selector.

- GET   /api/v1/app/leads              → filtered, paginated lead list
- GET   /api/v1/app/leads/{id}         → one lead
- PATCH /api/v1/app/leads/{id}         → edit allow-listed fields
- GET   /api/v1/app/leads/{id}/notes   → notes, oldest first
- POST  /api/v1/app/leads/{id}/notes   → append a note
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import clamp_int, require_tenant
from app.core.errors import SERVER_ERROR
from app.models.business import Business
from app.models.event import EventType
from app.models.lead import Lead
from app.schemas.lead import (
    LeadEnvelope,
    LeadListOut,
    LeadOut,
    LeadPatch,
    NoteCreate,
    NoteEnvelope,
    NoteListOut,
    NoteOut,
)
from app.services import leads as lead_store
from app.services.events import record_event

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_lead_id(lead_id: str) -> UUID:
    if not lead_id:
        raise HTTPException(status_code=400, detail="Missing lead id")
    try:
        return UUID(lead_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid lead id")


async def _require_lead(db: AsyncSession, business: Business, lead_id: str) -> Lead:
    lead = await lead_store.get_lead(db, business.id, _parse_lead_id(lead_id))
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.get("/leads", response_model=LeadListOut)
async def list_leads(
    q: str = Query("", description="Free-text search over phone, name, address and last message"),
    status: str = Query("", description="Filter by status"),
    limit: str = Query(""),
    offset: str = Query(""),
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """List the tenant's leads, most recently active first."""
    lead_status = lead_store.parse_lead_status(status)
    try:
        leads = await lead_store.list_leads(
            db,
            business.id,
            q=q,
            status=lead_status,
            limit=clamp_int(limit, lead_store.DEFAULT_LIST_LIMIT, 1, lead_store.MAX_LIST_LIMIT),
            offset=clamp_int(offset, 0, 0, None),
        )
        return LeadListOut(leads=[LeadOut.model_validate(lead) for lead in leads])
    except HTTPException:
        raise
    except Exception:
        logger.exception("Listing leads failed for business %s", business.id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.get("/leads/{lead_id}", response_model=LeadEnvelope)
async def get_lead(
    lead_id: str,
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    try:
        lead = await _require_lead(db, business, lead_id)
        return LeadEnvelope(lead=LeadOut.model_validate(lead))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Fetching lead %s failed", lead_id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.patch("/leads/{lead_id}", response_model=LeadEnvelope)
async def patch_lead(
    lead_id: str,
    patch: LeadPatch,
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Update name, job address, status or assigned technician."""
    try:
        lead = await _require_lead(db, business, lead_id)
        before, lead = await lead_store.update_lead(db, lead, patch)

        await record_event(
            db,
            business.id,
            EventType.LEAD_UPDATED,
            {"before": before, "after": LeadOut.model_validate(lead).model_dump(mode="json")},
            lead_id=lead.id,
        )
        return LeadEnvelope(lead=LeadOut.model_validate(lead))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Updating lead %s failed", lead_id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.get("/leads/{lead_id}/notes", response_model=NoteListOut)
async def list_notes(
    lead_id: str,
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    try:
        lead = await _require_lead(db, business, lead_id)
        notes = await lead_store.list_lead_notes(db, business.id, lead.id)
        return NoteListOut(notes=[NoteOut.model_validate(note) for note in notes])
    except HTTPException:
        raise
    except Exception:
        logger.exception("Listing notes for lead %s failed", lead_id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.post("/leads/{lead_id}/notes", response_model=NoteEnvelope, status_code=201)
async def add_note(
    lead_id: str,
    payload: NoteCreate,
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    try:
        lead = await _require_lead(db, business, lead_id)
        note = await lead_store.add_lead_note(db, business.id, lead.id, payload.body)
        await record_event(
            db,
            business.id,
            EventType.LEAD_NOTE_ADDED,
            {"noteId": str(note.id)},
            lead_id=lead.id,
        )
        return NoteEnvelope(note=NoteOut.model_validate(note))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Adding note to lead %s failed", lead_id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
