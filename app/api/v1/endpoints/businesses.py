"""Tenant bootstrap for the owner app."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_tenant
from app.core.errors import SERVER_ERROR
from app.models.business import Business
from app.models.lead import LeadStatus
from app.models.technician import Technician
from app.schemas.business import BootstrapOut, BusinessOut, TechnicianOut

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/bootstrap", response_model=BootstrapOut)
async def bootstrap(
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Business profile, technician roster and the lead status vocabulary."""
    try:
        result = await db.execute(
            select(Technician)
            .where(Technician.business_id == business.id)
            .order_by(Technician.name.asc())
        )
        technicians = result.scalars().all()
    except Exception:
        logger.exception("Bootstrap failed for business %s", business.id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    return BootstrapOut(
        business=BusinessOut.model_validate(business),
        technicians=[TechnicianOut.model_validate(t) for t in technicians],
        lead_status_options=[s.value for s in LeadStatus],
    )
