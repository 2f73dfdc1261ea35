"""Missed-call recovery analytics.

- GET /api/v1/app/analytics?to=&days= → event counts + KPIs over a trailing window
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import clamp_int, require_tenant
from app.core.errors import SERVER_ERROR
from app.models.business import Business
from app.schemas.analytics import AnalyticsOut
from app.services.analytics import DEFAULT_WINDOW_DAYS, MAX_WINDOW_DAYS, get_analytics

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/analytics", response_model=AnalyticsOut)
async def analytics_summary(
    days: str = Query("", description="Trailing window in days (1-365, default 30)"),
    business: Business = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    window = clamp_int(days, DEFAULT_WINDOW_DAYS, 1, MAX_WINDOW_DAYS)
    try:
        return await get_analytics(db, business.id, window)
    except Exception:
        logger.exception("Analytics query failed for business %s", business.id)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
