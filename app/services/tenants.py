"""Tenant resolution: Twilio number -> Business."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.business import Business

logger = logging.getLogger(__name__)

UNKNOWN_NUMBER = "Unknown Twilio number (no tenant configured)"


def normalize_phone(value: str | None) -> str:
    """Trim a phone number. Numbers are expected to arrive in E.164 already."""
    return str(value or "").strip()


async def get_business_by_twilio_number(db: AsyncSession, twilio_number: str) -> Business | None:
    """Find the business that owns an inbound Twilio number (exact match)."""
    number = normalize_phone(twilio_number)
    if not number:
        return None
    result = await db.execute(select(Business).where(Business.twilio_number == number))
    return result.scalar_one_or_none()


async def require_business(db: AsyncSession, twilio_number: str | None, error_cls, missing_detail: str) -> Business:
    """Resolve a tenant or raise ``error_cls`` (400 when blank, 404 when unknown)."""
    number = normalize_phone(twilio_number)
    if not number:
        raise error_cls(status_code=400, detail=missing_detail)

    business = await get_business_by_twilio_number(db, number)
    if business is None:
        logger.warning("No tenant configured for Twilio number %s", number)
        raise error_cls(status_code=404, detail=UNKNOWN_NUMBER)
    return business
