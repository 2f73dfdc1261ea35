"""SMS consent ledger.

``has_sms_consent`` is an existence check. ``record_sms_consent`` always
inserts; repeated opt-ins are harmless.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.consent import SmsConsent

logger = logging.getLogger(__name__)

SOURCE_VOICE_GATHER = "voice_gather"
SOURCE_WEB_FORM = "web_form"


@dataclass(frozen=True)
class ConsentOrigin:
    """Where an opt-in came from, stored alongside it as evidence."""
    ip: str | None = None
    user_agent: str | None = None
    source: str = SOURCE_WEB_FORM

    @classmethod
    def from_request(cls, request: Request, source: str) -> "ConsentOrigin":
        forwarded = request.headers.get("X-Forwarded-For", "")
        ip = forwarded.split(",")[0].strip() if forwarded else ""
        if not ip and request.client:
            ip = request.client.host
        return cls(
            ip=ip or None,
            user_agent=request.headers.get("User-Agent") or None,
            source=source,
        )


async def has_sms_consent(db: AsyncSession, business_id: UUID, customer_phone: str) -> bool:
    if not customer_phone:
        return False
    result = await db.execute(
        select(SmsConsent.id)
        .where(
            SmsConsent.business_id == business_id,
            SmsConsent.customer_phone == customer_phone,
        )
        .limit(1)
    )
    return result.first() is not None


async def record_sms_consent(
    db: AsyncSession,
    business_id: UUID,
    customer_phone: str,
    origin: ConsentOrigin,
) -> SmsConsent:
    consent = SmsConsent(
        business_id=business_id,
        customer_phone=customer_phone,
        ip=origin.ip,
        user_agent=origin.user_agent,
        source=origin.source,
    )
    db.add(consent)
    await db.commit()
    await db.refresh(consent)
    logger.info("SMS consent recorded: business=%s phone=%s via %s", business_id, customer_phone, origin.source)
    return consent
