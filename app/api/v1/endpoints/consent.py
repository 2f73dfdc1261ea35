"""Web-form SMS opt-in."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.errors import SERVER_ERROR
from app.models.event import EventType
from app.schemas.consent import ConsentRequest
from app.services.consent import SOURCE_WEB_FORM, ConsentOrigin, record_sms_consent
from app.services.events import record_event
from app.services.tenants import get_business_by_twilio_number, normalize_phone

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/consent")
async def record_web_consent(
    payload: ConsentRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Record an explicit opt-in submitted from the consent page."""
    if payload.consent is not True:
        raise HTTPException(status_code=400, detail="Consent must be true")

    to_number = normalize_phone(payload.to)
    customer_phone = normalize_phone(payload.phone)
    if not to_number:
        raise HTTPException(status_code=400, detail="Missing to")
    if not customer_phone:
        raise HTTPException(status_code=400, detail="Missing phone")

    try:
        business = await get_business_by_twilio_number(db, to_number)
        if not business:
            raise HTTPException(status_code=404, detail="Unknown Twilio number")

        origin = ConsentOrigin.from_request(request, SOURCE_WEB_FORM)
        await record_sms_consent(db, business.id, customer_phone, origin)
        await record_event(
            db,
            business.id,
            EventType.SMS_OPT_IN,
            {"customerPhone": customer_phone, "ip": origin.ip, "via": SOURCE_WEB_FORM},
        )
        return {"ok": True}

    except HTTPException:
        raise
    except Exception:
        logger.exception("Consent capture failed for %s", to_number)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
