"""Twilio voice and SMS webhook handlers.

Thin HTTP layer: parse + verify the form, resolve the tenant by the To
number, hand off to app.services.call_flow / app.services.inbound_sms, and
return TwiML.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_public_base_url, read_twilio_form
from app.core.errors import SERVER_ERROR, TwilioWebhookError
from app.services.call_flow import CallFlowRouter, UnknownStageError, VoiceCallback, parse_stage
from app.services.consent import SOURCE_VOICE_GATHER, ConsentOrigin
from app.services.inbound_sms import InboundSms, handle_inbound_sms
from app.services.telephony import TelephonyGateway, get_telephony
from app.services.tenants import require_business

router = APIRouter()
logger = logging.getLogger(__name__)


def twiml_response(twiml) -> Response:
    return Response(content=str(twiml), media_type="text/xml")


@router.post("/voice")
async def twilio_voice_webhook(
    request: Request,
    stage: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    telephony: TelephonyGateway = Depends(get_telephony),
):
    """Run one stage of the missed-call flow (incoming, consent, dial, dial_end)."""
    try:
        form = await read_twilio_form(request, telephony)
        callback = VoiceCallback.from_form(form)
        business = await require_business(db, callback.to_number, TwilioWebhookError, "Missing To")

        try:
            call_stage = parse_stage(stage)
        except UnknownStageError:
            logger.warning("Unknown voice stage: %s", stage)
            raise TwilioWebhookError(status_code=400, detail="Unknown stage")

        flow = CallFlowRouter(db, telephony, business, get_public_base_url(request))
        twiml = await flow.handle(
            call_stage,
            callback,
            ConsentOrigin.from_request(request, SOURCE_VOICE_GATHER),
        )
        return twiml_response(twiml)

    except HTTPException:
        raise
    except Exception:
        logger.exception("Voice webhook error (stage=%s)", stage)
        raise TwilioWebhookError(status_code=500, detail=SERVER_ERROR)


@router.post("/sms")
async def twilio_sms_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    telephony: TelephonyGateway = Depends(get_telephony),
):
    """Store an inbound text as a lead, forward it to the owner, acknowledge the sender."""
    try:
        form = await read_twilio_form(request, telephony)
        sms = InboundSms.from_form(form)
        business = await require_business(db, sms.to_number, TwilioWebhookError, "Missing To")

        twiml = await handle_inbound_sms(db, telephony, business, sms)
        return twiml_response(twiml)

    except HTTPException:
        raise
    except Exception:
        logger.exception("SMS webhook error")
        raise TwilioWebhookError(status_code=500, detail=SERVER_ERROR)
