"""Inbound SMS handling.

Upsert the lead, log it, forward the text to the owner, acknowledge the
sender. Steps run in order and any failure aborts the rest; the lead upsert
is committed first and stays committed.
"""

import logging
from dataclasses import dataclass
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from twilio.twiml.messaging_response import MessagingResponse

from app.models.business import Business
from app.models.event import EventType
from app.models.lead import Lead
from app.services.events import record_event
from app.services.leads import upsert_lead_for_inbound_sms
from app.services.telephony import TelephonyGateway
from app.services.tenants import normalize_phone

logger = logging.getLogger(__name__)

ACKNOWLEDGMENT = "Got it — thanks! We’ll reach out ASAP."


@dataclass(frozen=True)
class InboundSms:
    message_sid: str
    from_number: str
    to_number: str
    body: str

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "InboundSms":
        return cls(
            message_sid=str(form.get("MessageSid") or ""),
            from_number=str(form.get("From") or ""),
            to_number=str(form.get("To") or ""),
            body=str(form.get("Body") or "").strip(),
        )


def format_owner_notification(business: Business, customer_phone: str, body: str, lead: Lead) -> str:
    return (
        f"New lead for {business.name}\n"
        f"From: {customer_phone}\n"
        f"Message: {body}\n"
        f"Lead ID: {lead.id}"
    )


def build_acknowledgment() -> MessagingResponse:
    response = MessagingResponse()
    response.message(ACKNOWLEDGMENT)
    return response


async def handle_inbound_sms(
    db: AsyncSession,
    telephony: TelephonyGateway,
    business: Business,
    sms: InboundSms,
) -> MessagingResponse:
    customer_phone = normalize_phone(sms.from_number)
    logger.info("Inbound SMS for business=%s from %s: %s", business.id, customer_phone, sms.body[:100])

    lead = await upsert_lead_for_inbound_sms(db, business.id, customer_phone, sms.body)

    await record_event(
        db,
        business.id,
        EventType.INBOUND_SMS,
        {"messageSid": sms.message_sid, "from": sms.from_number, "to": sms.to_number, "body": sms.body},
        lead_id=lead.id,
    )

    owner_phone = normalize_phone(business.owner_phone)
    business_number = normalize_phone(business.twilio_number)
    telephony.send_sms(
        to=owner_phone,
        from_=business_number,
        body=format_owner_notification(business, customer_phone, sms.body, lead),
    )

    await record_event(
        db,
        business.id,
        EventType.OWNER_NOTIFIED,
        {"toOwner": owner_phone, "fromBusiness": business_number, "messageSid": sms.message_sid},
        lead_id=lead.id,
    )

    return build_acknowledgment()
