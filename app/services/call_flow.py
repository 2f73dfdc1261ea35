"""Voice call flow.

Twilio is stateless between callbacks, so the step we are on travels in the
callback URL as ``?stage=``:

    incoming -> (consent) -> dial -> dial_end

incoming   log the call, ask for SMS opt-in unless already given
consent    store the opt-in if the caller pressed 1
dial       ring the owner for up to RING_TIMEOUT_SECONDS
dial_end   classify the outcome, auto-text consenting callers on a miss, hang up

The TwiML builders and ``classify_dial_status`` are pure; ``CallFlowRouter``
holds the side effects (event log, consent ledger, outbound SMS).
"""

import enum
import logging
from dataclasses import dataclass
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from twilio.twiml.voice_response import VoiceResponse

from app.models.business import Business
from app.models.event import EventType
from app.services.consent import SOURCE_VOICE_GATHER, ConsentOrigin, has_sms_consent, record_sms_consent
from app.services.events import record_event
from app.services.telephony import TelephonyGateway
from app.services.tenants import normalize_phone

logger = logging.getLogger(__name__)

VOICE_WEBHOOK_PATH = "/api/v1/voice"

RING_TIMEOUT_SECONDS = 20
CONSENT_GATHER_TIMEOUT_SECONDS = 5
CONSENT_DIGIT = "1"

MISSED_DIAL_STATUSES = frozenset({"no-answer", "busy", "failed", "canceled"})

AUTO_TEXT_BODY = (
    "Sorry we missed your call — what do you need help with? "
    "Reply with the job + address. Reply STOP to opt out."
)


class CallStage(str, enum.Enum):
    INCOMING = "incoming"
    CONSENT = "consent"
    DIAL = "dial"
    DIAL_END = "dial_end"


class DialOutcome(str, enum.Enum):
    MISSED = "missed"
    ANSWERED = "answered"


class UnknownStageError(ValueError):
    pass


def parse_stage(value: str | None) -> CallStage:
    """A missing stage is the number's initial webhook; anything unknown is an error."""
    if value is None or value == "":
        return CallStage.INCOMING
    try:
        return CallStage(value)
    except ValueError:
        raise UnknownStageError(value) from None


def classify_dial_status(dial_status: str | None) -> DialOutcome:
    if (dial_status or "") in MISSED_DIAL_STATUSES:
        return DialOutcome.MISSED
    return DialOutcome.ANSWERED


def stage_url(base_url: str, stage: CallStage) -> str:
    return f"{base_url.rstrip('/')}{VOICE_WEBHOOK_PATH}?stage={stage.value}"


def consent_prompt(business_name: str) -> str:
    return (
        f"Press 1 to opt in to receive a single text message from {business_name} if we miss your call. "
        "Message and data rates may apply. Reply STOP to opt out."
    )


def build_consent_gather(business_name: str, consent_url: str, dial_url: str) -> VoiceResponse:
    """Ask for one keypress; fall through to the dial stage if none comes."""
    response = VoiceResponse()
    gather = response.gather(
        num_digits=1,
        timeout=CONSENT_GATHER_TIMEOUT_SECONDS,
        action=consent_url,
        method="POST",
    )
    gather.say(consent_prompt(business_name))
    response.redirect(dial_url, method="POST")
    return response


def build_redirect(url: str) -> VoiceResponse:
    response = VoiceResponse()
    response.redirect(url, method="POST")
    return response


def build_dial(owner_phone: str, action_url: str) -> VoiceResponse:
    response = VoiceResponse()
    dial = response.dial(action=action_url, method="POST", timeout=RING_TIMEOUT_SECONDS)
    dial.number(owner_phone)
    return response


def build_hangup() -> VoiceResponse:
    response = VoiceResponse()
    response.hangup()
    return response


@dataclass(frozen=True)
class VoiceCallback:
    """The fields we read from a Twilio voice webhook."""
    call_sid: str
    from_number: str
    to_number: str
    digits: str = ""
    dial_status: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "VoiceCallback":
        return cls(
            call_sid=str(form.get("CallSid") or ""),
            from_number=str(form.get("From") or ""),
            to_number=str(form.get("To") or ""),
            digits=str(form.get("Digits") or ""),
            dial_status=str(form.get("DialCallStatus") or ""),
        )


class CallFlowRouter:
    """Runs one stage of the call flow for one already-resolved business."""

    def __init__(self, db: AsyncSession, telephony: TelephonyGateway, business: Business, base_url: str):
        self.db = db
        self.telephony = telephony
        self.business = business
        self.base_url = base_url

    async def handle(self, stage: CallStage, callback: VoiceCallback, origin: ConsentOrigin) -> VoiceResponse:
        logger.info(
            "Voice %s | business=%s call=%s from=%s",
            stage.value, self.business.id, callback.call_sid, callback.from_number,
        )
        if stage is CallStage.INCOMING:
            return await self._incoming(callback)
        if stage is CallStage.CONSENT:
            return await self._consent(callback, origin)
        if stage is CallStage.DIAL:
            return self._dial()
        return await self._dial_end(callback)

    async def _incoming(self, callback: VoiceCallback) -> VoiceResponse:
        await record_event(
            self.db,
            self.business.id,
            EventType.INCOMING_CALL,
            {"callSid": callback.call_sid, "from": callback.from_number, "to": callback.to_number},
        )

        dial_url = stage_url(self.base_url, CallStage.DIAL)
        customer_phone = normalize_phone(callback.from_number)
        if await has_sms_consent(self.db, self.business.id, customer_phone):
            return build_redirect(dial_url)

        consent_url = stage_url(self.base_url, CallStage.CONSENT)
        return build_consent_gather(self.business.name, consent_url, dial_url)

    async def _consent(self, callback: VoiceCallback, origin: ConsentOrigin) -> VoiceResponse:
        customer_phone = normalize_phone(callback.from_number)

        if callback.digits == CONSENT_DIGIT and customer_phone:
            await record_sms_consent(
                self.db,
                self.business.id,
                customer_phone,
                ConsentOrigin(ip=origin.ip, user_agent=origin.user_agent, source=SOURCE_VOICE_GATHER),
            )
            await record_event(
                self.db,
                self.business.id,
                EventType.SMS_OPT_IN,
                {"callSid": callback.call_sid, "from": customer_phone, "via": SOURCE_VOICE_GATHER},
            )

        return build_redirect(stage_url(self.base_url, CallStage.DIAL))

    def _dial(self) -> VoiceResponse:
        return build_dial(self.business.owner_phone, stage_url(self.base_url, CallStage.DIAL_END))

    async def _dial_end(self, callback: VoiceCallback) -> VoiceResponse:
        outcome = classify_dial_status(callback.dial_status)
        await record_event(
            self.db,
            self.business.id,
            EventType.MISSED_CALL if outcome is DialOutcome.MISSED else EventType.CALL_ANSWERED,
            {
                "callSid": callback.call_sid,
                "from": callback.from_number,
                "to": callback.to_number,
                "dialStatus": callback.dial_status,
            },
        )

        if outcome is DialOutcome.MISSED:
            await self._follow_up_missed_call(callback)

        return build_hangup()

    async def _follow_up_missed_call(self, callback: VoiceCallback) -> None:
        """Text the caller only if they opted in; log the skip otherwise."""
        customer_phone = normalize_phone(callback.from_number)
        business_number = normalize_phone(self.business.twilio_number)
        payload = {"callSid": callback.call_sid, "toCustomer": customer_phone, "fromBusiness": business_number}

        if not await has_sms_consent(self.db, self.business.id, customer_phone):
            logger.info("Missed call from %s has no SMS consent; auto-text skipped", customer_phone or "<unknown>")
            await record_event(self.db, self.business.id, EventType.AUTO_TEXT_SKIPPED_NO_CONSENT, payload)
            return

        self.telephony.send_sms(to=customer_phone, from_=business_number, body=AUTO_TEXT_BODY)
        await record_event(self.db, self.business.id, EventType.AUTO_TEXT_SENT, payload)
