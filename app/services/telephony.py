"""Twilio gateway.

One process-wide handle for everything we ask of Twilio: sending texts and
checking webhook signatures. Endpoints receive it through ``Depends`` so tests
can swap in a fake with ``app.dependency_overrides[get_telephony]``.
"""

import logging
from functools import lru_cache
from typing import Mapping, Protocol

from twilio.base.exceptions import TwilioRestException
from twilio.request_validator import RequestValidator
from twilio.rest import Client

from app.core.config import settings
from app.core.errors import TelephonyError

logger = logging.getLogger(__name__)


class TelephonyGateway(Protocol):
    def send_sms(self, to: str, from_: str, body: str) -> str:
        """Send a text and return the provider's message id."""
        ...

    def validate_signature(self, url: str, params: Mapping[str, str], signature: str) -> bool:
        ...


class TwilioGateway:
    """TelephonyGateway backed by the Twilio REST API."""

    def __init__(self, account_sid: str, auth_token: str):
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._client: Client | None = None

    def _get_client(self) -> Client:
        if not (self._account_sid and self._auth_token):
            raise TelephonyError("Twilio credentials not configured")
        if self._client is None:
            self._client = Client(self._account_sid, self._auth_token)
        return self._client

    def send_sms(self, to: str, from_: str, body: str) -> str:
        """Send an SMS via Twilio. Raises TelephonyError on any failure."""
        client = self._get_client()
        try:
            message = client.messages.create(body=body, from_=from_, to=to)
        except TwilioRestException as e:
            logger.error("Twilio error sending SMS to %s: %s", to, e)
            raise TelephonyError(f"Twilio rejected message to {to}: {e.msg}") from e
        logger.info("SMS sent to %s from %s — SID: %s", to, from_, message.sid)
        return message.sid

    def validate_signature(self, url: str, params: Mapping[str, str], signature: str) -> bool:
        if not (self._auth_token and signature):
            return False
        return RequestValidator(self._auth_token).validate(url, dict(params), signature)


@lru_cache
def get_telephony() -> TelephonyGateway:
    return TwilioGateway(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
