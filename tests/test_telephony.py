"""Tests for the Twilio gateway and webhook signature checks."""

from unittest.mock import MagicMock, patch

import pytest
from twilio.base.exceptions import TwilioRestException
from twilio.request_validator import RequestValidator

from app.core.config import settings
from app.core.errors import TelephonyError
from app.services.telephony import TwilioGateway

AUTH_TOKEN = "test-auth-token"
PUBLIC_BASE_URL = "https://calls.example.com"


def test_send_fails_without_credentials():
    gateway = TwilioGateway("", "")
    with pytest.raises(TelephonyError):
        gateway.send_sms(to="+15551234567", from_="+15550001111", body="hi")


def test_send_returns_message_sid():
    with patch("app.services.telephony.Client") as client_cls:
        client_cls.return_value.messages.create.return_value = MagicMock(sid="SM123")

        gateway = TwilioGateway("AC123", AUTH_TOKEN)
        sid = gateway.send_sms(to="+15551234567", from_="+15550001111", body="hi")

    assert sid == "SM123"
    client_cls.assert_called_once_with("AC123", AUTH_TOKEN)
    client_cls.return_value.messages.create.assert_called_once_with(
        body="hi", from_="+15550001111", to="+15551234567"
    )


def test_twilio_rejection_becomes_telephony_error():
    with patch("app.services.telephony.Client") as client_cls:
        client_cls.return_value.messages.create.side_effect = TwilioRestException(
            400, "/Messages.json", msg="Invalid 'To' Phone Number"
        )
        gateway = TwilioGateway("AC123", AUTH_TOKEN)

        with pytest.raises(TelephonyError, match="Invalid 'To' Phone Number"):
            gateway.send_sms(to="bogus", from_="+15550001111", body="hi")


def test_validate_signature():
    url = f"{PUBLIC_BASE_URL}/api/v1/sms"
    params = {"From": "+15551234567", "To": "+15550001111", "Body": "hello"}
    signature = RequestValidator(AUTH_TOKEN).compute_signature(url, params)

    gateway = TwilioGateway("AC123", AUTH_TOKEN)
    assert gateway.validate_signature(url, params, signature) is True
    assert gateway.validate_signature(url, {**params, "Body": "tampered"}, signature) is False
    assert gateway.validate_signature(url, params, "") is False
    assert TwilioGateway("AC123", "").validate_signature(url, params, signature) is False


@pytest.fixture
def signatures_on(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_VALIDATE_SIGNATURES", True)
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", PUBLIC_BASE_URL)


@pytest.fixture
def real_validator(telephony):
    """Validate with the real Twilio algorithm but keep sends on the fake."""
    gateway = TwilioGateway("AC123", AUTH_TOKEN)
    telephony.validate_signature = gateway.validate_signature
    return telephony


@pytest.mark.asyncio
async def test_unsigned_webhook_is_rejected(client, business, signatures_on, telephony):
    resp = await client.post("/api/v1/sms", data={"From": "+15551234567", "To": "+15550001111", "Body": "hi"})

    assert resp.status_code == 403
    assert resp.text == "Invalid Twilio signature"
    assert telephony.sent == []


@pytest.mark.asyncio
async def test_signature_checked_against_public_url(client, business, signatures_on, telephony):
    form = {"CallSid": "CA1", "From": "+15551234567", "To": "+15550001111"}
    resp = await client.post(
        "/api/v1/voice?stage=dial",
        data=form,
        headers={"X-Twilio-Signature": "sig"},
    )

    assert resp.status_code == 200
    url, params, signature = telephony.validated[0]
    assert url == f"{PUBLIC_BASE_URL}/api/v1/voice?stage=dial"
    assert params == form
    assert signature == "sig"


@pytest.mark.asyncio
async def test_validly_signed_webhook_passes(client, business, signatures_on, real_validator):
    form = {"MessageSid": "SM1", "From": "+15551234567", "To": "+15550001111", "Body": "Burst pipe"}
    signature = RequestValidator(AUTH_TOKEN).compute_signature(f"{PUBLIC_BASE_URL}/api/v1/sms", form)

    resp = await client.post("/api/v1/sms", data=form, headers={"X-Twilio-Signature": signature})

    assert resp.status_code == 200
    assert len(real_validator.sent) == 1


@pytest.mark.asyncio
async def test_forged_signature_is_rejected(client, business, signatures_on, real_validator):
    form = {"MessageSid": "SM1", "From": "+15551234567", "To": "+15550001111", "Body": "Burst pipe"}
    signature = RequestValidator("some-other-token").compute_signature(f"{PUBLIC_BASE_URL}/api/v1/sms", form)

    resp = await client.post("/api/v1/sms", data=form, headers={"X-Twilio-Signature": signature})

    assert resp.status_code == 403
    assert real_validator.sent == []


@pytest.mark.asyncio
async def test_validation_without_public_url_rejects_everything(client, business, monkeypatch, telephony):
    monkeypatch.setattr(settings, "TWILIO_VALIDATE_SIGNATURES", True)
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "")

    resp = await client.post(
        "/api/v1/voice?stage=dial",
        data={"From": "+15551234567", "To": "+15550001111"},
        headers={"X-Twilio-Signature": "sig"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_signatures_ignored_when_disabled(client, business, telephony):
    resp = await client.post("/api/v1/voice?stage=dial", data={"From": "+15551234567", "To": "+15550001111"})
    assert resp.status_code == 200
    assert telephony.validated == []
