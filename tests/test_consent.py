"""Tests for web-form SMS opt-in."""

import pytest
from sqlalchemy import select

from app.models.consent import SmsConsent
from app.services.consent import ConsentOrigin, has_sms_consent, record_sms_consent


@pytest.mark.asyncio
async def test_web_opt_in_is_recorded(client, db, business, recorded_events):
    resp = await client.post(
        "/api/v1/consent",
        json={"to": "+15550001111", "phone": " +15551234567 ", "consent": True},
        headers={"User-Agent": "Mozilla/5.0"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}

    result = await db.execute(select(SmsConsent))
    consent = result.scalar_one()
    assert consent.business_id == business.id
    assert consent.customer_phone == "+15551234567"
    assert consent.source == "web_form"
    assert consent.user_agent == "Mozilla/5.0"
    assert consent.ip == "127.0.0.1"

    assert await recorded_events() == ["sms_opt_in"]


@pytest.mark.asyncio
async def test_web_opt_in_enables_auto_text(client, business, telephony):
    await client.post("/api/v1/consent", json={"to": "+15550001111", "phone": "+15551234567", "consent": True})

    await client.post(
        "/api/v1/voice?stage=dial_end",
        data={"CallSid": "CA1", "From": "+15551234567", "To": "+15550001111", "DialCallStatus": "busy"},
    )
    assert [m["to"] for m in telephony.sent] == ["+15551234567"]


@pytest.mark.asyncio
@pytest.mark.parametrize("consent", [False, None, "true", 1, "yes"])
async def test_consent_must_be_literally_true(client, business, consent):
    resp = await client.post(
        "/api/v1/consent",
        json={"to": "+15550001111", "phone": "+15551234567", "consent": consent},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Consent must be true"}


@pytest.mark.asyncio
async def test_missing_phone_is_400(client, business):
    resp = await client.post("/api/v1/consent", json={"to": "+15550001111", "phone": "  ", "consent": True})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing phone"}


@pytest.mark.asyncio
async def test_missing_to_is_400(client, business):
    resp = await client.post("/api/v1/consent", json={"phone": "+15551234567", "consent": True})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing to"}


@pytest.mark.asyncio
async def test_unknown_number_is_404(client, db, business):
    resp = await client.post(
        "/api/v1/consent",
        json={"to": "+15550009999", "phone": "+15551234567", "consent": True},
    )
    assert resp.status_code == 404

    result = await db.execute(select(SmsConsent))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_ledger_is_per_tenant_and_append_only(db, business, other_business):
    origin = ConsentOrigin(ip="198.51.100.7", source="web_form")
    await record_sms_consent(db, business.id, "+15551234567", origin)
    await record_sms_consent(db, business.id, "+15551234567", origin)

    assert await has_sms_consent(db, business.id, "+15551234567") is True
    assert await has_sms_consent(db, other_business.id, "+15551234567") is False
    assert await has_sms_consent(db, business.id, "") is False

    result = await db.execute(select(SmsConsent).where(SmsConsent.business_id == business.id))
    assert len(result.scalars().all()) == 2
