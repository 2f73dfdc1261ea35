"""Tests for tenant resolution by Twilio number."""

import pytest
from fastapi import HTTPException

from app.services.tenants import (
    UNKNOWN_NUMBER,
    get_business_by_twilio_number,
    normalize_phone,
    require_business,
)


def test_normalize_phone_only_trims():
    assert normalize_phone("  +15550001111 \n") == "+15550001111"
    assert normalize_phone("(555) 000-1111") == "(555) 000-1111"
    assert normalize_phone(None) == ""


@pytest.mark.asyncio
async def test_resolves_each_tenant_to_itself(db, business, other_business):
    found = await get_business_by_twilio_number(db, "+15550001111")
    assert found.id == business.id

    found_other = await get_business_by_twilio_number(db, " +15550002222 ")
    assert found_other.id == other_business.id


@pytest.mark.asyncio
async def test_unknown_or_blank_number_is_none(db, business):
    assert await get_business_by_twilio_number(db, "+15550009999") is None
    assert await get_business_by_twilio_number(db, "15550001111") is None
    assert await get_business_by_twilio_number(db, "") is None


@pytest.mark.asyncio
async def test_require_business_errors(db, business):
    with pytest.raises(HTTPException) as blank:
        await require_business(db, "   ", HTTPException, "Missing to")
    assert blank.value.status_code == 400
    assert blank.value.detail == "Missing to"

    with pytest.raises(HTTPException) as unknown:
        await require_business(db, "+15550009999", HTTPException, "Missing to")
    assert unknown.value.status_code == 404
    assert unknown.value.detail == UNKNOWN_NUMBER


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
