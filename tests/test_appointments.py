"""Tests for appointment scheduling."""

from datetime import datetime
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.models.appointment import Appointment
from app.models.event import Event, EventType
from app.models.lead import Lead

TO = {"to": "+15550001111"}


async def _lead(db, business):
    lead = Lead(business_id=business.id, customer_phone="+15551234567")
    db.add(lead)
    await db.commit()
    await db.refresh(lead)
    return lead


@pytest.mark.asyncio
async def test_create_appointment(client, db, business, technician):
    lead = await _lead(db, business)

    resp = await client.post(
        "/api/v1/app/appointments",
        params=TO,
        json={
            "lead_id": str(lead.id),
            "title": "Fix leaking pipe",
            "address": "5 Elm St",
            "starts_at": "2026-11-02T15:00:00Z",
            "ends_at": "2026-11-02T16:00:00Z",
            "assigned_tech_id": str(technician.id),
        },
    )
    assert resp.status_code == 201
    appt = resp.json()["appointment"]
    assert appt["status"] == "scheduled"
    assert appt["title"] == "Fix leaking pipe"
    assert appt["lead_id"] == str(lead.id)
    assert appt["starts_at"].startswith("2026-11-02T15:00:00")

    result = await db.execute(select(Event).where(Event.type == EventType.APPOINTMENT_CREATED))
    event = result.scalar_one()
    assert event.lead_id == lead.id
    assert event.payload["appointmentId"] == appt["id"]


@pytest.mark.asyncio
async def test_starts_at_is_required(client, business, recorded_events):
    resp = await client.post("/api/v1/app/appointments", params=TO, json={"title": "Estimate"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "starts_at is required"}
    assert await recorded_events() == []


@pytest.mark.asyncio
async def test_ends_before_start_is_400(client, business):
    resp = await client.post(
        "/api/v1/app/appointments",
        params=TO,
        json={"starts_at": "2026-11-02T15:00:00", "ends_at": "2026-11-02T14:00:00"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_lead_and_tech_must_belong_to_tenant(client, db, business, other_business):
    foreign_lead = await _lead(db, other_business)

    resp = await client.post(
        "/api/v1/app/appointments",
        params=TO,
        json={"starts_at": "2026-11-02T15:00:00", "lead_id": str(foreign_lead.id)},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown lead"}

    resp = await client.post(
        "/api/v1/app/appointments",
        params=TO,
        json={"starts_at": "2026-11-02T15:00:00", "assigned_tech_id": str(uuid4())},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown technician"}


@pytest.mark.asyncio
async def test_list_by_range(client, db, business, other_business):
    for biz, day in [(business, 1), (business, 3), (business, 5), (other_business, 3)]:
        db.add(Appointment(business_id=biz.id, title=f"day {day}", starts_at=datetime(2026, 11, day, 9, 0)))
    await db.commit()

    resp = await client.get(
        "/api/v1/app/appointments",
        params={**TO, "start": "2026-11-01T09:00:00", "end": "2026-11-05T09:00:00"},
    )
    assert resp.status_code == 200
    assert [a["title"] for a in resp.json()["appointments"]] == ["day 1", "day 3"]

    resp = await client.get("/api/v1/app/appointments", params=TO)
    assert [a["title"] for a in resp.json()["appointments"]] == ["day 1", "day 3", "day 5"]


@pytest.mark.asyncio
async def test_bad_range_is_400(client, business):
    resp = await client.get("/api/v1/app/appointments", params={**TO, "start": "next tuesday"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid")
