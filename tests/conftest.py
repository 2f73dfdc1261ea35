"""Shared test fixtures for the missed-call API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL, and a
recording fake in place of the Twilio gateway so nothing leaves the process.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.errors import TelephonyError
from app.main import app
from app.services.telephony import get_telephony

# Import all models to ensure they're registered with Base.metadata
from app.models.business import Business
from app.models.technician import Technician
from app.models.lead import Lead  # noqa: F401
from app.models.note import LeadNote  # noqa: F401
from app.models.consent import SmsConsent  # noqa: F401
from app.models.event import Event
from app.models.appointment import Appointment  # noqa: F401


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TENANT_NUMBER = "+15550001111"
OWNER_PHONE = "+15559998888"
CALLER_PHONE = "+15551234567"


class FakeTelephony:
    """Records outbound texts instead of calling Twilio."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_sends = False
        self.signature_ok = True
        self.validated: list[tuple[str, dict, str]] = []

    def send_sms(self, to: str, from_: str, body: str) -> str:
        if self.fail_sends:
            raise TelephonyError("simulated Twilio outage")
        self.sent.append({"to": to, "from": from_, "body": body})
        return f"SM{len(self.sent):032d}"

    def validate_signature(self, url: str, params, signature: str) -> bool:
        self.validated.append((url, dict(params), signature))
        return self.signature_ok and bool(signature)


@pytest_asyncio.fixture(autouse=True)
async def session_factory():
    """Fresh in-memory database per test, wired into the app's get_db."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture(autouse=True)
def telephony():
    fake = FakeTelephony()
    app.dependency_overrides[get_telephony] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_telephony, None)


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db(session_factory):
    """Direct DB session for test setup/assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def business(db):
    """Tenant T: the plumbing business that owns +15550001111."""
    biz = Business(
        name="Elm Street Plumbing",
        owner_name="Pat",
        owner_phone=OWNER_PHONE,
        twilio_number=TENANT_NUMBER,
    )
    db.add(biz)
    await db.commit()
    await db.refresh(biz)
    return biz


@pytest_asyncio.fixture
async def other_business(db):
    biz = Business(
        name="Oak Roofing",
        owner_phone="+15557776666",
        twilio_number="+15550002222",
    )
    db.add(biz)
    await db.commit()
    await db.refresh(biz)
    return biz


@pytest_asyncio.fixture
async def technician(db, business):
    tech = Technician(business_id=business.id, name="Sam", phone="+15553334444")
    db.add(tech)
    await db.commit()
    await db.refresh(tech)
    return tech


@pytest.fixture
def recorded_events(db):
    """Async helper: all recorded event types (optionally for one tenant), sorted."""
    async def _recorded(business_id=None) -> list[str]:
        query = select(Event)
        if business_id is not None:
            query = query.where(Event.business_id == business_id)
        result = await db.execute(query)
        return sorted(e.type.value for e in result.scalars().all())

    return _recorded
