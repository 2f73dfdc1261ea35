"""Recovery analytics over the event log."""

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import EventType
from app.schemas.analytics import AnalyticsOut, RecoveryKpis
from app.services.events import count_events_by_type

DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 365


def recovery_rate(missed_calls: int, inbound_sms: int) -> float | None:
    """Inbound texts per missed call; None when nothing was missed."""
    if missed_calls <= 0:
        return None
    return inbound_sms / missed_calls


def build_kpis(counts: dict[str, int]) -> RecoveryKpis:
    missed = counts.get(EventType.MISSED_CALL.value, 0)
    inbound = counts.get(EventType.INBOUND_SMS.value, 0)
    return RecoveryKpis(
        missed_calls=missed,
        auto_texts=counts.get(EventType.AUTO_TEXT_SENT.value, 0),
        inbound_sms=inbound,
        consent_skips=counts.get(EventType.AUTO_TEXT_SKIPPED_NO_CONSENT.value, 0),
        recovery_rate=recovery_rate(missed, inbound),
    )


async def get_analytics(db: AsyncSession, business_id: UUID, days: int) -> AnalyticsOut:
    since = datetime.utcnow() - timedelta(days=days)
    counts = await count_events_by_type(db, business_id, since)
    return AnalyticsOut(since=since, days=days, counts=counts, kpis=build_kpis(counts))
