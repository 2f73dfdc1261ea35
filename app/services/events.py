"""Event log service.

Every decision point in the webhooks writes one row here; analytics reads
the rows back as counts.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event, EventType

logger = logging.getLogger(__name__)


async def record_event(
    db: AsyncSession,
    business_id: UUID,
    type: EventType,
    payload: Optional[Dict[str, Any]] = None,
    lead_id: Optional[UUID] = None,
) -> Event:
    """Append an event and commit it.

    Args:
        db: Database session
        business_id: Tenant the event belongs to
        type: One of EventType
        payload: JSON-serializable details
        lead_id: Lead the event refers to, if any

    Returns:
        The created event
    """
    event = Event(
        business_id=business_id,
        lead_id=lead_id,
        type=type,
        payload=payload or {},
    )
    db.add(event)
    await db.commit()

    logger.info("Event %s recorded for business=%s lead=%s", type.value, business_id, lead_id)
    return event


async def count_events_by_type(db: AsyncSession, business_id: UUID, since: datetime) -> dict[str, int]:
    """Count a tenant's events per type since a point in time."""
    result = await db.execute(
        select(Event.type, func.count(Event.id))
        .where(Event.business_id == business_id, Event.created_at >= since)
        .group_by(Event.type)
    )
    return {
        (event_type.value if isinstance(event_type, EventType) else str(event_type)): count
        for event_type, count in result.all()
    }
