"""Pydantic schemas for the analytics summary."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class RecoveryKpis(BaseModel):
    missed_calls: int = Field(alias="missedCalls")
    auto_texts: int = Field(alias="autoTexts")
    inbound_sms: int = Field(alias="inboundSms")
    consent_skips: int = Field(alias="consentSkips")
    recovery_rate: Optional[float] = Field(alias="recoveryRate")

    class Config:
        populate_by_name = True


class AnalyticsOut(BaseModel):
    since: datetime
    days: int
    counts: dict[str, int]
    kpis: RecoveryKpis
