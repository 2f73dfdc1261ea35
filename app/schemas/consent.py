"""Pydantic schemas for the web opt-in form."""

from typing import Any
from pydantic import BaseModel


class ConsentRequest(BaseModel):
    to: str | None = None
    phone: str | None = None
    # Kept loose so that anything other than a literal true is a 400, not a coercion
    consent: Any = None
