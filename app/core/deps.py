"""FastAPI dependencies shared by the webhook and app routers."""

import logging
import re

from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import SERVER_ERROR, TwilioWebhookError
from app.models.business import Business
from app.services.telephony import TelephonyGateway
from app.services.tenants import require_business

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Twilio-Signature"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def get_public_base_url(request: Request) -> str:
    """Base URL Twilio reaches us on, without a trailing slash.

    PUBLIC_BASE_URL wins; otherwise derive it from the Host header, honoring
    the proxy's X-Forwarded-Proto. Empty when neither is available.
    """
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    host = request.headers.get("host")
    if not host:
        return ""
    proto = request.headers.get("x-forwarded-proto", "https").split(",")[0].strip()
    return f"{proto}://{host}"


def signed_url(request: Request) -> str:
    """The exact URL Twilio signed: configured public base + path + query."""
    url = f"{settings.PUBLIC_BASE_URL.rstrip('/')}{request.url.path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


async def read_twilio_form(request: Request, telephony: TelephonyGateway) -> dict[str, str]:
    """Parse a Twilio webhook body, checking its signature when enabled.

    Raises TwilioWebhookError(403) when validation is on and the signature
    is missing, wrong, or cannot be checked because PUBLIC_BASE_URL is unset.
    """
    form = await request.form()
    params = {key: str(value) for key, value in form.items()}

    if not settings.TWILIO_VALIDATE_SIGNATURES:
        return params

    signature = request.headers.get(SIGNATURE_HEADER, "")
    if not settings.PUBLIC_BASE_URL or not telephony.validate_signature(signed_url(request), params, signature):
        logger.warning("Rejected Twilio webhook %s: invalid signature", request.url.path)
        raise TwilioWebhookError(status_code=403, detail="Invalid Twilio signature")
    return params


async def require_tenant(
    to: str = Query("", description="The business's Twilio number (E.164)"),
    db: AsyncSession = Depends(get_db),
) -> Business:
    """Resolve the ``?to=`` tenant selector for the app API."""
    try:
        return await require_business(db, to, HTTPException, "Missing to")
    except HTTPException:
        raise
    except Exception:
        logger.exception("Tenant lookup failed for %s", to)
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


def clamp_int(raw: str, default: int, low: int, high: int | None) -> int:
    """Lenient integer query param.

    Reads the leading integer ("12abc" is 12). Zero, blank or junk falls back
    to the default; the result is then clamped to [low, high].
    """
    match = _LEADING_INT.match(raw or "")
    value = int(match.group(1)) if match else 0
    if not value:
        value = default
    value = max(value, low)
    return min(value, high) if high is not None else value
