"""Error types and the handlers that render them.

JSON endpoints answer with ``{"error": "<message>"}``. Twilio webhooks answer
with a plain-text body, since Twilio only logs whatever comes back.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"

_LOCATIONS = {"body", "query", "path", "header"}


class TwilioWebhookError(HTTPException):
    """HTTP error raised from a Twilio webhook; rendered as text/plain."""


class TelephonyError(Exception):
    """Outbound call to the telephony provider failed or is not configured."""


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, TwilioWebhookError):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in _LOCATIONS)
        message = f"Invalid {field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.info("Rejected request to %s: %s", request.url.path, message)
    return JSONResponse({"error": message}, status_code=400)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
