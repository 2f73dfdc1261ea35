import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import engine
from app.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(
        "Starting missed-call API (env=%s, signature validation %s)",
        settings.APP_ENV,
        "on" if settings.TWILIO_VALIDATE_SIGNATURES else "off",
    )
    yield
    await engine.dispose()


app = FastAPI(
    title="Missed-Call Recovery API",
    description="Twilio missed-call text-back and lead inbox for home-service businesses",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"ok": True, "service": "missed-call-api", "version": "0.1.0"}
