from fastapi import APIRouter
from app.api.v1.endpoints import webhooks, consent, businesses, leads, appointments, analytics

api_router = APIRouter()
api_router.include_router(webhooks.router, tags=["webhooks"])
api_router.include_router(consent.router, tags=["consent"])
api_router.include_router(businesses.router, prefix="/app", tags=["app"])
api_router.include_router(leads.router, prefix="/app", tags=["leads"])
api_router.include_router(appointments.router, prefix="/app", tags=["appointments"])
api_router.include_router(analytics.router, prefix="/app", tags=["analytics"])
