"""Main API router aggregation."""

from fastapi import APIRouter

from autobiography.api.admin import router as admin_router
from autobiography.api.auth import router as auth_router
from autobiography.api.cron import router as cron_router
from autobiography.api.entries import router as entries_router
from autobiography.api.profile import router as profile_router
from autobiography.api.prompts import router as prompts_router

# Main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(prompts_router)
api_router.include_router(entries_router)
api_router.include_router(admin_router)
api_router.include_router(cron_router)
