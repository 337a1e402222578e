"""
API Router
"""

from fastapi import APIRouter

from . import health, subscriptions

router = APIRouter()

router.include_router(health.router)
router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
