"""Liveness probe."""

from fastapi import APIRouter, Response

router = APIRouter()


@router.get("/health_check", tags=["System"])
async def health_check():
    """Health check endpoint for liveness probes. Always 200 with an empty body."""
    return Response(status_code=200)
