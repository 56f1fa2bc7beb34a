"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {
        "status": "OK",
        "service": "fleet-management-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
