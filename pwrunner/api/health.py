from fastapi import APIRouter

from pwrunner.core.config import settings
from pwrunner.core.timeutil import utc_timestamp

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": utc_timestamp(), "environment": settings.ENVIRONMENT}
