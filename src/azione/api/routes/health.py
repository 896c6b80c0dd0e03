from datetime import UTC, datetime

from fastapi import APIRouter

from azione.api.schemas import HealthResponse
from azione.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        service=settings.app_name,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
    )
