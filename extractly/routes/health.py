from datetime import datetime, timezone

from fastapi import APIRouter

from extractly.schemas import HealthResponse

router = APIRouter()

SERVICE_NAME = "extractly-backend"


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=SERVICE_NAME,
    )
