from fastapi import APIRouter

from upload_relay.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check; always answers while the process is serving requests."""
    return HealthResponse()
