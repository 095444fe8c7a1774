from fastapi import APIRouter
from fastapi.responses import Response

from careerdocs.models.schemas import HealthResponse
from careerdocs.utils.prometheus_metrics import get_metrics

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


@router.get("/metrics")
def prometheus_metrics():
    data, content_type = get_metrics()
    return Response(content=data, media_type=content_type)
