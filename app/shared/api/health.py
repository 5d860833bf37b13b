from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.v1.routers.stream import get_stream_service
from app.domain.live.stream.stream_domain import StreamService
from app.domain.live.stream.stream_models import SweepReport

from .utils import ApiSuccess

router = APIRouter()


class JanitorHealth(BaseModel):
    running: bool
    last_report: SweepReport | None = None


@router.get('/health', response_model=ApiSuccess)
async def health():
    return ApiSuccess(results="OK")


@router.get('/health/janitor', response_model=ApiSuccess)
async def janitor_health(service: StreamService = Depends(get_stream_service)):
    scheduler = service.scheduler
    return ApiSuccess(
        results=JanitorHealth(running=scheduler.running, last_report=scheduler.last_report)
    )
