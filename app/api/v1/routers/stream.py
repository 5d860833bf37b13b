import asyncio

from fastapi import APIRouter, Depends, Path

from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.stream import (
    CleanupOut,
    ListStreamsOut,
    StartStreamIn,
    StartStreamOut,
    StopStreamOut,
    StreamOut,
)
from app.domain.live.stream import stream_domain
from app.domain.live.stream.stream_domain import StreamService

router = APIRouter(prefix="/streams", tags=["Streams"])


def get_stream_service() -> StreamService:
    """Get the process-wide StreamService instance."""
    return stream_domain.get_stream_service()


@router.post("")
async def start_stream(
    body: StartStreamIn,
    service: StreamService = Depends(get_stream_service),
) -> ApiOut[StartStreamOut]:
    """Start a transcoder for the source URL, or return the live one already serving it."""
    # A client disconnect must not abort a readiness wait with a process already spawned
    outcome = await asyncio.shield(service.start_stream(body.url))
    session = outcome.unwrap()

    return ApiOut[StartStreamOut](results=StartStreamOut.from_session(session))


@router.get("")
async def list_streams(
    service: StreamService = Depends(get_stream_service),
) -> ApiOut[ListStreamsOut]:
    sessions = await service.list_streams()

    return ApiOut[ListStreamsOut](
        results=ListStreamsOut(streams=[StreamOut.from_view(s.to_view()) for s in sessions])
    )


@router.post("/cleanup", tags=["Admin"])
async def run_cleanup(
    service: StreamService = Depends(get_stream_service),
) -> ApiOut[CleanupOut]:
    """Run one janitor pass immediately."""
    report = await service.run_cleanup()

    return ApiOut[CleanupOut](results=CleanupOut.from_report(report))


@router.delete("/{stream_id}")
async def stop_stream(
    stream_id: str = Path(..., min_length=1),
    service: StreamService = Depends(get_stream_service),
) -> ApiOut[StopStreamOut]:
    result = (await service.stop_stream(stream_id)).unwrap()

    return ApiOut[StopStreamOut](results=StopStreamOut(message=result.message))
