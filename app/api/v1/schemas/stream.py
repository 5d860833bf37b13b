from datetime import datetime

from pydantic import BaseModel, Field

from app.api.v1.schemas.base import StrictIn
from app.domain.live.stream.stream_models import StreamSession, StreamView, SweepReport


class StartStreamIn(StrictIn):
    url: str = Field(..., min_length=1, description="Source media URL handed to the transcoder")


class StreamOut(BaseModel):
    output_url: str
    start_time: datetime
    expires_at: datetime

    @classmethod
    def from_view(cls, view: StreamView) -> "StreamOut":
        return cls(**view.model_dump())


class StartStreamOut(StreamOut):
    stream_id: str

    @classmethod
    def from_session(cls, session: StreamSession) -> "StartStreamOut":
        return cls(
            stream_id=session.stream_id,
            output_url=session.output_url,
            start_time=session.start_time,
            expires_at=session.expires_at,
        )


class ListStreamsOut(BaseModel):
    streams: list[StreamOut]


class StopStreamOut(BaseModel):
    message: str


class CleanupOut(BaseModel):
    expired: int | None = None
    old_artifacts: int | None = None
    dead_processes: int | None = None

    @classmethod
    def from_report(cls, report: SweepReport) -> "CleanupOut":
        return cls(**report.model_dump())
