"""Stream domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator


class StreamSession(BaseModel):
    """An admitted transcoding job. Records are replaced or removed, never edited."""

    model_config = ConfigDict(frozen=True)

    stream_id: str
    pid: int
    source_url: str
    output_url: str
    start_time: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def _check_window(self) -> "StreamSession":
        if self.expires_at <= self.start_time:
            raise ValueError("expires_at must be later than start_time")
        return self

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_view(self) -> "StreamView":
        return StreamView(
            output_url=self.output_url,
            start_time=self.start_time,
            expires_at=self.expires_at,
        )


class StreamView(BaseModel):
    """Caller-facing projection of a stream; hides pid and source url."""

    output_url: str
    start_time: datetime
    expires_at: datetime


class StopResult(BaseModel):
    message: str = "Stream stopped"


class SweepReport(BaseModel):
    """Counts from one janitor pass. None marks a sweep that failed."""

    expired: int | None = None
    old_artifacts: int | None = None
    dead_processes: int | None = None
