"""Stream ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import field_validator
from pymongo import IndexModel

from .schema_utils import parse_mongo_datetime


class Stream(Document):
    """Persisted record of an admitted transcoding job."""

    stream_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    pid: int
    source_url: str
    output_url: str

    start_time: datetime
    expires_at: datetime

    @field_validator("start_time", "expires_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    class Settings:
        name = "stream"
        indexes = [
            IndexModel([("source_url", 1)], name="source_url"),
            IndexModel([("expires_at", 1)], name="expires_at"),
        ]
