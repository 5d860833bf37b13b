from datetime import timedelta

from pydantic import BaseModel, field_validator

from app.shared.config import EnvironConfig, config


class StreamEnvironConfig(BaseModel):
    # Admission
    STREAM_MAX_CONCURRENT: int = 10
    STREAM_DURATION_SECONDS: int = 300

    # Readiness probing of the HLS playlist
    READINESS_TIMEOUT_MS: int = 10_000
    READINESS_POLL_INTERVAL_MS: int = 300

    # Reconciliation
    HLS_RETENTION_SECONDS: int = 300
    JANITOR_INTERVAL_SECONDS: int = 300

    # Transcoder ingest and playback locations
    RTMP_BASE_URL: str = "rtmp://localhost:1935/live"
    HLS_BASE_URL: str = "http://localhost:8080/hls"
    HLS_DIR: str = "hls"
    FFMPEG_PATH: str = "ffmpeg"

    # Backends: "mongo" | "memory" and "local" | "redis"
    STREAM_STORE: str = "mongo"
    STREAM_ADMISSION_LOCK: str = "local"

    @field_validator("RTMP_BASE_URL", "HLS_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("STREAM_STORE")
    @classmethod
    def _check_store(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"mongo", "memory"}:
            raise ValueError(f"Unsupported STREAM_STORE: {v}")
        return v

    @field_validator("STREAM_ADMISSION_LOCK")
    @classmethod
    def _check_lock(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"local", "redis"}:
            raise ValueError(f"Unsupported STREAM_ADMISSION_LOCK: {v}")
        return v

    @property
    def stream_duration(self) -> timedelta:
        return timedelta(seconds=self.STREAM_DURATION_SECONDS)

    @property
    def hls_retention(self) -> timedelta:
        return timedelta(seconds=self.HLS_RETENTION_SECONDS)

    @property
    def readiness_timeout(self) -> float:
        return self.READINESS_TIMEOUT_MS / 1000

    @property
    def readiness_poll_interval(self) -> float:
        return self.READINESS_POLL_INTERVAL_MS / 1000

    @classmethod
    def from_environ(cls, environ: EnvironConfig = config) -> "StreamEnvironConfig":
        defaults = cls()
        return cls(
            STREAM_MAX_CONCURRENT=environ.get_positive_int(
                "STREAM_MAX_CONCURRENT", defaults.STREAM_MAX_CONCURRENT
            ),
            STREAM_DURATION_SECONDS=environ.get_positive_int(
                "STREAM_DURATION_SECONDS", defaults.STREAM_DURATION_SECONDS
            ),
            READINESS_TIMEOUT_MS=environ.get_positive_int(
                "READINESS_TIMEOUT_MS", defaults.READINESS_TIMEOUT_MS
            ),
            READINESS_POLL_INTERVAL_MS=environ.get_positive_int(
                "READINESS_POLL_INTERVAL_MS", defaults.READINESS_POLL_INTERVAL_MS
            ),
            HLS_RETENTION_SECONDS=environ.get_positive_int(
                "HLS_RETENTION_SECONDS", defaults.HLS_RETENTION_SECONDS
            ),
            JANITOR_INTERVAL_SECONDS=environ.get_positive_int(
                "JANITOR_INTERVAL_SECONDS", defaults.JANITOR_INTERVAL_SECONDS
            ),
            RTMP_BASE_URL=environ.get_str("RTMP_BASE_URL", defaults.RTMP_BASE_URL),
            HLS_BASE_URL=environ.get_str("HLS_BASE_URL", defaults.HLS_BASE_URL),
            HLS_DIR=environ.get_str("HLS_DIR", defaults.HLS_DIR),
            FFMPEG_PATH=environ.get_str("FFMPEG_PATH", defaults.FFMPEG_PATH),
            STREAM_STORE=environ.get_str("STREAM_STORE", defaults.STREAM_STORE),
            STREAM_ADMISSION_LOCK=environ.get_str(
                "STREAM_ADMISSION_LOCK", defaults.STREAM_ADMISSION_LOCK
            ),
        )


_stream_environ_config: StreamEnvironConfig | None = None


def get_app_environ_config() -> StreamEnvironConfig:
    global _stream_environ_config
    if _stream_environ_config is None:
        _stream_environ_config = StreamEnvironConfig.from_environ()
    return _stream_environ_config
