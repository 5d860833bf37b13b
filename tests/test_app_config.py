"""Tests for StreamEnvironConfig and the EnvironConfig typed getters."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from app.app_config import StreamEnvironConfig
from app.shared.config import config


@pytest.fixture
def environ(monkeypatch):
    """Set configuration keys on the singleton for the duration of a test."""

    def _set(**values: str):
        for key, value in values.items():
            monkeypatch.setitem(config._config, key, value)

    return _set


class TestStreamEnvironConfig:
    def test_defaults(self):
        settings = StreamEnvironConfig()

        assert settings.STREAM_MAX_CONCURRENT == 10
        assert settings.stream_duration == timedelta(minutes=5)
        assert settings.hls_retention == timedelta(minutes=5)
        assert settings.readiness_timeout == 10.0
        assert settings.readiness_poll_interval == 0.3
        assert settings.JANITOR_INTERVAL_SECONDS == 300

    def test_from_environ_reads_values(self, environ):
        environ(
            STREAM_MAX_CONCURRENT="4",
            READINESS_TIMEOUT_MS="2500",
            HLS_BASE_URL="https://cdn.example/hls/",
            STREAM_STORE="Memory",
        )

        settings = StreamEnvironConfig.from_environ(config)

        assert settings.STREAM_MAX_CONCURRENT == 4
        assert settings.readiness_timeout == 2.5
        assert settings.HLS_BASE_URL == "https://cdn.example/hls"
        assert settings.STREAM_STORE == "memory"

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", "1.5"])
    def test_invalid_numbers_fall_back_to_default(self, environ, raw):
        environ(STREAM_MAX_CONCURRENT=raw, STREAM_DURATION_SECONDS=raw)

        settings = StreamEnvironConfig.from_environ(config)

        assert settings.STREAM_MAX_CONCURRENT == 10
        assert settings.STREAM_DURATION_SECONDS == 300

    def test_blank_strings_fall_back_to_default(self, environ):
        environ(FFMPEG_PATH="   ", HLS_DIR="")

        settings = StreamEnvironConfig.from_environ(config)

        assert settings.FFMPEG_PATH == "ffmpeg"
        assert settings.HLS_DIR == "hls"

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StreamEnvironConfig(STREAM_STORE="postgres")

        with pytest.raises(ValidationError):
            StreamEnvironConfig(STREAM_ADMISSION_LOCK="zookeeper")


class TestEnvironConfigGetters:
    def test_get_bool(self, environ):
        environ(FLAG_ON="True", FLAG_OFF="no")

        assert config.get_bool("FLAG_ON") is True
        assert config.get_bool("FLAG_OFF") is False
        assert config.get_bool("FLAG_MISSING", default=True) is True

    def test_get_mongo_url_prefers_label(self, environ):
        environ(MONGO_URL_STREAMS="mongodb://labelled/streams", MONGO_URL="mongodb://plain/db")

        assert config.get_mongo_url("streams") == "mongodb://labelled/streams"
        assert config.get_mongo_url("other") in {"mongodb://plain/db", config.get("MONGO_URL_DEFAULT")}
