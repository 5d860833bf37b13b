"""Tests for StreamService wiring and lifespan hooks."""

from app.app_config import StreamEnvironConfig
from app.domain.live.stream._admission import LocalAdmissionLock
from app.domain.live.stream._store import InMemoryStreamStore
from app.domain.live.stream.stream_domain import StreamService


def _settings(tmp_path, **overrides) -> StreamEnvironConfig:
    values = {
        "STREAM_STORE": "memory",
        "STREAM_ADMISSION_LOCK": "local",
        "HLS_DIR": str(tmp_path / "hls"),
        "STREAM_MAX_CONCURRENT": 3,
        "READINESS_TIMEOUT_MS": 2500,
        "JANITOR_INTERVAL_SECONDS": 3600,
        "HLS_BASE_URL": "http://cdn.test/hls/",
    }
    values.update(overrides)
    return StreamEnvironConfig(**values)


class TestStreamService:
    def test_from_config_wires_components(self, tmp_path):
        service = StreamService.from_config(_settings(tmp_path))

        manager = service.manager
        assert isinstance(manager._store, InMemoryStreamStore)
        assert isinstance(manager._admission, LocalAdmissionLock)
        assert manager._store is service.janitor._store
        assert manager.max_concurrent == 3
        assert manager.readiness_timeout == 2.5
        assert manager.output_url_for("st_1") == "http://cdn.test/hls/st_1.m3u8"
        assert service.scheduler.interval == 3600
        assert service.pruner.hls_dir == (tmp_path / "hls").resolve()

    async def test_startup_and_shutdown(self, tmp_path):
        service = StreamService.from_config(_settings(tmp_path))

        await service.startup()
        try:
            assert (tmp_path / "hls").is_dir()
            assert service.scheduler.running
        finally:
            await service.shutdown()

        assert not service.scheduler.running

    async def test_run_cleanup_returns_report(self, tmp_path):
        service = StreamService.from_config(_settings(tmp_path))

        report = await service.run_cleanup()

        assert report.expired == 0
        assert report.old_artifacts == 0
        assert report.dead_processes == 0

    async def test_stop_unknown_stream(self, tmp_path):
        service = StreamService.from_config(_settings(tmp_path))

        outcome = await service.stop_stream("st_missing")

        assert outcome.kind.value == "not_found"
        assert await service.list_streams() == []
