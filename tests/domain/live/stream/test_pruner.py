"""Tests for OutputFilePruner."""

import time
from datetime import timedelta

from app.domain.live.stream._pruner import OutputFilePruner
from tests.fixtures.stream_fixtures import touch


class TestDeleteArtifacts:
    def test_deletes_playlist_and_segments(self, pruner, hls_dir):
        touch(hls_dir / "st_1.m3u8")
        touch(hls_dir / "st_10.ts")
        touch(hls_dir / "st_11.ts")
        keep = touch(hls_dir / "st_2.m3u8")

        assert pruner.delete_artifacts("st_1") == 3
        assert [p.name for p in hls_dir.iterdir()] == [keep.name]

    def test_missing_files_are_not_errors(self, pruner):
        assert pruner.delete_artifacts("st_none") == 0

    def test_missing_directory(self, tmp_path):
        pruner = OutputFilePruner(tmp_path / "nowhere")

        assert pruner.delete_artifacts("st_1") == 0
        assert not (tmp_path / "nowhere").exists()


class TestPruneOlderThan:
    def test_uses_mtime_cutoff(self, pruner, hls_dir):
        now = time.time()
        touch(hls_dir / "a.ts", mtime=now - 120)
        touch(hls_dir / "b.ts", mtime=now - 30)
        (hls_dir / "subdir").mkdir()

        removed = pruner.prune_older_than(timedelta(minutes=1), now=now)

        assert removed == 1
        assert sorted(p.name for p in hls_dir.iterdir()) == ["b.ts", "subdir"]

    def test_ensure_dir_is_recursive(self, tmp_path):
        pruner = OutputFilePruner(tmp_path / "a" / "b")

        path = pruner.ensure_dir()

        assert path.is_dir()
        assert path.is_absolute()
