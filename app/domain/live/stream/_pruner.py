"""On-disk HLS artifact cleanup."""

import time
from datetime import timedelta
from pathlib import Path

from loguru import logger


class OutputFilePruner:
    """Deletes playlist and segment files from the HLS output directory.

    Per-file failures (permissions, a concurrent delete) are logged and skipped so a
    single bad file never aborts a batch.
    """

    def __init__(self, hls_dir: str | Path):
        self.hls_dir = Path(hls_dir).resolve()

    def ensure_dir(self) -> Path:
        self.hls_dir.mkdir(parents=True, exist_ok=True)
        return self.hls_dir

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to delete {}: {}", path, e)
            return False
        return True

    def delete_artifacts(self, stream_id: str) -> int:
        """Remove `<stream_id>.m3u8` and every `<stream_id>*.ts` segment."""
        if not self.hls_dir.is_dir():
            return 0

        deleted = 0
        if self._unlink(self.hls_dir / f"{stream_id}.m3u8"):
            deleted += 1

        for path in self.hls_dir.glob(f"{stream_id}*.ts"):
            if self._unlink(path):
                deleted += 1

        if deleted:
            logger.info("Deleted {} HLS file(s) for stream {}", deleted, stream_id)
        return deleted

    def prune_older_than(self, retention: timedelta, now: float | None = None) -> int:
        """Remove files whose mtime is older than `retention`, regardless of records."""
        self.ensure_dir()
        cutoff = (now if now is not None else time.time()) - retention.total_seconds()

        deleted = 0
        for path in self.hls_dir.iterdir():
            try:
                if not path.is_file() or path.stat().st_mtime >= cutoff:
                    continue
            except OSError as e:
                logger.warning("Failed to stat {}: {}", path, e)
                continue
            if self._unlink(path):
                deleted += 1

        if deleted:
            logger.info("Pruned {} HLS file(s) older than {}", deleted, retention)
        return deleted
