import os
import sys
import tempfile
import warnings
from pathlib import Path

# Ignore warnings from app.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="app.shared.*")

# Set test environment variables before any app module reads configuration
os.environ.update(
    {
        "STREAM_STORE": "memory",
        "STREAM_ADMISSION_LOCK": "local",
        "HLS_DIR": tempfile.mkdtemp(prefix="stream-relay-hls-"),
        "JANITOR_INTERVAL_SECONDS": "3600",
        "LOGFIRE_ENABLE": "false",
    }
)

# Ensure the project root is on sys.path so `app` and `tests` packages resolve
PROJECT_ROOT = Path(__file__).resolve().parents[1]
root_str = str(PROJECT_ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

# Import shared fixtures so they are available to all tests
from tests.fixtures.mongo_fixtures import *  # noqa: E402, F403
from tests.fixtures.stream_fixtures import *  # noqa: E402, F403
