"""
Pytest configuration and shared fixtures for Camera Grid tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def temp_config_file() -> Generator[Path, None, None]:
    """Create a temporary config file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".ini", delete=False) as f:
        f.write("""
[logging]
level = DEBUG
file = ./logs/test.log
max_bytes = 1048576
backup_count = 2
stdout = false

[grid]
scan_interval_sec = 5
ui_fps = 10
resolutions = 160x120, 320x240, 640x480
url_template = {base}video?res={width}x{height}

[feeds]
urls =
    http://cam1/
    http://cam2/
""")
        f.flush()
        yield Path(f.name)
    os.unlink(f.name)


@pytest.fixture
def restore_config():
    """Snapshot module-level config values and restore them after the test."""
    from core import config

    names = [
        "LOG_LEVEL", "LOG_FILE", "LOG_MAX_BYTES", "LOG_BACKUP_COUNT", "LOG_TO_STDOUT",
        "SCAN_INTERVAL_SEC", "UI_FPS", "RESOLUTIONS", "URL_TEMPLATE", "FEED_URLS",
    ]
    saved = {name: getattr(config, name) for name in names}
    yield config
    for name, value in saved.items():
        setattr(config, name, value)


class ContainerBox:
    """Mutable container size used as a controller size provider."""

    def __init__(self, width=700, height=500):
        self.width = width
        self.height = height

    def __call__(self):
        return self.width, self.height


@pytest.fixture
def container() -> ContainerBox:
    return ContainerBox()


@pytest.fixture
def mock_video_capture():
    """Mock cv2.VideoCapture for testing without real cameras."""
    with patch("cv2.VideoCapture") as mock_cap:
        instance = MagicMock()
        instance.isOpened.return_value = True
        instance.read.return_value = (False, None)
        instance.set.return_value = True
        instance.release.return_value = None
        mock_cap.return_value = instance
        yield mock_cap


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication instance for widget tests.

    This fixture is session-scoped to avoid creating multiple QApplication instances.
    """
    # Only import PyQt6 if running widget tests
    try:
        from PyQt6.QtWidgets import QApplication

        # Check if QApplication already exists
        app = QApplication.instance()
        if app is None:
            # Use offscreen platform for headless testing
            os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
            app = QApplication([])
        yield app
    except ImportError:
        pytest.skip("PyQt6 not available")
