"""UI modules for the Qt grid adapter."""

__all__ = [
    "CameraGridWidget",
    "CaptureWorker",
    "TileWidget",
]

from .widgets import CameraGridWidget, CaptureWorker, TileWidget
