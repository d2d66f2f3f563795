"""
Utility functions for Camera Grid.

Feed URL construction and layout logging.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from core.layout import GridShape
    from core.resolutions import Resolution

# Tested with Axis cameras.
DEFAULT_URL_TEMPLATE = "{base}mjpg/video.mjpg?resolution={width}x{height}"


def build_feed_url(
    base: str, width: int, height: int, template: str = DEFAULT_URL_TEMPLATE
) -> str:
    """Generate the feed URL for a camera base URL at a supported resolution."""
    return template.format(base=base, width=width, height=height)


def make_url_builder(template: Optional[str] = None):
    """Return a (tile_id, width, height) -> url callable for a template."""
    if not template:
        return build_feed_url

    def builder(base: str, width: int, height: int) -> str:
        return build_feed_url(base, width, height, template)

    return builder


def log_grid_summary(
    shape: GridShape,
    tile_resolution: Optional[Resolution],
    fullscreen_resolution: Optional[Resolution],
) -> None:
    """Log the current grid shape and the resolutions requested for it.

    Args:
        shape: Solved grid shape
        tile_resolution: Resolution requested for grid cells
        fullscreen_resolution: Resolution requested for the full-screen tile
    """
    logging.info(
        "Grid %dx%d cell=%.0fx%.0f constraint=%s container_constraint=%s tile_res=%s fullscreen_res=%s",
        shape.columns,
        shape.rows,
        shape.cell_width_px,
        shape.cell_height_px,
        shape.constraint.value,
        shape.container_constraint.value,
        tile_resolution,
        fullscreen_resolution,
    )
