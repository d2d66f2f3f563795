"""Utility modules for feed URLs and layout logging."""

__all__ = [
    "DEFAULT_URL_TEMPLATE",
    "build_feed_url",
    "make_url_builder",
    "log_grid_summary",
]

from .helpers import (
    DEFAULT_URL_TEMPLATE,
    build_feed_url,
    make_url_builder,
    log_grid_summary,
)
