"""
Render commands produced by the grid controller.

The controller never touches a rendering surface directly; it returns these
and the UI adapter applies them in order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.layout import Constraint


class ScaleTarget(Enum):
    """Which images a scale rule applies to."""

    TILE = "tile"
    FULLSCREEN = "fullscreen"


@dataclass(frozen=True)
class EnsureCells:
    count: int


@dataclass(frozen=True)
class BuildGrid:
    columns: int
    rows: int
    # (column, row) per tile index
    positions: tuple[tuple[int, int], ...]


@dataclass(frozen=True)
class SetScaleRule:
    """Stretch images along the constraint dimension when upscaling."""

    target: ScaleTarget
    constraint: Constraint


@dataclass(frozen=True)
class SetFullscreen:
    index: int
    enabled: bool


@dataclass(frozen=True)
class RequestImage:
    index: int
    url: str


@dataclass(frozen=True)
class DiscardStaleImages:
    """Drop every image slot of a tile except the most recently requested one."""

    index: int
