"""Input events delivered to the grid controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpecialKey(Enum):
    ESCAPE = "escape"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class KeyPressed:
    """Character key press ("1".."0", "s", " ")."""

    text: str


@dataclass(frozen=True)
class SpecialKeyPressed:
    key: SpecialKey


@dataclass(frozen=True)
class TileClicked:
    index: int


@dataclass(frozen=True)
class ContainerResized:
    """Container size changed; the size itself is read from the size provider."""


@dataclass(frozen=True)
class ScanTimerFired:
    pass


@dataclass(frozen=True)
class ImageLoaded:
    """The image requested at url for tile index produced its first frame."""

    index: int
    url: str
