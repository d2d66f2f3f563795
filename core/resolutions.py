"""
Feed resolution catalog for Camera Grid.

Holds the ascending list of resolutions a camera can stream and picks the
smallest one that covers a target pixel box.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, NamedTuple

ASPECT_TOLERANCE = 1e-3


class ConfigurationError(ValueError):
    """Raised when catalog, feed or config values are unusable."""


class Resolution(NamedTuple):
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


DEFAULT_RESOLUTIONS: tuple[Resolution, ...] = (
    Resolution(160, 120),
    Resolution(240, 180),
    Resolution(320, 240),
    Resolution(480, 360),
    Resolution(640, 480),
    Resolution(800, 600),
    Resolution(1024, 768),
    Resolution(1280, 960),
)


def parse_resolutions(text: str) -> list[Resolution]:
    """Parse "160x120, 320x240" (comma or newline separated) into resolutions."""
    resolutions: list[Resolution] = []
    for chunk in text.replace("\n", ",").split(","):
        chunk = chunk.strip().lower()
        if not chunk:
            continue
        width, sep, height = chunk.partition("x")
        if not sep or not width.strip().isdigit() or not height.strip().isdigit():
            raise ConfigurationError(f"Malformed resolution {chunk!r}")
        resolutions.append(Resolution(int(width), int(height)))
    return resolutions


class ResolutionCatalog:
    """Immutable, ascending, single-aspect list of feed resolutions."""

    def __init__(self, resolutions: Iterable[Iterable[int]] | None = None):
        entries = []
        for res in DEFAULT_RESOLUTIONS if resolutions is None else resolutions:
            try:
                entries.append(Resolution(*res))
            except TypeError as exc:
                raise ConfigurationError(f"Resolution {res!r} must be a (width, height) pair") from exc
        self._validate(entries)
        self._entries = tuple(entries)

    @staticmethod
    def _validate(entries: list[Resolution]) -> None:
        if not entries:
            raise ConfigurationError("Resolution catalog must not be empty")

        for res in entries:
            if res.width <= 0 or res.height <= 0:
                raise ConfigurationError(f"Resolution {res} must be positive")

        aspect = entries[0].width / entries[0].height
        for prev, res in zip(entries, entries[1:]):
            if res.width <= prev.width or res.height <= prev.height:
                raise ConfigurationError(
                    f"Resolutions must be strictly ascending ({prev} before {res})"
                )
            if not math.isclose(res.width / res.height, aspect, rel_tol=ASPECT_TOLERANCE):
                raise ConfigurationError(
                    f"Resolution {res} does not match aspect ratio of {entries[0]}"
                )

    @property
    def entries(self) -> tuple[Resolution, ...]:
        return self._entries

    @property
    def smallest(self) -> Resolution:
        return self._entries[0]

    @property
    def largest(self) -> Resolution:
        return self._entries[-1]

    @property
    def aspect(self) -> tuple[int, int]:
        """Tile aspect (width, height) shared by every entry."""
        return self.smallest.width, self.smallest.height

    def smallest_covering(self, target_width: float, target_height: float) -> Resolution:
        """
        Return the first resolution at least as large as the target in both
        dimensions. Falls back to the largest entry (logged) when none covers,
        in which case the caller has to scale images up.
        """
        for res in self._entries:
            if res.width >= target_width and res.height >= target_height:
                return res

        logging.warning(
            "Container %.0fx%.0f is larger than the largest feed resolution %s. "
            "Images will be scaled up.",
            target_width,
            target_height,
            self.largest,
        )
        return self.largest

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"ResolutionCatalog({[str(r) for r in self._entries]})"
