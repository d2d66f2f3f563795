"""
Grid controller for Camera Grid.

Owns the view state (selection, scanning, cached layout) and turns input
events into render commands. Nothing here touches a UI; every operation
returns the list of commands the rendering adapter has to apply.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, Union

from core.commands import (
    BuildGrid,
    DiscardStaleImages,
    EnsureCells,
    RequestImage,
    ScaleTarget,
    SetFullscreen,
    SetScaleRule,
)
from core.events import (
    ContainerResized,
    ImageLoaded,
    KeyPressed,
    ScanTimerFired,
    SpecialKey,
    SpecialKeyPressed,
    TileClicked,
)
from core.layout import Constraint, GridShape, grid_positions, solve_grid
from core.resolutions import ConfigurationError, Resolution, ResolutionCatalog
from utils.helpers import build_feed_url, log_grid_summary

SizeProvider = Callable[[], tuple[int, int]]
UrlBuilder = Callable[[str, int, int], str]

DIGIT_KEYS = "1234567890"


class ViewMode(Enum):
    GRID = "grid"
    GRID_SCANNING = "grid_scanning"
    FULLSCREEN = "fullscreen"
    FULLSCREEN_SCANNING = "fullscreen_scanning"


class GridController:
    """Selection/scan state machine plus minimal-churn layout recomputation."""

    def __init__(
        self,
        tile_ids: Iterable[str],
        size_provider: SizeProvider,
        resolutions: Union[ResolutionCatalog, Sequence[Sequence[int]], None] = None,
        url_builder: Optional[UrlBuilder] = None,
    ):
        self._tile_ids = tuple(tile_ids)
        if not self._tile_ids:
            raise ConfigurationError("At least one camera feed is required")

        self._size_provider = size_provider
        if isinstance(resolutions, ResolutionCatalog):
            self._catalog = resolutions
        else:
            self._catalog = ResolutionCatalog(resolutions)
        self._url_builder = url_builder or build_feed_url

        self._selected: Optional[int] = None
        self._scanning = False

        self._grid: Optional[GridShape] = None
        self._tile_resolution: Optional[Resolution] = None
        self._fullscreen_resolution: Optional[Resolution] = None
        self._constraint: Optional[Constraint] = None
        self._container_constraint: Optional[Constraint] = None
        self._requested_urls: list[Optional[str]] = [None] * len(self._tile_ids)

        self._commands: list = []
        self._closed = False

        self._handlers = {
            KeyPressed: self._on_key,
            SpecialKeyPressed: self._on_special_key,
            TileClicked: lambda event: self._select(event.index),
            ContainerResized: lambda event: self._refresh_layout(),
            ScanTimerFired: lambda event: self._scan_step(),
            ImageLoaded: self._on_image_loaded,
        }

    # ------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------
    @property
    def num_tiles(self) -> int:
        return len(self._tile_ids)

    @property
    def tile_ids(self) -> tuple[str, ...]:
        return self._tile_ids

    @property
    def catalog(self) -> ResolutionCatalog:
        return self._catalog

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    @property
    def scanning(self) -> bool:
        return self._scanning

    @property
    def grid_shape(self) -> Optional[GridShape]:
        return self._grid

    @property
    def tile_resolution(self) -> Optional[Resolution]:
        return self._tile_resolution

    @property
    def fullscreen_resolution(self) -> Optional[Resolution]:
        return self._fullscreen_resolution

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def mode(self) -> ViewMode:
        if self._selected is None:
            return ViewMode.GRID_SCANNING if self._scanning else ViewMode.GRID
        return ViewMode.FULLSCREEN_SCANNING if self._scanning else ViewMode.FULLSCREEN

    def requested_url(self, index: int) -> Optional[str]:
        """Last image URL requested for a tile."""
        self._check_index(index)
        return self._requested_urls[index]

    def resolution_for(self, index: int) -> Optional[Resolution]:
        """
        Resolution a tile should stream at. While scanning every tile may be
        shown full screen next, so all of them use the full-screen resolution
        to avoid restarting streams on each step.
        """
        self._check_index(index)
        if self._scanning or index == self._selected:
            return self._fullscreen_resolution
        return self._tile_resolution

    # ------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------
    def start(self) -> list:
        """Create one cell per tile and run the first layout pass."""
        self._emit(EnsureCells(self.num_tiles))
        self._refresh_layout()
        return self._flush()

    def dispatch(self, event) -> list:
        """Single entry point for input events."""
        if self._closed:
            logging.debug("Controller closed, ignoring %s", event)
            return []
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event {event!r}")
        handler(event)
        return self._flush()

    def refresh_layout(self) -> list:
        self._refresh_layout()
        return self._flush()

    def select_tile(self, index: int) -> list:
        self._select(index)
        return self._flush()

    def select_and_stop_scan(self, index: int) -> list:
        self._select_and_stop_scan(index)
        return self._flush()

    def start_scanning(self) -> list:
        self._start_scanning()
        return self._flush()

    def stop_scanning(self) -> list:
        self._set_scanning(False)
        return self._flush()

    def toggle_scanning(self) -> list:
        self._set_scanning(not self._scanning)
        return self._flush()

    def scan_step(self) -> list:
        self._scan_step()
        return self._flush()

    def scan_previous(self) -> list:
        self._scan_by(-1)
        return self._flush()

    def scan_next(self) -> list:
        self._scan_by(1)
        return self._flush()

    def dismiss_selection(self) -> list:
        self._dismiss_selection()
        return self._flush()

    def close(self) -> None:
        """Dispose of the controller; later events are ignored."""
        self._closed = True
        self._commands.clear()

    # ------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------
    def _select(self, index: int) -> None:
        """Toggle full-screen selection of a tile."""
        self._check_index(index)
        old_index = None

        if self._selected == index:
            self._emit(SetFullscreen(index, False))
            old_index = index
            self._selected = None
        else:
            if self._selected is not None:
                self._emit(SetFullscreen(self._selected, False))
                old_index = self._selected
            self._emit(SetFullscreen(index, True))
            self._selected = index

        if self._fullscreen_resolution != self._tile_resolution:
            # Streams change resolution when toggling full screen.
            if old_index is not None:
                self._build_image(old_index)
            if self._selected is not None:
                self._build_image(self._selected)

    def _move_selection(self, index: int) -> None:
        if index != self._selected:
            self._select(index)

    def _select_and_stop_scan(self, index: int) -> None:
        self._select(index)
        self._set_scanning(False)

    def _set_scanning(self, scanning: bool) -> None:
        if scanning == self._scanning:
            return
        self._scanning = scanning
        # Starting requests full-screen streams for every tile, stopping
        # drops the non-selected ones back to grid resolution.
        self._build_images()

    def _start_scanning(self) -> None:
        self._set_scanning(True)
        if self._selected is None:
            self._select(0)

    def _scan_step(self) -> None:
        if not self._scanning or self._selected is None:
            return
        self._move_selection((self._selected + 1) % self.num_tiles)

    def _scan_by(self, step: int) -> None:
        if self._selected is None:
            return
        self._move_selection((self._selected + step) % self.num_tiles)
        self._set_scanning(False)

    def _dismiss_selection(self) -> None:
        if self._selected is not None:
            self._select_and_stop_scan(self._selected)

    # ------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------
    def _on_key(self, event: KeyPressed) -> None:
        text = event.text
        if len(text) == 1 and text in DIGIT_KEYS:
            index = DIGIT_KEYS.index(text)
            if index < self.num_tiles:
                self._select_and_stop_scan(index)
            else:
                logging.debug("No tile for key %r", text)
        elif text == "s":
            if self._scanning and self._selected is not None:
                self._select_and_stop_scan(self._selected)
            else:
                self._start_scanning()
        elif text == " ":
            self._set_scanning(not self._scanning)

    def _on_special_key(self, event: SpecialKeyPressed) -> None:
        if event.key is SpecialKey.ESCAPE:
            self._dismiss_selection()
        elif event.key is SpecialKey.LEFT:
            self._scan_by(-1)
        elif event.key is SpecialKey.RIGHT:
            self._scan_by(1)

    def _on_image_loaded(self, event: ImageLoaded) -> None:
        if not 0 <= event.index < self.num_tiles:
            logging.debug("Load notification for unknown tile %d", event.index)
            return
        if self._requested_urls[event.index] != event.url:
            # A newer request is still pending; keep the current image.
            return
        self._emit(DiscardStaleImages(event.index))

    # ------------------------------------------------------------
    # Layout and images
    # ------------------------------------------------------------
    def _refresh_layout(self) -> None:
        """Recompute the layout, emitting commands only for values that changed."""
        width, height = self._size_provider()
        if width <= 0 or height <= 0:
            logging.debug("Container not sized yet (%sx%s), skipping layout", width, height)
            return

        aspect_w, aspect_h = self._catalog.aspect
        grid = solve_grid(width, height, self.num_tiles, aspect_w, aspect_h)
        tile_resolution = self._catalog.smallest_covering(
            grid.cell_width_px, grid.cell_height_px
        )
        fullscreen_resolution = self._catalog.smallest_covering(width, height)

        previous = self._grid
        self._grid = grid
        grid_changed = previous is None or previous.dimensions != grid.dimensions
        if grid_changed:
            self._emit(
                BuildGrid(
                    grid.columns,
                    grid.rows,
                    tuple(grid_positions(self.num_tiles, grid.columns)),
                )
            )

        if grid.constraint != self._constraint:
            self._constraint = grid.constraint
            self._emit(SetScaleRule(ScaleTarget.TILE, grid.constraint))

        if grid.container_constraint != self._container_constraint:
            self._container_constraint = grid.container_constraint
            self._emit(SetScaleRule(ScaleTarget.FULLSCREEN, grid.container_constraint))

        resolution_changed = (
            tile_resolution != self._tile_resolution
            or fullscreen_resolution != self._fullscreen_resolution
        )
        if resolution_changed:
            self._tile_resolution = tile_resolution
            self._fullscreen_resolution = fullscreen_resolution
            self._build_images()

        if grid_changed or resolution_changed:
            log_grid_summary(grid, tile_resolution, fullscreen_resolution)

    def _build_image(self, index: int) -> None:
        """Request the image for a tile unless that exact URL is already showing."""
        resolution = self.resolution_for(index)
        if resolution is None:
            return
        url = self._url_builder(self._tile_ids[index], resolution.width, resolution.height)
        if url == self._requested_urls[index]:
            return
        self._requested_urls[index] = url
        self._emit(RequestImage(index, url))

    def _build_images(self) -> None:
        for index in range(self.num_tiles):
            self._build_image(index)

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------
    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.num_tiles:
            raise IndexError(f"Tile index {index} out of range 0..{self.num_tiles - 1}")

    def _emit(self, command) -> None:
        self._commands.append(command)

    def _flush(self) -> list:
        commands, self._commands = self._commands, []
        return commands
