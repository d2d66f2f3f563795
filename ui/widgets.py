"""
Qt widgets for Camera Grid.

The grid widget feeds key, mouse, resize and timer events into the
GridController and applies the render commands it returns.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import cv2
import numpy as np
from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtCore import Qt, QThread, QTimer, pyqtSignal, pyqtSlot

from core.commands import (
    BuildGrid,
    DiscardStaleImages,
    EnsureCells,
    RequestImage,
    ScaleTarget,
    SetFullscreen,
    SetScaleRule,
)
from core.controller import GridController
from core.events import (
    ContainerResized,
    ImageLoaded,
    KeyPressed,
    ScanTimerFired,
    SpecialKey,
    SpecialKeyPressed,
    TileClicked,
)
from core.layout import Constraint

SPECIAL_KEYS = {
    Qt.Key.Key_Escape: SpecialKey.ESCAPE,
    Qt.Key.Key_Left: SpecialKey.LEFT,
    Qt.Key.Key_Right: SpecialKey.RIGHT,
}


# ============================================================
# FEED CAPTURE WORKER
# ------------------------------------------------------------
# Runs on its own QThread to avoid blocking the UI thread.
# ============================================================
class CaptureWorker(QThread):
    frame_ready = pyqtSignal(object)
    loaded = pyqtSignal(str)
    status_changed = pyqtSignal(bool)

    def __init__(self, url, parent=None, target_fps=None):
        """Initialize capture settings for one feed URL."""
        super().__init__(parent)
        self.url = url
        self._running = True
        self._cap = None
        self._emit_interval = 1.0 / target_fps if target_fps else 0.0
        self._last_emit = 0.0
        self.has_frame = False

    def run(self):
        """Capture loop: open the feed, read frames, emit. Ends on failure."""
        logging.info("Feed %s thread started", self.url)
        try:
            self._cap = cv2.VideoCapture(self.url)
            if not self._cap.isOpened():
                logging.warning("Could not open feed %s", self.url)
                self.status_changed.emit(False)
                return

            # Minimize internal buffering
            try:
                self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
            except Exception:
                pass

            while self._running and not self.isInterruptionRequested():
                ok, frame = self._cap.read()
                if not ok or frame is None:
                    logging.warning("Feed %s stopped delivering frames", self.url)
                    self.status_changed.emit(False)
                    break

                first = not self.has_frame
                now = time.monotonic()
                if not first and now - self._last_emit < self._emit_interval:
                    continue
                self._last_emit = now
                self.has_frame = True
                self.frame_ready.emit(frame)

                if first:
                    self.status_changed.emit(True)
                    self.loaded.emit(self.url)
        except Exception:
            logging.exception("Exception in CaptureWorker %s", self.url)
        finally:
            self._close_capture()
            logging.info("Feed %s thread stopped", self.url)

    def _close_capture(self):
        """Release the capture handle if open."""
        try:
            if self._cap:
                self._cap.release()
        except Exception:
            pass
        self._cap = None

    def stop(self):
        """Stop capture loop and wait for thread exit."""
        self._running = False
        self.requestInterruption()
        self.wait(2000)


def frame_to_qimage(frame):
    """Convert a BGR (or grayscale) numpy frame into an owned QImage."""
    frame = np.ascontiguousarray(frame)
    if frame.ndim == 2:
        h, w = frame.shape
        bytes_per_line = w
        fmt = QtGui.QImage.Format.Format_Grayscale8
    else:
        h, w, ch = frame.shape
        bytes_per_line = ch * w
        fmt = QtGui.QImage.Format.Format_BGR888
    return QtGui.QImage(frame.data, w, h, bytes_per_line, fmt).copy()


# ============================================================
# TILE WIDGET
# ------------------------------------------------------------
class TileWidget(QtWidgets.QWidget):
    """One grid cell. Shows the newest feed that has produced a frame."""

    clicked = pyqtSignal(int)
    loaded = pyqtSignal(int, str)

    def __init__(self, index, parent=None, ui_fps=15, enable_capture=True):
        super().__init__(parent)
        self.index = index
        self.enable_capture = bool(enable_capture)
        self.ui_fps = ui_fps
        self.current_url: Optional[str] = None
        self.is_fullscreen = False
        self.grid_position = None
        self.constraints = {
            ScaleTarget.TILE: Constraint.HEIGHT,
            ScaleTarget.FULLSCREEN: Constraint.HEIGHT,
        }

        # Oldest first; the last entry is the most recent request.
        self._workers: list[CaptureWorker] = []
        self._latest_frame = None
        self._frame_id = 0
        self._last_rendered_frame = None

        self.setAttribute(QtCore.Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("background: black;")
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Ignored,
            QtWidgets.QSizePolicy.Policy.Ignored,
        )

        self.video_label = QtWidgets.QLabel(self)
        self.video_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.video_label.setScaledContents(False)
        self.video_label.setMinimumSize(1, 1)
        self.video_label.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Ignored,
            QtWidgets.QSizePolicy.Policy.Ignored,
        )
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.video_label)

        self.render_timer = QTimer(self)
        self.render_timer.setInterval(int(1000 / max(1, int(ui_fps))))
        self.render_timer.timeout.connect(self._render_latest_frame)
        self.render_timer.start()

    def request_image(self, url):
        """Start streaming url into a new slot on top of the current one."""
        self.current_url = url
        if not self.enable_capture:
            return
        worker = CaptureWorker(url, parent=self, target_fps=self.ui_fps)
        self._add_worker(worker)
        worker.start()
        logging.debug("Tile %d requested %s", self.index, url)

    def _add_worker(self, worker):
        worker.frame_ready.connect(self._on_worker_frame)
        worker.loaded.connect(self._on_worker_loaded)
        worker.status_changed.connect(self._on_worker_status)
        worker.finished.connect(self._on_worker_finished)
        self._workers.append(worker)

    def discard_stale(self):
        """Stop every stream except the most recent request."""
        stale, self._workers = self._workers[:-1], self._workers[-1:]
        for worker in stale:
            self._stop_worker(worker)
        if stale:
            logging.debug("Tile %d dropped %d stale stream(s)", self.index, len(stale))

    def set_constraint(self, target, constraint):
        self.constraints[target] = constraint
        self._last_rendered_frame = None

    def set_fullscreen(self, enabled):
        self.is_fullscreen = bool(enabled)
        self._last_rendered_frame = None

    def mousePressEvent(self, event):
        """Select/deselect this tile on left click."""
        if event.button() == QtCore.Qt.MouseButton.LeftButton:
            self.clicked.emit(self.index)
            event.accept()
            return
        super().mousePressEvent(event)

    def _displayed_worker(self):
        for worker in reversed(self._workers):
            if worker.has_frame:
                return worker
        return None

    @pyqtSlot(object)
    def _on_worker_frame(self, frame):
        if frame is None or self.sender() is not self._displayed_worker():
            return
        self._latest_frame = frame
        self._frame_id += 1

    @pyqtSlot(str)
    def _on_worker_loaded(self, url):
        self.loaded.emit(self.index, url)

    @pyqtSlot(bool)
    def _on_worker_status(self, online):
        if online:
            return
        worker = self.sender()
        logging.debug("Tile %d lost feed %s", self.index, worker.url)
        displayed = self._displayed_worker()
        if displayed is None or worker is displayed:
            self._latest_frame = None
            self.video_label.clear()
            self.video_label.setText("DISCONNECTED")

    @pyqtSlot()
    def _on_worker_finished(self):
        """Forget a stream that ended before producing a frame."""
        worker = self.sender()
        if worker in self._workers and not worker.has_frame:
            self._workers.remove(worker)
            worker.deleteLater()
            logging.debug("Tile %d dropped failed stream %s", self.index, worker.url)

    def _render_latest_frame(self):
        """Scale the newest frame along the active constraint and display it."""
        frame = self._latest_frame
        if frame is None or self._frame_id == self._last_rendered_frame:
            return
        self._last_rendered_frame = self._frame_id

        try:
            target = ScaleTarget.FULLSCREEN if self.is_fullscreen else ScaleTarget.TILE
            size = self.video_label.size()
            pix = QtGui.QPixmap.fromImage(frame_to_qimage(frame))
            if size.width() > 0 and size.height() > 0:
                transform = (
                    Qt.TransformationMode.SmoothTransformation
                    if self.is_fullscreen
                    else Qt.TransformationMode.FastTransformation
                )
                if self.constraints[target] is Constraint.WIDTH:
                    pix = pix.scaledToWidth(size.width(), transform)
                else:
                    pix = pix.scaledToHeight(size.height(), transform)
            self.video_label.setPixmap(pix)
        except Exception:
            logging.exception("render frame tile %d", self.index)

    def _stop_worker(self, worker):
        try:
            worker.frame_ready.disconnect(self._on_worker_frame)
            worker.loaded.disconnect(self._on_worker_loaded)
            worker.status_changed.disconnect(self._on_worker_status)
            worker.finished.disconnect(self._on_worker_finished)
        except TypeError:
            pass
        worker.stop()
        worker.deleteLater()

    def cleanup(self):
        """Stop the render timer and every capture thread."""
        self.render_timer.stop()
        for worker in self._workers:
            self._stop_worker(worker)
        self._workers = []


# ============================================================
# GRID WIDGET
# ------------------------------------------------------------
class CameraGridWidget(QtWidgets.QWidget):
    """Container that lays out tiles and owns the controller and scan timer."""

    def __init__(
        self,
        feed_urls,
        parent=None,
        resolutions=None,
        url_builder=None,
        scan_interval_sec=3.0,
        ui_fps=15,
        enable_capture=True,
    ):
        super().__init__(parent)
        self.ui_fps = ui_fps
        self.enable_capture = enable_capture
        self.tiles: list[TileWidget] = []
        self.fullscreen_index: Optional[int] = None
        self._grid_dims = (0, 0)
        self._constraints: dict = {}

        self.setAttribute(QtCore.Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("background: black;")
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self.grid_layout = QtWidgets.QGridLayout(self)
        self.grid_layout.setContentsMargins(0, 0, 0, 0)
        self.grid_layout.setSpacing(0)

        self.controller = GridController(
            feed_urls,
            self.container_size,
            resolutions=resolutions,
            url_builder=url_builder,
        )
        self._appliers = {
            EnsureCells: self._ensure_cells,
            BuildGrid: self._build_grid,
            SetScaleRule: self._set_scale_rule,
            SetFullscreen: self._set_fullscreen,
            RequestImage: self._request_image,
            DiscardStaleImages: self._discard_stale,
        }

        # Cancelled in cleanup() so it never fires into a closed controller.
        self.scan_timer = QTimer(self)
        self.scan_timer.setInterval(int(scan_interval_sec * 1000))
        self.scan_timer.timeout.connect(lambda: self.handle_event(ScanTimerFired()))
        self.scan_timer.start()

        self.apply(self.controller.start())

    def container_size(self):
        # Hidden widgets report a default size; wait for the real one.
        if not self.isVisible():
            return 0, 0
        return self.width(), self.height()

    # ------------------------------------------------------------
    # Event plumbing
    # ------------------------------------------------------------
    def handle_event(self, event):
        """Dispatch an event to the controller and apply the result."""
        try:
            self.apply(self.controller.dispatch(event))
        except Exception:
            logging.exception("handle_event %s", event)

    def apply(self, commands):
        for command in commands:
            self._appliers[type(command)](command)

    def keyPressEvent(self, event):
        """Map digits, s, space, Esc and arrows to controller events."""
        special = SPECIAL_KEYS.get(event.key())
        if special is not None:
            self.handle_event(SpecialKeyPressed(special))
            return
        text = event.text()
        if text:
            self.handle_event(KeyPressed(text))
            return
        super().keyPressEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.handle_event(ContainerResized())

    def showEvent(self, event):
        super().showEvent(event)
        self.handle_event(ContainerResized())

    # ------------------------------------------------------------
    # Command appliers
    # ------------------------------------------------------------
    def _ensure_cells(self, command):
        while len(self.tiles) < command.count:
            tile = TileWidget(
                len(self.tiles),
                parent=self,
                ui_fps=self.ui_fps,
                enable_capture=self.enable_capture,
            )
            for target, constraint in self._constraints.items():
                tile.set_constraint(target, constraint)
            tile.clicked.connect(self._on_tile_clicked)
            tile.loaded.connect(self._on_tile_loaded)
            self.tiles.append(tile)

    @pyqtSlot(int)
    def _on_tile_clicked(self, index):
        self.handle_event(TileClicked(index))

    @pyqtSlot(int, str)
    def _on_tile_loaded(self, index, url):
        self.handle_event(ImageLoaded(index, url))

    def _build_grid(self, command):
        old_cols, old_rows = self._grid_dims
        for tile in self.tiles:
            self.grid_layout.removeWidget(tile)
        for r in range(old_rows):
            self.grid_layout.setRowStretch(r, 0)
        for c in range(old_cols):
            self.grid_layout.setColumnStretch(c, 0)

        self._grid_dims = (command.columns, command.rows)
        for tile, (col, row) in zip(self.tiles, command.positions):
            tile.grid_position = (row, col)
            self.grid_layout.addWidget(tile, row, col)
        for r in range(command.rows):
            self.grid_layout.setRowStretch(r, 1)
        for c in range(command.columns):
            self.grid_layout.setColumnStretch(c, 1)

        if self.fullscreen_index is not None:
            self._show_fullscreen(self.tiles[self.fullscreen_index])

    def _set_scale_rule(self, command):
        self._constraints[command.target] = command.constraint
        for tile in self.tiles:
            tile.set_constraint(command.target, command.constraint)

    def _set_fullscreen(self, command):
        tile = self.tiles[command.index]
        tile.set_fullscreen(command.enabled)
        if command.enabled:
            self.fullscreen_index = command.index
            self._show_fullscreen(tile)
        elif self.fullscreen_index == command.index:
            self.fullscreen_index = None
            self._restore_grid()

    def _show_fullscreen(self, tile):
        """Span one tile over the whole grid and hide the rest."""
        cols, rows = self._grid_dims
        for other in self.tiles:
            if other is not tile:
                other.hide()
        self.grid_layout.removeWidget(tile)
        self.grid_layout.addWidget(tile, 0, 0, max(1, rows), max(1, cols))
        tile.show()
        tile.raise_()

    def _restore_grid(self):
        for tile in self.tiles:
            if tile.grid_position is not None:
                self.grid_layout.removeWidget(tile)
                self.grid_layout.addWidget(tile, *tile.grid_position)
            tile.show()

    def _request_image(self, command):
        self.tiles[command.index].request_image(command.url)

    def _discard_stale(self, command):
        self.tiles[command.index].discard_stale()

    # ------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------
    def cleanup(self):
        """Cancel the scan timer, close the controller and stop all feeds."""
        self.scan_timer.stop()
        self.controller.close()
        for tile in self.tiles:
            try:
                tile.cleanup()
            except Exception:
                logging.exception("cleanup tile %d", tile.index)
