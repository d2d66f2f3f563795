# ============================================================
# TABLE OF CONTENTS
# ------------------------------------------------------------
# 1. CONFIG + LOGGING
# 2. CLEANUP
# 3. MAIN ENTRYPOINT
# ============================================================

# ------------------------------------------------------------
# Standard library imports
# ------------------------------------------------------------
import atexit
import logging
import signal
import sys

# ------------------------------------------------------------
# Third-party imports
# ------------------------------------------------------------
from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtCore import QTimer

# ------------------------------------------------------------
# Local imports
# ------------------------------------------------------------
from core import config
from core.resolutions import ConfigurationError
from ui.widgets import CameraGridWidget
from utils.helpers import make_url_builder


# ============================================================
# CONFIG + LOGGING
# ------------------------------------------------------------
def load_settings():
    """Read config.ini (or CAMERA_GRID_CONFIG) and set up logging."""
    config.apply_config(config.load_config())
    config.configure_logging()


def feed_urls_from_args(argv):
    """Feed base URLs from the command line, falling back to config."""
    urls = [arg for arg in argv[1:] if not arg.startswith("-")]
    return urls or list(config.FEED_URLS)


# ============================================================
# CLEANUP
# ------------------------------------------------------------
def safe_cleanup(grid):
    """Stop the scan timer and all feed threads."""
    if grid is None:
        return
    logging.info("Cleaning up camera grid")
    try:
        grid.cleanup()
    except Exception:
        logging.exception("cleanup")


# ============================================================
# MAIN ENTRYPOINT
# ------------------------------------------------------------
def main():
    """Create the grid window and start the event loop."""
    try:
        load_settings()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT)
        logging.error("Invalid configuration: %s", exc)
        return 2

    urls = feed_urls_from_args(sys.argv)
    if not urls:
        logging.error("No camera feeds configured. Pass base URLs or set [feeds] urls.")
        return 2

    logging.info("Starting camera grid with %d feed(s)", len(urls))
    app = QtWidgets.QApplication(sys.argv)

    try:
        grid = CameraGridWidget(
            urls,
            resolutions=config.RESOLUTIONS,
            url_builder=make_url_builder(config.URL_TEMPLATE),
            scan_interval_sec=config.SCAN_INTERVAL_SEC,
            ui_fps=config.UI_FPS,
        )
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    def on_sigint(sig, frame):
        safe_cleanup(grid)
        sys.exit(0)

    signal.signal(signal.SIGINT, on_sigint)
    atexit.register(lambda: safe_cleanup(grid))

    # Allow Python to handle SIGINT properly in Qt event loop
    sigint_timer = QTimer()
    sigint_timer.timeout.connect(lambda: None)
    sigint_timer.start(500)

    mw = QtWidgets.QMainWindow()
    mw.setWindowFlags(QtCore.Qt.WindowType.FramelessWindowHint)
    mw.setStyleSheet("QWidget { background: black; }")
    mw.setCentralWidget(grid)
    mw.showFullScreen()

    def force_fullscreen():
        mw.showFullScreen()
        mw.raise_()
        mw.activateWindow()
        grid.setFocus()

    QtCore.QTimer.singleShot(50, force_fullscreen)
    QtCore.QTimer.singleShot(300, force_fullscreen)

    app.aboutToQuit.connect(lambda: safe_cleanup(grid))
    QtGui.QShortcut(
        QtGui.QKeySequence("q"), mw,
        lambda: (safe_cleanup(grid), app.quit())
    )

    logging.info(
        "Keys: 1-0 select feed, s scan, space pause scan, arrows step, Esc back to grid, q quit."
    )
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
