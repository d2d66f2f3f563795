"""
Configuration for Camera Grid.

Settings live in an INI file (config.ini next to the project, or the path in
CAMERA_GRID_CONFIG) and are applied to module-level values.
"""

from __future__ import annotations

import configparser
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.resolutions import DEFAULT_RESOLUTIONS, ConfigurationError, Resolution, parse_resolutions
from utils.helpers import DEFAULT_URL_TEMPLATE

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = str(PROJECT_ROOT / "config.ini")
CONFIG_ENV_VAR = "CAMERA_GRID_CONFIG"

# ============================================================
# DEBUG PRINTS (disabled by default)
# ------------------------------------------------------------
DEBUG_PRINTS = False


def dprint(*args, **kwargs) -> None:
    """Lightweight debug print wrapper."""
    if DEBUG_PRINTS:
        print(*args, **kwargs)


# ============================================================
# DEFAULTS
# ------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FILE = "./logs/camera_grid.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LOG_TO_STDOUT = True
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

SCAN_INTERVAL_SEC = 3.0
UI_FPS = 15
RESOLUTIONS: list[Resolution] = list(DEFAULT_RESOLUTIONS)
URL_TEMPLATE = DEFAULT_URL_TEMPLATE
FEED_URLS: list[str] = []


# ============================================================
# VALUE PARSERS
# ------------------------------------------------------------
def _as_bool(value: str, default: bool) -> bool:
    """Parse common truthy/falsy strings, falling back to default."""
    val = (value or "").strip().lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _as_int(
    value: str,
    default: int,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    """Parse an int and clamp it to the optional bounds."""
    try:
        result = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    if min_value is not None:
        result = max(min_value, result)
    if max_value is not None:
        result = min(max_value, result)
    return result


def _as_float(
    value: str,
    default: float,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> float:
    """Parse a float and clamp it to the optional bounds."""
    try:
        result = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if min_value is not None:
        result = max(min_value, result)
    if max_value is not None:
        result = min(max_value, result)
    return result


def _as_list(value: str) -> list[str]:
    """Split a newline or comma separated value into stripped items."""
    items = []
    for line in (value or "").replace(",", "\n").splitlines():
        line = line.strip()
        if line:
            items.append(line)
    return items


# ============================================================
# LOADING
# ------------------------------------------------------------
def load_config(path: Optional[str] = None) -> configparser.ConfigParser:
    """Read the INI config. A missing file yields an empty parser."""
    parser = configparser.ConfigParser(interpolation=None)
    config_path = path or os.environ.get(CONFIG_ENV_VAR) or CONFIG_PATH
    if os.path.exists(config_path):
        parser.read(config_path)
        dprint(f"Loaded config from {config_path}")
    else:
        logging.debug("Config %s not found, using defaults", config_path)
    return parser


def apply_config(parser: configparser.ConfigParser) -> None:
    """Apply parsed settings to module-level values."""
    global LOG_LEVEL, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT, LOG_TO_STDOUT
    global SCAN_INTERVAL_SEC, UI_FPS, RESOLUTIONS, URL_TEMPLATE, FEED_URLS

    if parser.has_section("logging"):
        section = parser["logging"]
        LOG_LEVEL = section.get("level", LOG_LEVEL).strip().upper()
        LOG_FILE = section.get("file", LOG_FILE).strip()
        LOG_MAX_BYTES = _as_int(section.get("max_bytes", ""), LOG_MAX_BYTES, min_value=1024)
        LOG_BACKUP_COUNT = _as_int(
            section.get("backup_count", ""), LOG_BACKUP_COUNT, min_value=0, max_value=50
        )
        LOG_TO_STDOUT = _as_bool(section.get("stdout", ""), LOG_TO_STDOUT)

    if parser.has_section("grid"):
        section = parser["grid"]
        SCAN_INTERVAL_SEC = _as_float(
            section.get("scan_interval_sec", ""), SCAN_INTERVAL_SEC,
            min_value=0.5, max_value=600.0,
        )
        UI_FPS = _as_int(section.get("ui_fps", ""), UI_FPS, min_value=1, max_value=60)
        ladder = section.get("resolutions", "").strip()
        if ladder:
            resolutions = parse_resolutions(ladder)
            if not resolutions:
                raise ConfigurationError("[grid] resolutions is empty")
            RESOLUTIONS = resolutions
        template = section.get("url_template", "").strip()
        if template:
            URL_TEMPLATE = template

    if parser.has_section("feeds"):
        FEED_URLS = _as_list(parser["feeds"].get("urls", ""))


# ============================================================
# LOGGING
# ------------------------------------------------------------
def configure_logging() -> None:
    """Set up rotating file logging plus optional stdout."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    if LOG_FILE:
        try:
            log_dir = os.path.dirname(LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError:
            # Read-only kiosk images still get stdout logging.
            print(f"Cannot open log file {LOG_FILE}", file=sys.stderr)

    if LOG_TO_STDOUT or not root.handlers:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)
