"""
Shared utilities: logging, value coercion, label values, env helpers.
"""
from __future__ import annotations

import logging
import math
import os
from decimal import Decimal
from pathlib import Path
from typing import Any

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = LOG_DATE_FORMAT,
) -> None:
    """Configure root logger and optional file handler."""
    log_level = getattr(logging, level.upper(), logging.INFO) if isinstance(level, str) else level
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(
        level=log_level,
        format=format_string,
        datefmt=date_format,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# -----------------------------------------------------------------------------
# Value coercion
# -----------------------------------------------------------------------------

NAN = float("nan")


def to_number(value: Any) -> float:
    """Convert a result cell to float. Returns NaN for anything non-numeric, never raises."""
    if value is None:
        return NAN
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float, Decimal)):
        try:
            return float(value)
        except (OverflowError, ValueError):
            return NAN
    if isinstance(value, (bytes, bytearray)):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError:
            return NAN
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return NAN
        try:
            return float(text)
        except ValueError:
            return NAN
    return NAN


def is_number(value: float | None) -> bool:
    return value is not None and not math.isnan(value)


def safe_ratio(numerator: float, denominator: float, scale: float = 100.0) -> float:
    """Return (numerator/denominator)*scale, or NaN if either side is NaN or denominator is 0."""
    if not is_number(numerator) or not is_number(denominator) or denominator == 0:
        return NAN
    return (numerator / denominator) * scale


def label_value(value: Any) -> str:
    """Render a cell as a label value. NULL becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


# -----------------------------------------------------------------------------
# Config / env helpers
# -----------------------------------------------------------------------------

def env_bool(key: str, default: bool = False) -> bool:
    v = os.environ.get(key, "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def env_int(key: str, default: int = 0) -> int:
    try:
        return int(os.environ.get(key, default))
    except ValueError:
        return default


def env_float(key: str, default: float = 0.0) -> float:
    try:
        return float(os.environ.get(key, default))
    except ValueError:
        return default


def env_str(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()
