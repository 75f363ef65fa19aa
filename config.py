"""
Central configuration for the SQL Server exporter.
Supports defaults, optional config file (YAML), and environment overrides.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from utils import env_float, env_int, env_str, get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULTS: dict[str, Any] = {
    "mssql": {
        "server": "localhost",
        "port": 1433,
        "user": "sa",
        "password": "",
        "database": "master",
        "login_timeout_sec": 15,
        "query_timeout_sec": 10,
    },
    "exporter": {
        "host": "0.0.0.0",
        "port": 4000,
        "scrape_deadline_sec": 30.0,
        "busy_policy": "wait",
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# -----------------------------------------------------------------------------
# Config file loading (optional YAML)
# -----------------------------------------------------------------------------

_config_overrides: dict[str, Any] = {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config_file(path: str | Path | None = None) -> bool:
    """Load optional YAML config. Returns True if loaded. Environment still wins."""
    if path is None:
        for p in (
            Path(os.getcwd()) / "config.yaml",
            Path(os.getcwd()) / "config.yml",
            Path.home() / ".mssql_exporter" / "config.yaml",
        ):
            if p.exists():
                path = p
                break
    if path is None:
        return False
    path = Path(path).expanduser()
    if not path.exists():
        return False
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return False
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not a mapping", path)
        return False
    global _config_overrides
    _config_overrides = _deep_merge(_config_overrides, data)
    _apply_env()
    logger.info("Loaded config file %s", path)
    return True


def get(key_path: str, default: Any = None) -> Any:
    """Get config value by dot path, e.g. 'mssql.server'."""
    merged: Any = _deep_merge(DEFAULTS, _config_overrides)
    for k in key_path.split("."):
        if isinstance(merged, dict) and k in merged:
            merged = merged[k]
        else:
            return default
    return merged


def reset() -> None:
    """Drop file overrides and re-read the environment."""
    _config_overrides.clear()
    _apply_env()


# -----------------------------------------------------------------------------
# Environment overrides (take precedence over file)
# -----------------------------------------------------------------------------

def _env_overrides() -> dict[str, Any]:
    return {
        "mssql.server": env_str("MSSQL_SERVER"),
        "mssql.port": env_int("MSSQL_PORT", 0),
        "mssql.user": env_str("MSSQL_USERNAME"),
        "mssql.password": os.environ.get("MSSQL_PASSWORD", ""),
        "mssql.database": env_str("MSSQL_DATABASE"),
        "mssql.login_timeout_sec": env_int("MSSQL_LOGIN_TIMEOUT", 0),
        "mssql.query_timeout_sec": env_int("MSSQL_QUERY_TIMEOUT", 0),
        "exporter.host": env_str("EXPORTER_HOST"),
        "exporter.port": env_int("EXPORTER_PORT", 0),
        "exporter.scrape_deadline_sec": env_float("EXPORTER_SCRAPE_DEADLINE", 0),
        "exporter.busy_policy": env_str("EXPORTER_BUSY_POLICY").lower(),
        "logging.level": env_str("EXPORTER_LOG_LEVEL"),
        "logging.file": env_str("EXPORTER_LOG_FILE"),
    }


def _apply_env() -> None:
    for path, value in _env_overrides().items():
        if value in (0, "", None):
            continue
        keys = path.split(".")
        d = _config_overrides
        for k in keys[:-1]:
            if not isinstance(d.get(k), dict):
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value


# Apply env on import
_apply_env()


# -----------------------------------------------------------------------------
# Convenience accessors
# -----------------------------------------------------------------------------

def mssql_settings() -> dict[str, Any]:
    """Keyword arguments for executor.MssqlExecutor."""
    return {
        "server": str(get("mssql.server")),
        "port": int(get("mssql.port")),
        "user": str(get("mssql.user")),
        "password": str(get("mssql.password") or ""),
        "database": str(get("mssql.database")),
        "login_timeout": int(get("mssql.login_timeout_sec")),
        "query_timeout": int(get("mssql.query_timeout_sec")),
    }


def exporter_settings() -> dict[str, Any]:
    return {
        "host": str(get("exporter.host")),
        "port": int(get("exporter.port")),
        "scrape_deadline_sec": float(get("exporter.scrape_deadline_sec") or 0),
        "busy_policy": str(get("exporter.busy_policy")),
    }


def logging_settings() -> dict[str, Any]:
    return {"level": str(get("logging.level")), "log_file": get("logging.file") or None}
