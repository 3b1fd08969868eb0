"""Load Mission Control configuration from config.yaml."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("mission_control")

REPO_DIR = Path(__file__).resolve().parent.parent.parent
_DEFAULT_CONFIG_PATH = REPO_DIR / "config" / "config.yaml"

DEFAULTS: dict[str, Any] = {
    "data_dir": "~/.openclaw/workspace/control-center/data",
    "workspace_dir": "~/.openclaw/workspace",
    "overview_file": str(REPO_DIR / "config" / "overview.yaml"),
    "log_dir": str(REPO_DIR / "logs"),
    "log_level": "INFO",
    "activities": {
        "max_entries": 10_000,
    },
    "dashboard": {
        "host": "127.0.0.1",
        "port": 3000,
        "poll_interval_seconds": 30,
    },
}

_PATH_KEYS = ("data_dir", "workspace_dir", "overview_file", "log_dir")


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file, with env-var overrides.

    Values from the file are merged over ``DEFAULTS``; a missing file
    yields the defaults.

    Environment variable overrides (if set):
        MISSION_CONTROL_DATA_DIR       -> data_dir
        MISSION_CONTROL_WORKSPACE_DIR  -> workspace_dir
        MISSION_CONTROL_OVERVIEW_FILE  -> overview_file
        MISSION_CONTROL_LOG_DIR        -> log_dir
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
    cfg = copy.deepcopy(DEFAULTS)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        _merge(cfg, loaded)
    else:
        logger.debug("Config file not found at %s, using defaults", path)

    _env_override(cfg, "MISSION_CONTROL_DATA_DIR", "data_dir")
    _env_override(cfg, "MISSION_CONTROL_WORKSPACE_DIR", "workspace_dir")
    _env_override(cfg, "MISSION_CONTROL_OVERVIEW_FILE", "overview_file")
    _env_override(cfg, "MISSION_CONTROL_LOG_DIR", "log_dir")

    # relative paths are anchored at the repo root
    for key in _PATH_KEYS:
        p = Path(os.path.expanduser(str(cfg[key])))
        cfg[key] = str(p if p.is_absolute() else REPO_DIR / p)

    _validate(cfg)
    return cfg


def _merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively merge *override* into *base* in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


def _env_override(cfg: dict, env_key: str, *keys: str) -> None:
    """Override a nested config value from an environment variable."""
    val = os.environ.get(env_key)
    if val is None:
        return
    target = cfg
    for k in keys[:-1]:
        target = target.setdefault(k, {})
    target[keys[-1]] = val


def _validate(cfg: dict[str, Any]) -> None:
    """Warn about paths that will make parts of the dashboard come up empty."""
    workspace = Path(cfg["workspace_dir"])
    if not workspace.is_dir():
        logger.warning("Workspace dir not found at %s, document search will return nothing", workspace)

    overview = Path(cfg["overview_file"])
    if not overview.is_file():
        logger.warning("Overview file not found at %s, overview tab will be empty", overview)

    max_entries = cfg["activities"]["max_entries"]
    if not isinstance(max_entries, int) or max_entries <= 0:
        raise ValueError(f"activities.max_entries must be a positive integer, got {max_entries!r}")


def data_path(cfg: dict[str, Any], filename: str) -> Path:
    """Return the path of a JSON data file under ``data_dir``."""
    return Path(cfg["data_dir"]) / filename


def setup_logging(cfg: dict[str, Any]) -> None:
    """Configure root logging: stderr + rotating file."""
    log_dir = Path(cfg["log_dir"])
    log_dir.mkdir(parents=True, exist_ok=True)

    from logging.handlers import RotatingFileHandler

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    root = logging.getLogger("mission_control")
    root.setLevel(getattr(logging, str(cfg.get("log_level", "INFO")).upper()))

    # stderr
    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    root.addHandler(sh)

    # rotating file
    fh = RotatingFileHandler(log_dir / "mission-control.log", maxBytes=5_000_000, backupCount=3)
    fh.setFormatter(fmt)
    root.addHandler(fh)
