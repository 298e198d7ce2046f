"""artframe configuration loader.

Priority (high → low):
  1. CLI flags              (handled at the call site, not in this module)
  2. Environment variables  (ARTFRAME_DB, ARTFRAME_PREFERENCES, ARTFRAME_LOG_LEVEL)
  3. Per-project artframe.yaml
  4. Global ~/.artframe/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".artframe"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "artframe.yaml"

# Known top-level sections; unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["storage", "logging"])

_LOG_LEVELS: frozenset[str] = frozenset(
    ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StorageCfg:
    """Where the database and preferences live (artframe.yaml: storage:)."""

    db_path: Path = field(default_factory=lambda: _GLOBAL_CONFIG_DIR / "artframe.db")
    preferences_path: Path = field(
        default_factory=lambda: _GLOBAL_CONFIG_DIR / "preferences.yaml"
    )


@dataclass
class LoggingCfg:
    """Log verbosity (artframe.yaml: logging:)."""

    level: str = "WARNING"


@dataclass
class ArtframeConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    storage: StorageCfg = field(default_factory=StorageCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}'; ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate_level(level: str, source: str) -> str:
    normalized = level.upper()
    if normalized not in _LOG_LEVELS:
        raise ConfigError(
            f"Invalid logging.level '{level}' in {source}.\n"
            f"  Use one of: {', '.join(sorted(_LOG_LEVELS))}"
        )
    return normalized


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _resolve_path(raw: Any, base_dir: Path) -> Path:
    path = Path(str(raw)).expanduser()
    return path if path.is_absolute() else base_dir / path


def _cfg_from_dict(data: dict[str, Any]) -> ArtframeConfig:
    """Build an *ArtframeConfig* from a merged raw YAML dict (paths already absolute)."""
    cfg = ArtframeConfig()

    if "storage" in data:
        s = data["storage"] or {}
        cfg.storage = StorageCfg(
            db_path=Path(s["db_path"])
            if s.get("db_path")
            else cfg.storage.db_path,
            preferences_path=Path(s["preferences_path"])
            if s.get("preferences_path")
            else cfg.storage.preferences_path,
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(
            level=_validate_level(str(lg.get("level", cfg.logging.level)), "config"),
        )

    return cfg


def _apply_env_overrides(cfg: ArtframeConfig) -> ArtframeConfig:
    """Apply ARTFRAME_* environment variable overrides (layer 2)."""
    if db := os.environ.get("ARTFRAME_DB"):
        cfg.storage.db_path = Path(db).expanduser()
    if prefs := os.environ.get("ARTFRAME_PREFERENCES"):
        cfg.storage.preferences_path = Path(prefs).expanduser()
    if level := os.environ.get("ARTFRAME_LOG_LEVEL"):
        cfg.logging.level = _validate_level(level, "ARTFRAME_LOG_LEVEL")
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ArtframeConfig:
    """Load and return a merged *ArtframeConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *artframe.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ArtframeConfig* with env var overrides applied.

    Raises:
        ConfigError: If a logging level is not a standard level name.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config (paths relative to ~/.artframe)
    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, _absolutize(raw_global, global_path.parent))

    # Layer 2: per-project config (paths relative to the project directory)
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, _absolutize(raw_project, search_dir))

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    logging.getLogger(__name__).debug("Loaded config: %s", cfg)
    return cfg


def _absolutize(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Resolve relative storage paths in one layer against that layer's directory."""
    storage = data.get("storage")
    if not isinstance(storage, dict):
        return data
    fixed = dict(storage)
    for key in ("db_path", "preferences_path"):
        if fixed.get(key):
            fixed[key] = str(_resolve_path(fixed[key], base_dir))
    return {**data, "storage": fixed}


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.artframe/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# artframe global configuration.\n"
            "# Relative paths are resolved against this directory.\n"
            "\n"
            "storage:\n"
            "  db_path: artframe.db\n"
            "  preferences_path: preferences.yaml\n"
            "\n"
            "logging:\n"
            "  level: WARNING\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
