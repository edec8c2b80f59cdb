"""Load and merge configuration from .enginetags.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from enginetags.config.schema import (
    CacheConfig,
    EngineTagsConfig,
    OutputConfig,
    PoolConfig,
    RulesConfig,
    ScanConfig,
    SessionConfig,
)

CONFIG_FILENAME = ".enginetags.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: EngineTagsConfig) -> None:
    """Apply ENGINETAGS_* environment variable overrides."""
    if val := os.environ.get("ENGINETAGS_PLATFORM"):
        cfg.scan.platform = val.strip().lower()
    if val := os.environ.get("ENGINETAGS_RULES"):
        cfg.rules.path = val
    if val := os.environ.get("ENGINETAGS_OUTPUT"):
        cfg.output.path = val
    if val := os.environ.get("ENGINETAGS_FORMAT"):
        if val in ("terminal", "json"):
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("ENGINETAGS_REFRESH_INTERVAL"):
        try:
            cfg.pool.refresh_interval = float(val)
        except ValueError:
            pass


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    try:
        return cls(**filtered)
    except TypeError as exc:
        raise ConfigError(f"Invalid [{section}] section: {exc}") from exc


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> EngineTagsConfig:
    """Load, validate, and return an EngineTagsConfig."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = EngineTagsConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = EngineTagsConfig(
            version=raw.get("version", "1.0"),
            scan=_build_section(raw, ScanConfig, "scan"),
            rules=_build_section(raw, RulesConfig, "rules"),
            pool=_build_section(raw, PoolConfig, "pool"),
            session=_build_section(raw, SessionConfig, "session"),
            cache=_build_section(raw, CacheConfig, "cache"),
            output=_build_section(raw, OutputConfig, "output"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg


def _validate(cfg: EngineTagsConfig) -> None:
    if cfg.output.format not in ("terminal", "json"):
        raise ConfigError(f"Invalid output format: {cfg.output.format}")
    if cfg.pool.refresh_interval < 0 or cfg.pool.rate_limit_backoff < 0:
        raise ConfigError("Pool intervals must not be negative")
    if cfg.session.max_reconnect_attempts < 1:
        raise ConfigError("session.max_reconnect_attempts must be at least 1")
