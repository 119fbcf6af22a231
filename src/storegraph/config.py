"""
Configuration loading for storegraph services.

Values come from ``storegraph.yaml`` (optional) and are overridden by
environment variables.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

ENV_PREFIX = "STOREGRAPH_"

# Unprefixed variables shared with other tooling
ENV_ALIASES = {
    "database_url": "DATABASE_URL",
    "redis_url": "REDIS_URL",
    "sql_echo": "SQL_ECHO",
}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_optional_float(value: str) -> Optional[float]:
    return None if value.strip().lower() in ("", "none", "null") else float(value)


@dataclass
class StoregraphConfig:
    """Main storegraph configuration."""
    database_url: str = "sqlite+aiosqlite:///storegraph.db"
    redis_url: Optional[str] = None
    redis_prefix: str = "storegraph"
    strict_references: bool = False
    channel_capacity: int = 100
    publish_timeout: Optional[float] = 5.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    sql_echo: bool = False

    _PARSERS = {
        "strict_references": _parse_bool,
        "sql_echo": _parse_bool,
        "channel_capacity": int,
        "port": int,
        "publish_timeout": _parse_optional_float,
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoregraphConfig":
        """Create config from dictionary. Unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_env(cls, base: Optional["StoregraphConfig"] = None) -> "StoregraphConfig":
        """Apply environment overrides on top of ``base`` (or defaults)."""
        values = asdict(base or cls())
        for name in values:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is None and name in ENV_ALIASES:
                raw = os.getenv(ENV_ALIASES[name])
            if raw is None:
                continue
            parser = cls._PARSERS.get(name)
            values[name] = parser(raw) if parser else raw
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return asdict(self)

    def save(self, path: Path | str = "storegraph.yaml") -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str = "storegraph.yaml") -> StoregraphConfig:
    """Load configuration from YAML file (if present), then apply environment overrides."""
    path = Path(path)
    base = None
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
        base = StoregraphConfig.from_dict(data)
    return StoregraphConfig.from_env(base)
