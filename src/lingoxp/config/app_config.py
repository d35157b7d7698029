"""Application configuration loader.

Loads configuration from data/config/app_config_v1.yaml (or the file named
by LINGOXP_CONFIG) and falls back to built-in defaults.

Usage:
    from lingoxp.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")
CONFIG_ENV = "LINGOXP_CONFIG"
DB_PATH_ENV = "LINGOXP_DB_PATH"


@dataclass
class DatabaseConfig:
    """SQLite settings."""

    path: Path = Path("db/lingoxp.db")


@dataclass
class AuthConfig:
    """Bearer tokens accepted on private routes."""

    tokens: list[str] = field(default_factory=list)
    token_env: str | None = "LINGOXP_API_TOKEN"

    def get_tokens(self) -> list[str]:
        """Configured tokens plus the one from the environment, if set."""
        tokens = [t for t in self.tokens if t]
        if self.token_env and os.environ.get(self.token_env):
            tokens.append(os.environ[self.token_env])
        return tokens


@dataclass
class XPConfig:
    """Limits for XP awards made through the API."""

    max_award: int = 1000


@dataclass
class LeaderboardConfig:
    default_limit: int = 10
    max_limit: int = 100


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    xp: XPConfig = field(default_factory=XPConfig)
    leaderboard: LeaderboardConfig = field(default_factory=LeaderboardConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/lingoxp.db"},
        "auth": {"tokens": [], "token_env": "LINGOXP_API_TOKEN"},
        "xp": {"max_award": 1000},
        "leaderboard": {"default_limit": 10, "max_limit": 100},
        "server": {"host": "127.0.0.1", "port": 8000},
    }


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge one level of sections over the defaults."""
    result = {k: dict(v) for k, v in defaults.items()}
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and section in result:
            result[section].update(values)
        else:
            result[section] = values
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    db = data.get("database", {})
    auth = data.get("auth", {})
    xp = data.get("xp", {})
    board = data.get("leaderboard", {})
    server = data.get("server", {})

    db_path = os.environ.get(DB_PATH_ENV) or db.get("path", "db/lingoxp.db")

    return AppConfig(
        database=DatabaseConfig(path=Path(db_path)),
        auth=AuthConfig(
            tokens=[str(t) for t in auth.get("tokens") or []],
            token_env=auth.get("token_env"),
        ),
        xp=XPConfig(max_award=int(xp.get("max_award", 1000))),
        leaderboard=LeaderboardConfig(
            default_limit=int(board.get("default_limit", 10)),
            max_limit=int(board.get("max_limit", 100)),
        ),
        server=ServerConfig(
            host=server.get("host", "127.0.0.1"),
            port=int(server.get("port", 8000)),
        ),
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_file = Path(os.environ.get(CONFIG_ENV) or CONFIG_FILE)

    if config_file.exists():
        logger.debug("loading_app_config", source=str(config_file))
        loaded = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        data = _merge(_get_defaults(), loaded)
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
