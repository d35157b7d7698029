"""Configuration package for lingoxp."""

from lingoxp.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LeaderboardConfig,
    ServerConfig,
    XPConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LeaderboardConfig",
    "ServerConfig",
    "XPConfig",
    "clear_config_cache",
    "load_app_config",
]
