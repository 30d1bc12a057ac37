"""
Configuration management for the Discord GitHub Bot.

This module handles all configuration loading from environment variables,
.env files and command-line overrides, validation, and provides typed
configuration objects for use throughout the application.

Precedence, lowest first:
1. Defaults
2. `.env`, then `.env.{ENV}` (ENV defaults to "dev")
3. Process environment variables
4. Command-line flags (passed to `load_config` as overrides)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_github_bot.utils.exceptions import ConfigurationError


DEFAULT_ENVIRONMENT = "dev"


class DiscordConfig(BaseSettings):
    """Discord bot configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DISCORD_")

    token: str = Field(
        default="",
        description="Discord bot token from Developer Portal"
    )
    server_id: str = Field(
        default="",
        description="Guild ID the slash commands are registered in"
    )
    remove_commands: bool = Field(
        default=False,
        description="Remove registered slash commands on shutdown"
    )


class GitHubConfig(BaseSettings):
    """GitHub API configuration settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_")

    token: str = Field(
        default="",
        description="GitHub token passed through as a bearer token"
    )
    owner: Optional[str] = Field(
        default=None,
        description="Default repository owner (falls back to the first modal's target)"
    )
    repo: Optional[str] = Field(
        default=None,
        description="Default repository name (falls back to the first modal's target)"
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    timeout: int = Field(
        default=15,
        gt=0,
        description="Request timeout in seconds"
    )
    release_limit: int = Field(
        default=100,
        gt=0,
        le=100,
        description="Number of releases fetched for changelog autocomplete"
    )


class CacheConfig(BaseSettings):
    """TTLs for the in-process caches, in seconds."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    release_ttl: float = Field(default=3600, gt=0, description="Release list cache TTL")
    comparison_ttl: float = Field(default=3600, gt=0, description="Changelog comparison cache TTL")
    template_ttl: float = Field(default=600, gt=0, description="Issue template cache TTL")
    repository_ttl: float = Field(default=3600, gt=0, description="Repository lookup cache TTL")


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    format: str = Field(
        default="text",
        description="Log format: 'json' or 'text'"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in {"json", "text"}:
            raise ValueError("Log format must be 'json' or 'text'")
        return v


class AppConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    config_path: str = Field(
        default="",
        description="Location of the modal YAML configuration file"
    )
    faq_path: str = Field(
        default="faq.yaml",
        description="Location of the FAQ YAML file"
    )
    healthcheck_port: int = Field(
        default=8080,
        gt=0,
        lt=65536,
        description="Health check HTTP server port"
    )
    env: str = Field(
        default=DEFAULT_ENVIRONMENT,
        description="Deployment environment, selects the .env.{ENV} file"
    )

    # Sub-configurations
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def validate_required(self) -> None:
        """
        Check that required configuration values are present.

        Raises:
            ConfigurationError: If a required value is missing or the modal
                config path does not point to a file
        """
        required_fields = {
            "DISCORD_TOKEN": self.discord.token,
            "DISCORD_SERVER_ID": self.discord.server_id,
            "GITHUB_TOKEN": self.github.token,
            "CONFIG_PATH": self.config_path,
        }

        for env_var, value in required_fields.items():
            if not value:
                raise ConfigurationError(
                    f"{env_var} is required",
                    context={"env_var": env_var}
                )

        path = Path(self.config_path)
        if not path.exists():
            raise ConfigurationError(
                f"CONFIG_PATH file does not exist: {self.config_path}",
                context={"path": self.config_path}
            )
        if path.is_dir():
            raise ConfigurationError(
                f"CONFIG_PATH must be a file, not a directory: {self.config_path}",
                context={"path": self.config_path}
            )


# Flag name -> (section, attribute); section None means AppConfig itself
FLAG_TARGETS = {
    "server_id": ("discord", "server_id"),
    "discord_token": ("discord", "token"),
    "github_token": ("github", "token"),
    "remove_commands": ("discord", "remove_commands"),
    "config_path": (None, "config_path"),
    "faq_path": (None, "faq_path"),
    "healthcheck_port": (None, "healthcheck_port"),
}


def load_env_files(base_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Load `.env.{ENV}` and `.env` into the process environment.

    Existing environment variables are never overridden, and the
    environment-specific file is loaded first so it wins over `.env`.

    Returns:
        The environment-specific file if it was found, else None
    """
    from dotenv import load_dotenv

    base_dir = base_dir or Path(".")
    env = os.getenv("ENV") or DEFAULT_ENVIRONMENT

    env_file = base_dir / f".env.{env}"
    found = None
    if env_file.exists():
        load_dotenv(env_file, override=False)
        found = env_file

    default_file = base_dir / ".env"
    if default_file.exists():
        load_dotenv(default_file, override=False)

    return found


def apply_overrides(config: AppConfig, overrides: Dict[str, Any]) -> AppConfig:
    """
    Apply command-line overrides on top of a loaded configuration.

    Args:
        config: Configuration loaded from defaults and environment
        overrides: Flag values keyed by flag name; None values are ignored

    Returns:
        The same configuration object, updated in place
    """
    for name, value in overrides.items():
        if value is None or name not in FLAG_TARGETS:
            continue
        section, attribute = FLAG_TARGETS[name]
        target = config if section is None else getattr(config, section)
        setattr(target, attribute, value)
    return config


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    validate: bool = True,
) -> AppConfig:
    """
    Load and validate application configuration.

    Args:
        overrides: Optional command-line overrides (see FLAG_TARGETS)
        validate: Check required values after loading

    Returns:
        AppConfig: Validated application configuration

    Raises:
        ConfigurationError: If configuration is invalid or incomplete

    Example:
        ```python
        config = load_config({"config_path": "modals.yaml"})
        print(f"Health check on port {config.healthcheck_port}")
        ```
    """
    load_env_files()

    try:
        config = AppConfig()
    except ValueError as e:
        raise ConfigurationError(
            "Invalid configuration",
            original_error=e
        )

    apply_overrides(config, overrides or {})

    if validate:
        config.validate_required()

    return config
