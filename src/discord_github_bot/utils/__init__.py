"""Utility modules for the Discord GitHub Bot."""

from discord_github_bot.utils.exceptions import (
    DiscordGitHubBotError,
    ConfigurationError,
    ModalNotConfiguredError,
    TemplateFetchError,
    GitHubAPIError,
    DiscordAPIError,
)
from discord_github_bot.utils.logging import setup_logging

__all__ = [
    "DiscordGitHubBotError",
    "ConfigurationError",
    "ModalNotConfiguredError",
    "TemplateFetchError",
    "GitHubAPIError",
    "DiscordAPIError",
    "setup_logging",
]
