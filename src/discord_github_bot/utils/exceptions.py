"""
Custom exceptions for the Discord GitHub Bot.

This module defines a hierarchy of custom exceptions that provide clear
error handling and debugging information throughout the application.
All exceptions inherit from a base DiscordGitHubBotError class for easy
catching and handling.
"""

from typing import Optional, Any, Dict


class DiscordGitHubBotError(Exception):
    """
    Base exception class for all Discord GitHub Bot errors.

    This is the root exception that all other custom exceptions inherit from.
    It provides a consistent interface and allows catching all bot-related
    errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Additional context information about the error
        original_error: The original exception that caused this error (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            context: Additional context information
            original_error: The original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        error_str = self.message
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            error_str += f" (Context: {context_str})"
        if self.original_error:
            error_str += f" (Caused by: {self.original_error})"
        return error_str


class ConfigurationError(DiscordGitHubBotError):
    """
    Raised when there's an error in configuration.

    This exception is raised when:
    - Required environment variables are missing
    - Configuration values are invalid
    - Modal or FAQ files cannot be loaded

    Example:
        ```python
        if not discord_token:
            raise ConfigurationError(
                "DISCORD_TOKEN is required",
                context={"env_var": "DISCORD_TOKEN"}
            )
        ```
    """
    pass


class ModalNotConfiguredError(ConfigurationError):
    """
    Raised when no modal is configured for a (command, channel) pair.

    This is an expected condition: the command was used in a channel the
    operators did not map, so handlers answer with a friendly message.
    """
    pass


class TemplateFetchError(DiscordGitHubBotError):
    """
    Raised when a GitHub issue template cannot be fetched or parsed.

    Example:
        ```python
        raise TemplateFetchError(
            "Failed to fetch template",
            context={"url": template_url.raw_url, "status": 404},
        )
        ```
    """
    pass


class GitHubAPIError(DiscordGitHubBotError):
    """
    Raised when there's an error communicating with the GitHub API.

    This exception is raised when:
    - GitHub API is unreachable
    - API returns an error response
    - Request times out
    - Authentication fails

    Callers treat it as opaque: only its presence matters, not the status.
    """
    pass


class DiscordAPIError(DiscordGitHubBotError):
    """
    Raised when there's an error with Discord API operations.

    This exception is raised when:
    - Interaction responses fail
    - Command registration fails
    - Bot permissions are insufficient
    """
    pass
