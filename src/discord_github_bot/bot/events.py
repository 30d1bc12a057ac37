"""
Discord event handlers for the GitHub bot.

Error hooks for slash commands and gateway events, plus guild
membership logging.
"""

import sys
from typing import Any

import discord
from discord import app_commands

from discord_github_bot.utils.logging import get_logger, log_error, log_discord_event


GENERIC_ERROR = "❌ An unexpected error occurred while processing your command."


async def setup_events(bot) -> None:
    """
    Set up event handlers for the bot.

    Args:
        bot: The Discord bot instance
    """
    logger = get_logger(__name__)
    logger.debug("Setting up event handlers")

    @bot.tree.error
    async def on_app_command_error(
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """
        Handle slash command errors.

        Args:
            interaction: The interaction that caused the error
            error: The error that occurred
        """
        if isinstance(error, app_commands.TransformerError):
            message = f"❌ Invalid argument provided: {error}"
        else:
            log_error(error, {
                "command": interaction.command.name if interaction.command else "unknown",
                "user_id": interaction.user.id,
                "channel_id": interaction.channel_id,
                "guild_id": interaction.guild_id,
            })
            message = GENERIC_ERROR

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException as e:
            log_error(e, {"operation": "send_error_response"})

    @bot.event
    async def on_error(event: str, *args: Any, **kwargs: Any) -> None:
        """
        Handle general bot errors.

        Args:
            event: The event that caused the error
            *args: Event arguments
            **kwargs: Event keyword arguments
        """
        exc_value = sys.exc_info()[1]

        if exc_value:
            log_error(exc_value, {
                "event": event,
                "args": str(args)[:500],
                "kwargs": str(kwargs)[:500],
            })
        else:
            logger.error("Unknown error in event", event=event)

    @bot.event
    async def on_guild_join(guild: discord.Guild) -> None:
        log_discord_event("guild_join", guild_id=guild.id, guild_name=guild.name)

    @bot.event
    async def on_guild_remove(guild: discord.Guild) -> None:
        log_discord_event("guild_remove", guild_id=guild.id, guild_name=guild.name)

    logger.debug("Event handlers setup complete")
