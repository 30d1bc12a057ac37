"""
Discord slash commands for the GitHub bot.

The commands are registered here so Discord knows their names, options
and autocomplete hooks. Their behaviour lives in `bot/handlers.py`: each
callback hands the interaction to the bot's router.
"""

from typing import List, Optional

import discord
from discord.ext import commands
from discord import app_commands

from discord_github_bot.utils.logging import get_logger, log_function_call


class GitHubCommands(commands.Cog):
    """Issue reporting, FAQ and repository commands."""

    def __init__(self, bot) -> None:
        self.bot = bot
        self.logger = get_logger(__name__)

    @app_commands.command(name="tapsign", description="How to get help or make a suggestion")
    async def tapsign(self, interaction: discord.Interaction) -> None:
        log_function_call("tapsign_command", user_id=interaction.user.id)
        await self.bot.route(interaction)

    @app_commands.command(name="faq", description="Frequently Asked Questions")
    @app_commands.describe(topic="The FAQ topic to look up")
    async def faq(self, interaction: discord.Interaction, topic: str) -> None:
        log_function_call("faq_command", user_id=interaction.user.id, topic=topic)
        await self.bot.route(interaction)

    @faq.autocomplete("topic")
    async def faq_topic_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        # The router answers the interaction itself.
        await self.bot.route(interaction)
        return []

    @app_commands.command(name="bug", description="Report a bug with the app")
    async def bug(self, interaction: discord.Interaction) -> None:
        log_function_call("bug_command", user_id=interaction.user.id, channel_id=interaction.channel_id)
        await self.bot.route(interaction)

    @app_commands.command(name="feature", description="Request a new feature")
    async def feature(self, interaction: discord.Interaction) -> None:
        log_function_call("feature_command", user_id=interaction.user.id, channel_id=interaction.channel_id)
        await self.bot.route(interaction)

    @app_commands.command(name="changelog", description="View changes between two versions")
    @app_commands.describe(base="The older version", head="The newer version")
    async def changelog(self, interaction: discord.Interaction, base: str, head: str) -> None:
        log_function_call("changelog_command", user_id=interaction.user.id, base=base, head=head)
        await self.bot.route(interaction)

    @changelog.autocomplete("base")
    @changelog.autocomplete("head")
    async def changelog_version_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        await self.bot.route(interaction)
        return []

    @app_commands.command(name="repo", description="Get the GitHub URL for a repository")
    @app_commands.describe(name="Repository name (defaults to the main repository)")
    async def repo(self, interaction: discord.Interaction, name: Optional[str] = None) -> None:
        log_function_call("repo_command", user_id=interaction.user.id, name=name)
        await self.bot.route(interaction)


async def setup_commands(bot) -> None:
    """
    Set up all bot commands.

    Args:
        bot: The Discord bot instance
    """
    logger = get_logger(__name__)
    logger.debug("Setting up bot commands")

    await bot.add_cog(GitHubCommands(bot))

    all_commands = bot.tree.get_commands()
    logger.info(f"Total commands registered: {len(all_commands)}")
    for cmd in all_commands:
        logger.info(f"Registered command: {cmd.name} - {cmd.description}")

    logger.info("Bot commands setup complete")
