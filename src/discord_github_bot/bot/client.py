"""
Discord bot client implementation.

This module contains the main Discord bot client. It owns every shared
component (GitHub client, modal session store, caches, modal registry)
and hands interactions to the router.
"""

from pathlib import Path
from typing import Optional, TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from discord_github_bot.api.server import HealthCheckServer

from discord_github_bot.bot.handlers import InteractionHandlers
from discord_github_bot.bot.responder import DiscordResponder, event_from_interaction
from discord_github_bot.bot.router import InteractionRouter
from discord_github_bot.cache import KeyedTTLCache, TTLCache
from discord_github_bot.config import AppConfig
from discord_github_bot.faq import FAQCatalog, load_faq
from discord_github_bot.github.client import GitHubAPIClient
from discord_github_bot.modals.registry import ModalRegistry
from discord_github_bot.modals.session_store import ModalSessionStore
from discord_github_bot.utils.exceptions import ConfigurationError
from discord_github_bot.utils.logging import (
    get_logger,
    log_discord_event,
    log_error,
    log_operation_timing,
    generate_correlation_id,
)


class GitHubIssueBot(commands.Bot):
    """
    Discord bot that files GitHub issues and answers project questions.

    Slash commands reach the router through the command tree (see
    `bot/commands.py`). Form submissions and button clicks have no tree
    entry and are routed from `on_interaction`.

    Attributes:
        config: Application configuration
        github: GitHub API client
        store: In-progress multi-part form sessions
        registry: Modal configuration
        router: Interaction router
    """

    def __init__(self, config: AppConfig) -> None:
        """
        Initialize the bot.

        Args:
            config: Application configuration containing all settings
        """
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.config = config
        self.logger = get_logger(__name__)

        # These will be initialized in setup()
        self.github: Optional[GitHubAPIClient] = None
        self.store: Optional[ModalSessionStore] = None
        self.registry: Optional[ModalRegistry] = None
        self.faq: Optional[FAQCatalog] = None
        self.handlers: Optional[InteractionHandlers] = None
        self.router: Optional[InteractionRouter] = None
        self.health_server: Optional["HealthCheckServer"] = None

        self._setup_complete = False

    async def setup(self) -> None:
        """
        Set up all bot components.

        Must be called before starting the bot.

        Raises:
            ConfigurationError: If the modal configuration cannot be loaded
        """
        if self._setup_complete:
            return

        self.logger.info("Setting up Discord GitHub Bot components")

        try:
            cache_config = self.config.cache

            self.github = GitHubAPIClient(
                self.config.github,
                repository_ttl=cache_config.repository_ttl,
            )
            self.store = ModalSessionStore()
            self.registry = ModalRegistry.from_file(
                Path(self.config.config_path),
                fetch_text=self.github.fetch_text,
                template_ttl=cache_config.template_ttl,
                default_owner=self.config.github.owner,
                default_repo=self.config.github.repo,
            )
            self.faq = self._load_faq()

            self.handlers = InteractionHandlers(
                store=self.store,
                registry=self.registry,
                github=self.github,
                releases=TTLCache(cache_config.release_ttl, name="releases"),
                comparisons=KeyedTTLCache(cache_config.comparison_ttl, name="comparisons"),
                faq=self.faq,
                release_limit=self.config.github.release_limit,
            )
            self.router = InteractionRouter(self.store, self.handlers)

            await self._load_commands()
            await self._load_events()

            from discord_github_bot.api.server import HealthCheckServer
            self.health_server = HealthCheckServer(self, port=self.config.healthcheck_port)
            await self.health_server.start()

            self._setup_complete = True
            self.logger.info(
                "Bot setup completed successfully",
                modal_count=len(self.registry.modals),
                faq_loaded=self.faq is not None,
            )

        except Exception as e:
            self.logger.error("Failed to set up bot components", error=str(e))
            raise

    def _load_faq(self) -> Optional[FAQCatalog]:
        path = Path(self.config.faq_path)
        if not path.exists():
            self.logger.warning("FAQ file not found, /faq is disabled", path=str(path))
            return None
        try:
            return load_faq(path)
        except ConfigurationError as e:
            log_error(e, {"path": str(path)})
            return None

    async def _load_commands(self) -> None:
        """Load slash commands."""
        self.logger.debug("Loading bot commands")

        from discord_github_bot.bot.commands import setup_commands
        await setup_commands(self)

    async def _load_events(self) -> None:
        """Load event handlers."""
        self.logger.debug("Loading event handlers")

        from discord_github_bot.bot.events import setup_events
        await setup_events(self)

    @property
    def guild(self) -> discord.Object:
        return discord.Object(id=int(self.config.discord.server_id))

    async def on_ready(self) -> None:
        """Called when the bot is ready and connected to Discord."""
        log_discord_event(
            "bot_ready",
            bot_user=str(self.user),
            bot_id=self.user.id if self.user else None,
            guild_count=len(self.guilds),
        )

        # Commands are registered to the configured server only
        try:
            self.tree.copy_global_to(guild=self.guild)
            synced = await self.tree.sync(guild=self.guild)
            log_discord_event(
                "commands_synced",
                guild_id=self.config.discord.server_id,
                command_count=len(synced),
            )
            self.logger.info(f"Synced {len(synced)} commands to guild")
        except discord.HTTPException as e:
            log_error(e, {"operation": "sync_commands", "guild_id": self.config.discord.server_id})

    async def route(self, interaction: discord.Interaction) -> None:
        """Translate an interaction and dispatch it to the router."""
        event = event_from_interaction(interaction)
        if event is None or self.router is None:
            return

        correlation_id = generate_correlation_id()
        with log_operation_timing(
            f"{event.kind.value}_interaction",
            name=event.name or event.custom_id,
            correlation_id=correlation_id,
        ):
            await self.router.dispatch(event, DiscordResponder(interaction))

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type in (
            discord.InteractionType.modal_submit,
            discord.InteractionType.component,
        ):
            await self.route(interaction)

    def is_healthy(self) -> bool:
        return self._setup_complete and self.is_ready() and not self.is_closed()

    async def _remove_commands(self) -> None:
        self.tree.clear_commands(guild=self.guild)
        try:
            await self.tree.sync(guild=self.guild)
            self.logger.info("Removed registered commands", guild_id=self.config.discord.server_id)
        except discord.HTTPException as e:
            log_error(e, {"operation": "remove_commands"})

    async def close(self) -> None:
        """Clean up resources and close the bot."""
        self.logger.info("Shutting down Discord GitHub Bot")

        try:
            if self.config.discord.remove_commands and self.is_ready():
                await self._remove_commands()

            if self.health_server:
                await self.health_server.stop()

            if self.github:
                await self.github.close()

            await super().close()

        except Exception as e:
            self.logger.error("Error during bot shutdown", error=str(e))
            raise
        finally:
            self.logger.info("Bot shutdown complete")
