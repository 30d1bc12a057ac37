"""
Main entry point for the Discord GitHub Bot.

This module provides the main function and CLI interface for starting
the Discord bot. It handles configuration loading, logging setup,
and graceful shutdown handling.
"""

import argparse
import asyncio
import signal
import sys
from typing import Any, Dict, List, Optional

from discord_github_bot import __version__
from discord_github_bot.config import load_config, AppConfig
from discord_github_bot.utils.logging import setup_logging, get_logger
from discord_github_bot.utils.exceptions import ConfigurationError
from discord_github_bot.bot.client import GitHubIssueBot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discord-github-bot",
        description="Discord bot that files GitHub issues and answers project questions.",
    )
    parser.add_argument("--server-id", help="Discord server (guild) ID [DISCORD_SERVER_ID]")
    parser.add_argument("--discord-token", help="Discord bot token [DISCORD_TOKEN]")
    parser.add_argument("--github-token", help="GitHub token [GITHUB_TOKEN]")
    parser.add_argument("--config-path", help="Modal YAML configuration file [CONFIG_PATH]")
    parser.add_argument("--faq-path", help="FAQ YAML file [FAQ_PATH]")
    parser.add_argument("--healthcheck-port", type=int, help="Health check port [HEALTHCHECK_PORT]")
    parser.add_argument(
        "--remove-commands",
        action="store_true",
        default=None,
        help="Remove registered slash commands on shutdown [DISCORD_REMOVE_COMMANDS]",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_overrides(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Parse command-line flags into `load_config` overrides."""
    args = build_parser().parse_args(argv)
    return {name: value for name, value in vars(args).items() if value is not None}


async def create_bot(config: AppConfig) -> GitHubIssueBot:
    """
    Create and configure the Discord bot instance.

    Args:
        config: Application configuration

    Returns:
        Configured GitHubIssueBot instance

    Raises:
        ConfigurationError: If bot cannot be configured
    """
    logger = get_logger(__name__)

    try:
        logger.info("Creating Discord bot instance",
                   config_path=config.config_path,
                   github_api_url=config.github.api_url)

        bot = GitHubIssueBot(config)
        await bot.setup()

        logger.info("Bot instance created successfully")
        return bot

    except ConfigurationError:
        raise
    except Exception as e:
        logger.error("Failed to create bot instance", error=str(e))
        raise ConfigurationError(
            "Failed to create bot instance",
            context={"error": str(e)},
            original_error=e
        )


async def run_bot(config: AppConfig) -> None:
    """
    Run the Discord bot with proper error handling and shutdown.

    Args:
        config: Application configuration

    Raises:
        ConfigurationError: If bot cannot be started
    """
    logger = get_logger(__name__)
    bot: Optional[GitHubIssueBot] = None

    shutdown_event = asyncio.Event()

    try:
        bot = await create_bot(config)

        def signal_handler(signum: int, frame) -> None:
            logger.info("Received shutdown signal", signal=signum)
            shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        logger.info("Starting Discord bot", server_id=config.discord.server_id)

        bot_task = asyncio.create_task(bot.start(config.discord.token))
        shutdown_task = asyncio.create_task(shutdown_event.wait())

        done, pending = await asyncio.wait(
            [bot_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED
        )

        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        # Surface a failed login or gateway error
        if bot_task in done and bot_task.exception():
            raise bot_task.exception()

    except KeyboardInterrupt:
        logger.info("Bot shutdown requested by user")
    except Exception as e:
        logger.error("Bot encountered fatal error", error=str(e))
        raise
    finally:
        if bot:
            logger.info("Cleaning up bot resources")
            try:
                await asyncio.wait_for(bot.close(), timeout=5.0)
                logger.info("Bot shutdown completed successfully")
            except asyncio.TimeoutError:
                logger.warning("Bot shutdown timed out after 5 seconds, forcing close")
            except Exception as e:
                logger.error("Error during bot shutdown", error=str(e))


async def main_async(overrides: Optional[Dict[str, Any]] = None) -> None:
    """
    Async main function that handles the complete bot lifecycle.

    This function:
    1. Loads configuration
    2. Sets up logging
    3. Creates and runs the bot
    4. Handles shutdown gracefully
    """
    try:
        config = load_config(overrides)

        setup_logging(config.logging)
        logger = get_logger(__name__)

        logger.info("Discord GitHub Bot starting up",
                   version=__version__,
                   env=config.env)

        await run_bot(config)

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        logger = get_logger(__name__)
        logger.info("Discord GitHub Bot shutdown complete")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the Discord GitHub Bot.

    Example:
        Command line usage:
        ```bash
        discord-github-bot --config-path modals.yaml --faq-path faq.yaml
        ```
    """
    overrides = parse_overrides(argv)

    try:
        asyncio.run(main_async(overrides))

    except KeyboardInterrupt:
        print("\nBot shutdown requested", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
