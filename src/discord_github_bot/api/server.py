"""
Health check server for the bot.

A minimal aiohttp application for container and load balancer probes:

- `GET /health` returns `200 OK` while the bot is connected, `503` otherwise
- `GET /status` returns a JSON summary of the bot's state
"""

import json
from typing import Optional, TYPE_CHECKING

from aiohttp import web
from aiohttp.web import Request, Response

from discord_github_bot.utils.logging import get_logger

if TYPE_CHECKING:
    from discord_github_bot.bot.client import GitHubIssueBot


class HealthCheckServer:
    """
    HTTP health endpoint for the bot.

    Attributes:
        bot: The bot whose health is reported
        host: Interface to bind
        port: Port to listen on
    """

    def __init__(self, bot: "GitHubIssueBot", port: int = 8080, host: str = "0.0.0.0"):
        self.bot = bot
        self.host = host
        self.port = port
        self.logger = get_logger(__name__)

        self.app = self.create_app()
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get('/health', self._health_check)
        app.router.add_get('/status', self._bot_status)
        return app

    async def start(self) -> None:
        """Start the health check server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        self.logger.info("Health check server started", host=self.host, port=self.port)

    async def stop(self) -> None:
        """Stop the health check server."""
        if self.site:
            await self.site.stop()
        if self.runner:
            await self.runner.cleanup()
        self.logger.info("Health check server stopped")

    async def _health_check(self, request: Request) -> Response:
        if not self.bot.is_healthy():
            return Response(status=503, text='Service Unavailable')
        return Response(status=200, text='OK')

    async def _bot_status(self, request: Request) -> Response:
        ready = self.bot.is_ready()
        status_data = {
            'ready': ready,
            'user': str(self.bot.user) if self.bot.user else None,
            'guild_count': len(self.bot.guilds) if ready else 0,
            'active_sessions': len(self.bot.store) if self.bot.store is not None else 0,
        }

        return Response(
            text=json.dumps(status_data, indent=2),
            content_type='application/json'
        )
