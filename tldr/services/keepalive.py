"""
Minimal HTTP endpoint for external uptime checks.
"""
import logging

from aiohttp import web

from ..utils.constants import KEEPALIVE_MESSAGE

logger = logging.getLogger("tldr.keepalive")


async def handle_root(request: web.Request) -> web.Response:
    return web.Response(text=KEEPALIVE_MESSAGE)


def create_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", handle_root)
    return app


class KeepAliveServer:
    def __init__(self, port: int, host: str = "0.0.0.0"):
        self.host = host
        self.port = port
        self._runner: web.AppRunner | None = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner:
            return
        self._runner = web.AppRunner(create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Keep-alive server running on port {self.port}")

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Keep-alive server stopped")
