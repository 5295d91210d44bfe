"""
Local listener that receives the provider redirect for the terminal application
"""
import asyncio
import html
import logging
from typing import Optional
from urllib.parse import urlsplit

from aiohttp import web

from settings import REDIRECT_URI

logger = logging.getLogger(__name__)

_PAGE = """
<html>
    <head><title>Personal Assistant</title></head>
    <body>
        <h1>{heading}</h1>
        <p>{detail}</p>
        <p>You can close this window and return to the terminal.</p>
        <script>
            window.history.replaceState(null, "", "{path}");
        </script>
    </body>
</html>
"""


class OAuthCallbackServer:
    """HTTP listener bound to the host, port and path of the redirect URI"""

    def __init__(self, redirect_uri: str = REDIRECT_URI):
        parts = urlsplit(redirect_uri)
        self.host = parts.hostname or "localhost"
        self.port = parts.port or (443 if parts.scheme == "https" else 80)
        self.path = parts.path or "/"
        self.callback_url: Optional[str] = None
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._event = asyncio.Event()

        self.app.router.add_get(self.path, self._handle_callback)

    def _page(self, heading: str, detail: str, status: int = 200) -> web.Response:
        text = _PAGE.format(
            heading=html.escape(heading),
            detail=html.escape(detail),
            path=html.escape(self.path, quote=True),
        )
        return web.Response(text=text, content_type="text/html", status=status)

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Record the redirect URL and strip its query from the browser history"""
        if not request.query_string:
            return self._page("Personal Assistant", "Waiting for sign-in to start.")

        self.callback_url = str(request.url)
        self._event.set()

        error = request.query.get("error")
        if error:
            logger.warning(f"Provider returned an error: {error}")
            description = request.query.get("error_description", "")
            return self._page("Sign-in failed", f"Error: {error} {description}".strip(), status=400)

        return self._page("Sign-in received", "Finishing sign-in in the terminal.")

    async def start(self) -> None:
        """Start the callback listener"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        await site.start()
        logger.info(f"OAuth callback listener on http://{self.host}:{self.port}{self.path}")

    async def wait_for_callback(self, timeout: float = 300) -> Optional[str]:
        """
        Wait for the provider redirect.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            Full redirect URL, or None on timeout
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
            return self.callback_url
        except asyncio.TimeoutError:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            return None

    async def stop(self) -> None:
        """Stop the callback listener"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None


async def start_callback_server(redirect_uri: str = REDIRECT_URI) -> OAuthCallbackServer:
    """
    Start a callback listener for ``redirect_uri``.

    Returns:
        Running OAuthCallbackServer
    """
    server = OAuthCallbackServer(redirect_uri)
    await server.start()
    return server
