"""Authorization prompt that opens a browser and receives the redirect locally."""

import asyncio
import logging
import webbrowser
from collections.abc import Callable
from urllib.parse import urlsplit

from aiohttp import web

from fila_client.domain.models.oauth import AuthorizationRequest, AuthorizationResult

logger = logging.getLogger(__name__)

SUCCESS_PAGE = "Login concluído. Você já pode fechar esta janela."
FAILURE_PAGE = "Login não concluído. Você já pode fechar esta janela."


class LoopbackAuthorizationPrompt:
    """Serves the redirect URI on a loopback port for the duration of one prompt.

    The user's browser is pointed at the authorization URL; the provider then
    redirects back to ``redirect_uri`` with ``code`` and ``state`` (or
    ``error``) as query parameters.
    """

    def __init__(
        self,
        timeout_seconds: float = 300.0,
        open_browser: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._open_browser = open_browser

    async def prompt(self, request: AuthorizationRequest) -> AuthorizationResult:
        redirect = urlsplit(request.redirect_uri)
        host = redirect.hostname or "127.0.0.1"
        port = redirect.port or 80
        received: asyncio.Future[dict[str, str]] = asyncio.get_running_loop().create_future()

        async def handle_redirect(http_request: web.Request) -> web.Response:
            params = dict(http_request.query)
            if not received.done():
                received.set_result(params)
            text = FAILURE_PAGE if "error" in params else SUCCESS_PAGE
            return web.Response(text=text, content_type="text/plain", charset="utf-8")

        app = web.Application()
        app.router.add_get(redirect.path or "/", handle_redirect)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()
        logger.info(f"Waiting for the OAuth redirect on {request.redirect_uri}")

        try:
            if not self._open_browser(request.url):
                logger.warning(f"Could not open a browser, visit this URL: {request.url}")
            params = await asyncio.wait_for(received, self._timeout_seconds)
        except asyncio.TimeoutError:
            logger.info("No OAuth redirect received before the timeout")
            return AuthorizationResult(type="dismiss")
        finally:
            await runner.cleanup()

        error = params.get("error")
        if error == "access_denied":
            return AuthorizationResult(type="cancel", params=params)
        if error:
            return AuthorizationResult(type="error", params=params)
        return AuthorizationResult(type="success", params=params)
