from __future__ import annotations

from pathlib import Path

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from .constants import APP_VERSION, AUTH_MODE, LOGGER, PUBLIC_KEY_FILENAME


def health_route() -> Route:
    async def health(request: Request) -> Response:
        del request
        return JSONResponse(
            {
                "status": "ok",
                "version": APP_VERSION,
                "auth_mode": AUTH_MODE,
            }
        )

    return Route("/health", health, methods=["GET"])


def public_key_route(key_dir: Path) -> Route:
    """Serve the partner public key Tesla fetches during app registration."""
    key_path = Path(key_dir) / PUBLIC_KEY_FILENAME

    async def public_key(request: Request) -> Response:
        del request
        try:
            content = key_path.read_text(encoding="utf-8")
        except OSError:
            LOGGER.warning("Public key not found at %s", key_path)
            return PlainTextResponse("Public key not found", status_code=404)
        return PlainTextResponse(content)

    return Route(f"/.well-known/appspecific/{PUBLIC_KEY_FILENAME}", public_key, methods=["GET"])
