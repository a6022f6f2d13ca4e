from __future__ import annotations

import httpx

from .constants import LOGGER

MAX_LOGGED_BODY_CHARS = 1000


async def read_upstream_body(response: httpx.Response):
    """Return the decoded JSON body, or ``{"raw": text}`` when it is not JSON."""
    await response.aread()
    try:
        return response.json()
    except ValueError:
        return {"raw": response.text}


def build_fleet_client(
    base_url: str,
    *,
    timeout: float = 30.0,
    debug_enabled: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    async def log_request(request: httpx.Request) -> None:
        if not debug_enabled:
            return
        LOGGER.info("Fleet API request %s %s", request.method, request.url)

    async def log_response(response: httpx.Response) -> None:
        if not debug_enabled:
            return
        LOGGER.info(
            "Fleet API response %s %s -> %s",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if response.status_code >= 400:
            body = await response.aread()
            text = body.decode("utf-8", errors="replace")
            if len(text) > MAX_LOGGED_BODY_CHARS:
                text = text[:MAX_LOGGED_BODY_CHARS] + "...<truncated>"
            LOGGER.warning("Fleet API error body: %s", text)

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        transport=transport,
        event_hooks={
            "request": [log_request],
            "response": [log_response],
        },
    )
