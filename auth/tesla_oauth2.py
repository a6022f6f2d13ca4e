from __future__ import annotations

import urllib.parse

import httpx

from auth.models import Credentials

TESLA_AUTHORIZE_URL = "https://auth.tesla.com/oauth2/v3/authorize"
TESLA_TOKEN_URL = "https://auth.tesla.com/oauth2/v3/token"

DEFAULT_SCOPES = [
    "openid",
    "offline_access",
    "user_data",
    "vehicle_device_data",
    "vehicle_cmds",
    "vehicle_charging_cmds",
]


class TokenExchangeError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str,
) -> str:
    query = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(scopes),
        "state": state,
    }
    return f"{TESLA_AUTHORIZE_URL}?{urllib.parse.urlencode(query)}"


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> Credentials:
    payload = {
        "grant_type": "authorization_code",
        "client_id": client_id,
        "client_secret": client_secret,
        "code": code,
        "redirect_uri": redirect_uri,
    }
    own_client = client is None
    http_client = client or httpx.AsyncClient()

    try:
        response = await http_client.post(TESLA_TOKEN_URL, data=payload)
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        detail = error.response.text
        raise TokenExchangeError(
            f"Token request failed with status {error.response.status_code}: {detail}",
            status_code=error.response.status_code,
            detail=detail,
        ) from error
    except httpx.HTTPError as error:
        raise TokenExchangeError(f"Token request could not be sent: {error}") from error
    finally:
        if own_client:
            await http_client.aclose()

    try:
        body = response.json()
    except ValueError as error:
        raise TokenExchangeError(
            "Token response is not valid JSON.",
            status_code=response.status_code,
            detail=response.text,
        ) from error
    if not isinstance(body, dict):
        raise TokenExchangeError(
            "Token response must be a JSON object.",
            status_code=response.status_code,
            detail=response.text,
        )

    try:
        return Credentials.from_payload(body)
    except RuntimeError as error:
        raise TokenExchangeError(str(error), status_code=response.status_code) from error
