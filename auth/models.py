from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """Token pair issued by Tesla auth for one signed-in user.

    Held server-side only; the browser receives the session id that maps
    to it.
    """

    access_token: str
    refresh_token: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "Credentials":
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")

        if not isinstance(access_token, str) or not access_token:
            raise RuntimeError("Token response missing access_token.")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise RuntimeError("Token response refresh_token must be a string.")

        return cls(access_token=access_token, refresh_token=refresh_token)
