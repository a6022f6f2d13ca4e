from __future__ import annotations

from starlette.responses import Response

from auth.state_tracker import DEFAULT_STATE_TTL_SECONDS

STATE_COOKIE = "oauth_state"
SESSION_COOKIE = "session"

STATE_COOKIE_MAX_AGE = DEFAULT_STATE_TTL_SECONDS
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 7

# TLS terminates at the tunnel in front of the app, so cookies stay non-secure.
_COOKIE_OPTIONS = {"path": "/", "httponly": True, "secure": False, "samesite": "lax"}


def set_state_cookie(
    response: Response,
    state: str,
    *,
    max_age: int = STATE_COOKIE_MAX_AGE,
) -> None:
    response.set_cookie(STATE_COOKIE, state, max_age=max_age, **_COOKIE_OPTIONS)


def clear_state_cookie(response: Response) -> None:
    response.delete_cookie(STATE_COOKIE, **_COOKIE_OPTIONS)


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=SESSION_COOKIE_MAX_AGE,
        **_COOKIE_OPTIONS,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, **_COOKIE_OPTIONS)
