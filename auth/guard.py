from __future__ import annotations

import functools
from typing import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from auth.cookies import SESSION_COOKIE
from auth.models import Credentials
from auth.session_store import SessionStore

Endpoint = Callable[[Request], Awaitable[Response]]


class SessionGuard:
    def __init__(self, session_store: SessionStore) -> None:
        self.session_store = session_store

    async def resolve(self, request: Request) -> Credentials | None:
        session_id = request.cookies.get(SESSION_COOKIE)
        if not session_id:
            return None
        return await self.session_store.get(session_id)

    def protect(self, endpoint: Endpoint) -> Endpoint:
        """Wrap ``endpoint`` so it only runs for requests with a live session.

        The resolved credentials are exposed as ``request.state.credentials``.
        """

        @functools.wraps(endpoint)
        async def guarded(request: Request) -> Response:
            credentials = await self.resolve(request)
            if credentials is None:
                return JSONResponse({"error": "Unauthorized"}, status_code=401)
            request.state.credentials = credentials
            return await endpoint(request)

        return guarded
