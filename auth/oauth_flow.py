from __future__ import annotations

import logging

import httpx
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from auth import tesla_oauth2
from auth.cookies import (
    SESSION_COOKIE,
    STATE_COOKIE,
    clear_session_cookie,
    clear_state_cookie,
    set_session_cookie,
    set_state_cookie,
)
from auth.session_store import SessionStore
from auth.state_tracker import StateTracker
from auth.urls import append_query_params, callback_url

LOGGER = logging.getLogger("fleetdash.auth")

APP_ROOT = "/"


class OAuthFlow:
    def __init__(
        self,
        *,
        app_url: str,
        client_id: str,
        client_secret: str,
        state_tracker: StateTracker,
        session_store: SessionStore,
        scopes: list[str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        exchange_code_fn=tesla_oauth2.exchange_code,
    ) -> None:
        self.app_url = app_url.rstrip("/")
        # Tesla compares this byte for byte between authorize and token calls.
        self.redirect_uri = callback_url(self.app_url)
        self.client_id = client_id
        self.client_secret = client_secret
        self.state_tracker = state_tracker
        self.session_store = session_store
        self.scopes = scopes or list(tesla_oauth2.DEFAULT_SCOPES)

        self._http_client = http_client
        self._exchange_code_fn = exchange_code_fn

    # -- routes ----------------------------------------------------------------

    def routes(self) -> list[Route]:
        return [
            Route("/auth/login", self._handle_login, methods=["GET"]),
            Route("/auth/callback", self._handle_callback, methods=["GET"]),
            Route("/auth/session", self._handle_session, methods=["GET"]),
            Route("/auth/logout", self._handle_logout, methods=["POST"]),
        ]

    # -- handlers --------------------------------------------------------------

    async def _handle_login(self, request: Request) -> Response:
        del request
        state = self.state_tracker.issue()
        authorize_url = tesla_oauth2.build_authorization_url(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scopes=self.scopes,
            state=state,
        )
        LOGGER.info("Starting OAuth flow, redirect URI: %s", self.redirect_uri)

        response = RedirectResponse(url=authorize_url, status_code=302)
        set_state_cookie(response, state, max_age=self.state_tracker.ttl_seconds)
        return response

    async def _handle_callback(self, request: Request) -> Response:
        code = request.query_params.get("code")
        state = request.query_params.get("state")
        cookie_state = request.cookies.get(STATE_COOKIE)

        provider_error = request.query_params.get("error")
        if provider_error:
            LOGGER.warning(
                "Tesla auth returned error=%s description=%s",
                provider_error,
                request.query_params.get("error_description"),
            )

        LOGGER.info(
            "OAuth callback received state_present=%s cookie_present=%s state_pending=%s",
            bool(state),
            bool(cookie_state),
            bool(state) and state in self.state_tracker.pending,
        )

        if not code or not self.state_tracker.validate(state, cookie_state):
            LOGGER.error("Invalid state or missing code")
            return self._redirect_with_error("invalid_state")

        LOGGER.info("Exchanging code for tokens...")
        try:
            credentials = await self._exchange_code_fn(
                client_id=self.client_id,
                client_secret=self.client_secret,
                code=code,
                redirect_uri=self.redirect_uri,
                client=self._http_client,
            )
        except tesla_oauth2.TokenExchangeError as error:
            LOGGER.error(
                "Token error: status=%s body=%s", error.status_code, error.detail or error
            )
            return self._redirect_with_error("token_error")

        session_id = await self.session_store.create(credentials)
        LOGGER.info("Tokens received successfully; session created")

        response = RedirectResponse(url=APP_ROOT, status_code=302)
        set_session_cookie(response, session_id)
        clear_state_cookie(response)
        return response

    async def _handle_session(self, request: Request) -> Response:
        session_id = request.cookies.get(SESSION_COOKIE)
        authenticated = bool(session_id) and await self.session_store.get(session_id) is not None
        return JSONResponse({"authenticated": authenticated})

    async def _handle_logout(self, request: Request) -> Response:
        session_id = request.cookies.get(SESSION_COOKIE)
        response = JSONResponse({"success": True})
        if session_id:
            await self.session_store.delete(session_id)
            clear_session_cookie(response)
        return response

    # -- helpers ---------------------------------------------------------------

    def _redirect_with_error(self, code: str) -> Response:
        return RedirectResponse(
            url=append_query_params(APP_ROOT, {"error": code}),
            status_code=302,
        )
