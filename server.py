from __future__ import annotations

import contextlib
import os

import uvicorn
from starlette.applications import Starlette

from auth.guard import SessionGuard
from auth.oauth_flow import OAuthFlow
from auth.session_store import MemorySessionStore, SessionStore
from auth.state_tracker import StateTracker
from fleetdash.constants import APP_VERSION, AUTH_MODE, LOGGER
from fleetdash.env import (
    AppConfig,
    get_env_int,
    load_config,
    load_env,
    setup_logging,
    validate_env,
)
from fleetdash.http import build_fleet_client
from fleetdash.proxy import VehicleProxy
from fleetdash.web import health_route, public_key_route


def create_app(
    config: AppConfig | None = None,
    *,
    session_store: SessionStore | None = None,
    debug_enabled: bool | None = None,
) -> Starlette:
    if config is None:
        load_env()
        debug_enabled = setup_logging()
        validate_env()
        config = load_config()
    if debug_enabled is None:
        debug_enabled = True

    if session_store is None:
        session_store = MemorySessionStore()
    state_tracker = StateTracker(config.state_secret)
    fleet_client = build_fleet_client(
        config.fleet_api_url,
        timeout=config.fleet_api_timeout,
        debug_enabled=debug_enabled,
    )

    oauth_flow = OAuthFlow(
        app_url=config.app_url,
        client_id=config.client_id,
        client_secret=config.client_secret,
        state_tracker=state_tracker,
        session_store=session_store,
        scopes=config.scopes,
    )
    proxy = VehicleProxy(client=fleet_client, guard=SessionGuard(session_store))

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        LOGGER.info("fleetdash %s (%s) serving %s", APP_VERSION, AUTH_MODE, config.app_url)
        LOGGER.info("Fleet API base URL: %s", config.fleet_api_url)
        try:
            yield
        finally:
            await fleet_client.aclose()
            await session_store.clear()
            state_tracker.clear()

    app = Starlette(
        routes=[
            health_route(),
            public_key_route(config.public_key_dir),
            *oauth_flow.routes(),
            *proxy.routes(),
        ],
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session_store = session_store
    app.state.state_tracker = state_tracker
    app.state.oauth_flow = oauth_flow
    app.state.fleet_client = fleet_client
    return app


def main() -> None:
    host = os.getenv("APP_HOST", "127.0.0.1")
    port = get_env_int("APP_PORT", 8080)
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
