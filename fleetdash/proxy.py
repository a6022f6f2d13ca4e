from __future__ import annotations

import json
import urllib.parse

import httpx
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from auth.guard import SessionGuard

from .constants import LOGGER
from .http import read_upstream_body

VEHICLES_PATH = "/api/1/vehicles"


class VehicleProxy:
    """Read-only vehicle routes forwarded to the Fleet API.

    Every route runs behind the session guard and calls upstream with the
    session's access token. Successful bodies are returned untouched.
    Failures keep the upstream status code; only the list route echoes the
    upstream error body back as ``details``.
    """

    def __init__(self, *, client: httpx.AsyncClient, guard: SessionGuard) -> None:
        self.client = client
        self.guard = guard

    def routes(self) -> list[Route]:
        protect = self.guard.protect
        return [
            Route("/api/vehicles", protect(self._handle_list), methods=["GET"]),
            Route(
                "/api/vehicles/{vehicle_id}",
                protect(self._handle_vehicle_data),
                methods=["GET"],
            ),
            Route(
                "/api/vehicles/{vehicle_id}/location",
                protect(self._handle_location),
                methods=["GET"],
            ),
            Route(
                "/api/vehicles/{vehicle_id}/charge",
                protect(self._handle_charge),
                methods=["GET"],
            ),
        ]

    # -- handlers --------------------------------------------------------------

    async def _handle_list(self, request: Request) -> Response:
        error_message = "Failed to fetch vehicles"
        LOGGER.info("Fetching vehicles from Fleet API...")
        try:
            upstream = await self._get(request, VEHICLES_PATH)
        except httpx.HTTPError as error:
            return self._transport_error(error_message, error)

        body = await read_upstream_body(upstream)
        LOGGER.info("Fleet API response status: %s", upstream.status_code)
        LOGGER.info("Fleet API response: %s", json.dumps(body, indent=2))

        if not upstream.is_success:
            return JSONResponse(
                {"error": error_message, "details": body},
                status_code=upstream.status_code,
            )
        return self._passthrough(upstream)

    async def _handle_vehicle_data(self, request: Request) -> Response:
        return await self._forward_vehicle_data(request, "Failed to fetch vehicle data")

    async def _handle_location(self, request: Request) -> Response:
        return await self._forward_vehicle_data(
            request, "Failed to fetch location", endpoints="drive_state"
        )

    async def _handle_charge(self, request: Request) -> Response:
        return await self._forward_vehicle_data(
            request, "Failed to fetch charge state", endpoints="charge_state"
        )

    # -- helpers ---------------------------------------------------------------

    async def _forward_vehicle_data(
        self,
        request: Request,
        error_message: str,
        *,
        endpoints: str | None = None,
    ) -> Response:
        vehicle_id = urllib.parse.quote(request.path_params["vehicle_id"], safe="")
        params = {"endpoints": endpoints} if endpoints else None
        try:
            upstream = await self._get(
                request, f"{VEHICLES_PATH}/{vehicle_id}/vehicle_data", params=params
            )
        except httpx.HTTPError as error:
            return self._transport_error(error_message, error)

        LOGGER.info("Fleet API vehicle_data status: %s", upstream.status_code)
        if not upstream.is_success:
            return JSONResponse({"error": error_message}, status_code=upstream.status_code)
        return self._passthrough(upstream)

    async def _get(
        self,
        request: Request,
        path: str,
        *,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        credentials = request.state.credentials
        return await self.client.get(
            path,
            params=params,
            headers={"Authorization": f"Bearer {credentials.access_token}"},
        )

    def _passthrough(self, upstream: httpx.Response) -> Response:
        return Response(
            content=upstream.content,
            status_code=200,
            media_type=upstream.headers.get("content-type", "application/json"),
        )

    def _transport_error(self, error_message: str, error: httpx.HTTPError) -> Response:
        LOGGER.error("Fleet API request failed: %s", error)
        return JSONResponse({"error": error_message}, status_code=502)
