import urllib.parse

import pytest
from starlette.testclient import TestClient

import server
from auth.cookies import SESSION_COOKIE, STATE_COOKIE
from auth.tesla_oauth2 import TESLA_TOKEN_URL
from tests.oauth_helpers import APP_URL, FLEET_API, build_config, state_from_location

SCOPES = "openid offline_access vehicle_device_data"


@pytest.fixture
def client():
    app = server.create_app(build_config(), debug_enabled=False)
    with TestClient(app) as test_client:
        yield test_client


def _sign_in(client, httpx_mock) -> None:
    httpx_mock.add_response(
        url=TESLA_TOKEN_URL,
        method="POST",
        json={"access_token": "t1", "refresh_token": "r1", "expires_in": 28800},
    )
    login = client.get("/auth/login", follow_redirects=False)
    state = state_from_location(login.headers["location"])
    callback = client.get(
        "/auth/callback",
        params={"code": "ABC", "state": state},
        follow_redirects=False,
    )
    assert callback.headers["location"] == "/"


def test_login_redirect_matches_state_cookie(client) -> None:
    response = client.get("/auth/login", follow_redirects=False)

    assert response.status_code == 302
    query = urllib.parse.parse_qs(urllib.parse.urlparse(response.headers["location"]).query)
    assert query["client_id"] == ["tesla-client"]
    assert query["redirect_uri"] == [f"{APP_URL}/auth/callback"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == [SCOPES]
    assert query["state"] == [response.cookies[STATE_COOKIE]]


def test_callback_with_unknown_state_skips_exchange(client, httpx_mock) -> None:
    client.get("/auth/login", follow_redirects=False)

    response = client.get(
        "/auth/callback",
        params={"code": "ABC", "state": "S"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/?error=invalid_state"
    assert httpx_mock.get_requests() == []


def test_successful_login_forwards_bearer_token(client, httpx_mock) -> None:
    _sign_in(client, httpx_mock)
    httpx_mock.add_response(url=f"{FLEET_API}/api/1/vehicles", method="GET", json={"response": []})

    assert client.cookies[SESSION_COOKIE]
    assert client.get("/auth/session").json() == {"authenticated": True}
    vehicles = client.get("/api/vehicles")

    assert vehicles.status_code == 200
    fleet_request = httpx_mock.get_request(url=f"{FLEET_API}/api/1/vehicles")
    assert fleet_request.headers["authorization"] == "Bearer t1"


def test_logout_ends_session(client, httpx_mock) -> None:
    _sign_in(client, httpx_mock)

    logout = client.post("/auth/logout")

    assert logout.json() == {"success": True}
    assert client.get("/auth/session").json() == {"authenticated": False}
    vehicles = client.get("/api/vehicles")
    assert vehicles.status_code == 401
    assert vehicles.json() == {"error": "Unauthorized"}


def test_upstream_failure_envelopes(client, httpx_mock) -> None:
    _sign_in(client, httpx_mock)
    httpx_mock.add_response(
        url=f"{FLEET_API}/api/1/vehicles/42/vehicle_data",
        method="GET",
        status_code=500,
        json={"error": "internal"},
    )
    httpx_mock.add_response(
        url=f"{FLEET_API}/api/1/vehicles",
        method="GET",
        status_code=500,
        json={"error": "internal"},
    )

    single = client.get("/api/vehicles/42")
    listing = client.get("/api/vehicles")

    assert single.status_code == 500
    assert single.json() == {"error": "Failed to fetch vehicle data"}
    assert listing.status_code == 500
    assert listing.json() == {"error": "Failed to fetch vehicles", "details": {"error": "internal"}}


def test_token_endpoint_rejection_redirects_with_token_error(client, httpx_mock) -> None:
    httpx_mock.add_response(
        url=TESLA_TOKEN_URL, method="POST", status_code=401, json={"error": "invalid_grant"}
    )
    login = client.get("/auth/login", follow_redirects=False)
    state = state_from_location(login.headers["location"])

    callback = client.get(
        "/auth/callback",
        params={"code": "ABC", "state": state},
        follow_redirects=False,
    )

    assert callback.headers["location"] == "/?error=token_error"
    assert SESSION_COOKIE not in client.cookies
    assert client.get("/auth/session").json() == {"authenticated": False}
