import pytest

ENV_KEYS = (
    "TESLA_CLIENT_ID",
    "TESLA_CLIENT_SECRET",
    "APP_URL",
    "TESLA_FLEET_API",
    "TESLA_SCOPES",
    "SESSION_SECRET",
    "FLEET_API_TIMEOUT",
    "FLEET_API_DEBUG",
    "PUBLIC_KEY_DIR",
    "APP_HOST",
    "APP_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def tesla_env(monkeypatch) -> None:
    monkeypatch.setenv("TESLA_CLIENT_ID", "tesla-client")
    monkeypatch.setenv("TESLA_CLIENT_SECRET", "tesla-secret")
    monkeypatch.setenv("APP_URL", "https://fleetdash.example.com")
