from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from auth.tesla_oauth2 import DEFAULT_SCOPES

from .constants import (
    AUTH_MODE,
    DEFAULT_APP_URL,
    DEFAULT_FLEET_API,
    DEFAULT_PUBLIC_KEY_DIR,
    LOGGER,
)

_HTTP_URL = TypeAdapter(AnyHttpUrl)


@dataclass(frozen=True)
class AppConfig:
    client_id: str
    client_secret: str
    app_url: str
    fleet_api_url: str
    scopes: list[str]
    state_secret: str
    fleet_api_timeout: float = 30.0
    public_key_dir: Path = DEFAULT_PUBLIC_KEY_DIR


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer value.")


def _get_env_url(key: str, default: str) -> str:
    return (os.getenv(key, "").strip() or default).rstrip("/")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_env() -> None:
    required = ("TESLA_CLIENT_ID", "TESLA_CLIENT_SECRET")
    missing = [key for key in required if not os.getenv(key, "").strip()]
    if missing:
        raise RuntimeError(
            f"Missing required environment variables for {AUTH_MODE}: {', '.join(missing)}"
        )

    for key, default in (("APP_URL", DEFAULT_APP_URL), ("TESLA_FLEET_API", DEFAULT_FLEET_API)):
        value = _get_env_url(key, default)
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise RuntimeError(
                f"{key} must be a valid http(s) URL (for example: {default})."
            )

    scopes = os.getenv("TESLA_SCOPES", " ".join(DEFAULT_SCOPES)).split()
    if "offline_access" not in scopes:
        LOGGER.warning("TESLA_SCOPES is missing offline_access; no refresh token will be issued.")

    get_env_int("FLEET_API_TIMEOUT", 30)
    get_env_int("APP_PORT", 8080)


def load_config() -> AppConfig:
    client_secret = os.getenv("TESLA_CLIENT_SECRET", "").strip()
    return AppConfig(
        client_id=os.getenv("TESLA_CLIENT_ID", "").strip(),
        client_secret=client_secret,
        app_url=_get_env_url("APP_URL", DEFAULT_APP_URL),
        fleet_api_url=_get_env_url("TESLA_FLEET_API", DEFAULT_FLEET_API),
        scopes=os.getenv("TESLA_SCOPES", " ".join(DEFAULT_SCOPES)).split(),
        state_secret=os.getenv("SESSION_SECRET", "").strip() or client_secret,
        fleet_api_timeout=float(get_env_int("FLEET_API_TIMEOUT", 30)),
        public_key_dir=Path(os.getenv("PUBLIC_KEY_DIR", "").strip() or DEFAULT_PUBLIC_KEY_DIR),
    )


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("FLEET_API_DEBUG", "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
        logging.getLogger("fleetdash.auth").setLevel(logging.INFO)
    return debug_enabled
