from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger("fleetdash.fleet_api")
APP_VERSION = "0.1.0"
AUTH_MODE = "oauth2-authorization-code"

DEFAULT_APP_URL = "http://localhost:8080"
DEFAULT_FLEET_API = "https://fleet-api.prd.na.vn.cloud.tesla.com"

PUBLIC_KEY_FILENAME = "com.tesla.3p.public-key.pem"
DEFAULT_PUBLIC_KEY_DIR = Path(".well-known") / "appspecific"
