from __future__ import annotations

import logging

LOGGER = logging.getLogger("cabinet.api")

DEFAULT_API_URL = "http://localhost:3001"
API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_TOKEN_STORE_PATH = ".cabinet_tokens.json"
LOGIN_ROUTE = "/login"

RETRY_EXTENSION = "cabinet_retry"
