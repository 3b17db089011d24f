from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .constants import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, LOGGER

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a numeric value.")


def get_api_url() -> str:
    return os.getenv("CABINET_API_URL", DEFAULT_API_URL).strip().rstrip("/")


def get_timeout() -> float:
    return _get_env_float("CABINET_API_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_env() -> None:
    api_url = get_api_url()
    try:
        _URL_ADAPTER.validate_python(api_url)
    except ValidationError as error:
        raise RuntimeError(
            "CABINET_API_URL must be a valid http(s) URL (for example: "
            "https://api.cabinet237.cm)."
        ) from error

    if get_timeout() <= 0:
        raise RuntimeError("CABINET_API_TIMEOUT must be greater than zero.")


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("CABINET_API_DEBUG", "0"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
