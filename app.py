from __future__ import annotations

import asyncio
import json
import os

from auth.session import AuthSession
from auth.session_storage import SessionStorage
from auth.token_store import FileTokenStore
from cabinet.client import ApiClient
from cabinet.constants import DEFAULT_TOKEN_STORE_PATH, LOGGER
from cabinet.env import get_api_url, get_timeout, is_truthy, load_env, setup_logging, validate_env
from cabinet.errors import ApiError, get_error_message


def create_client() -> ApiClient:
    load_env()
    debug_enabled = setup_logging()
    validate_env()

    storage = SessionStorage(
        durable=FileTokenStore(os.getenv("CABINET_TOKEN_STORE_PATH", DEFAULT_TOKEN_STORE_PATH)),
    )
    api_url = get_api_url()
    LOGGER.info("Using Cabinet API at %s", api_url)
    return ApiClient(
        api_url,
        storage=storage,
        timeout=get_timeout(),
        debug=debug_enabled,
    )


async def run() -> int:
    async with create_client() as client:
        session = AuthSession(client)
        email = os.getenv("CABINET_EMAIL", "").strip()
        password = os.getenv("CABINET_PASSWORD", "")

        try:
            if email and password:
                user = await session.login(
                    email,
                    password,
                    remember_me=is_truthy(os.getenv("CABINET_REMEMBER_ME")),
                )
            else:
                user = await session.fetch_profile()
        except ApiError as error:
            print(f"Erreur: {get_error_message(error)}")
            return 1

        if not user:
            print("Utilisateur non authentifié.")
            return 1

        print(json.dumps(user, indent=2, ensure_ascii=False))
        return 0


def main() -> None:
    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
