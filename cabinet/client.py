from __future__ import annotations

from functools import partial
from typing import Any

import httpx

from auth.models import SessionCredentials, StorageScope
from auth.refresh import (
    NavigateFn,
    RefreshCoordinator,
    RefreshFn,
    log_navigation,
    refresh_access_token,
)
from auth.session_storage import SessionStorage
from auth.token_store import FileTokenStore

from .constants import (
    API_PREFIX,
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_STORE_PATH,
    LOGGER,
)
from .errors import handle_api_error
from .http import RefreshTransport, build_request_authenticator, log_error_response


class ApiClient:
    """Authenticated client for the Cabinet Juridique 237 REST API.

    Every request carries the stored bearer token. An expired token is renewed
    transparently through a single shared refresh call; when renewal is
    impossible the stored session is erased and ``on_session_expired`` is
    called with the login route.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        storage: SessionStorage | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        refresh_fn: RefreshFn | None = None,
        on_session_expired: NavigateFn = log_navigation,
        debug: bool = False,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.storage = storage or SessionStorage(
            durable=FileTokenStore(DEFAULT_TOKEN_STORE_PATH)
        )
        self.debug = debug

        self.coordinator = RefreshCoordinator(
            self.storage,
            refresh_fn or partial(refresh_access_token, self.api_url, timeout=timeout),
            on_session_expired=on_session_expired,
            on_token=self._apply_default_token,
        )

        async def log_request(request: httpx.Request) -> None:
            if not self.debug:
                return
            LOGGER.info("API request %s %s", request.method, request.url)

        async def log_response(response: httpx.Response) -> None:
            if not self.debug:
                return
            LOGGER.info(
                "API response %s %s -> %s",
                response.request.method,
                response.request.url,
                response.status_code,
            )

        self._http = httpx.AsyncClient(
            base_url=f"{self.api_url}{API_PREFIX}",
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=RefreshTransport(
                transport or httpx.AsyncHTTPTransport(),
                self.coordinator,
            ),
            event_hooks={
                "request": [build_request_authenticator(self.storage), log_request],
                "response": [log_error_response, log_response],
            },
        )

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    def _apply_default_token(self, access_token: str | None) -> None:
        if access_token:
            self._http.headers["Authorization"] = f"Bearer {access_token}"
        else:
            self._http.headers.pop("Authorization", None)

    async def set_auth_token(
        self,
        token: str,
        remember_me: bool = False,
        *,
        refresh_token: str | None = None,
    ) -> SessionCredentials:
        if refresh_token is None:
            refresh_token = await self.storage.refresh_token()
        credentials = SessionCredentials(
            access_token=token,
            refresh_token=refresh_token,
            scope=StorageScope.for_remember_me(remember_me),
        )
        await self.storage.save(credentials)
        self._apply_default_token(token)
        return credentials

    async def clear_auth_token(self) -> None:
        await self.storage.clear()
        self._apply_default_token(None)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, path, json=json, params=params)
            response.raise_for_status()
        except httpx.TransportError as error:
            LOGGER.warning("API network error method=%s path=%s error=%r", method, path, error)
            raise handle_api_error(error) from error
        except httpx.HTTPStatusError as error:
            raise handle_api_error(error) from error
        return response

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        response = await self.request(method, path, json=json, params=params)
        if not response.content:
            return None
        return response.json()

    async def get(self, path: str, *, params: dict | None = None) -> Any:
        return await self.request_json("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request_json("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request_json("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request_json("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        return await self.request_json("DELETE", path, json=json)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
