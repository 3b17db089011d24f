from __future__ import annotations

import logging

import httpx

from auth.refresh import RefreshCoordinator
from auth.session_storage import SessionStorage

from .constants import LOGGER, RETRY_EXTENSION

NO_REFRESH_PATHS = (
    "/auth/login",
    "/auth/refresh",
    "/auth/forgot-password",
    "/auth/reset-password",
)


def skips_refresh(path: str) -> bool:
    return any(route in path for route in NO_REFRESH_PATHS)


def is_retried(request: httpx.Request) -> bool:
    return bool(request.extensions.get(RETRY_EXTENSION))


class RefreshTransport(httpx.AsyncBaseTransport):
    """Renews the access token on 401 and replays the request once."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        coordinator: RefreshCoordinator,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._coordinator = coordinator
        self._logger = logger or LOGGER

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        current = request

        while True:
            response = await self._transport.handle_async_request(current)

            if response.status_code != 401 or skips_refresh(request.url.path):
                return response

            if is_retried(current):
                self._logger.warning(
                    "Retried request still unauthorized (%s %s); ending session",
                    request.method,
                    request.url,
                )
                await self._coordinator.end_session()
                return response

            await response.aclose()
            # Buffered bodies replay as sent; an unbuffered one-shot stream raises StreamConsumed.
            body = await request.aread()
            access_token = await self._coordinator.refreshed_token()
            self._logger.info("Replaying %s %s with refreshed token", request.method, request.url)

            headers = request.headers.copy()
            headers.pop("Transfer-Encoding", None)

            current = httpx.Request(
                method=request.method,
                url=request.url,
                headers=headers,
                content=body,
                extensions={**request.extensions, RETRY_EXTENSION: True},
            )
            current.headers["Authorization"] = f"Bearer {access_token}"

    async def aclose(self) -> None:
        await self._transport.aclose()


def build_request_authenticator(storage: SessionStorage):
    async def authenticate_request(request: httpx.Request) -> None:
        access_token = await storage.access_token()
        if access_token:
            request.headers["Authorization"] = f"Bearer {access_token}"

    return authenticate_request


async def log_error_response(response: httpx.Response) -> None:
    status_code = response.status_code
    if status_code < 400:
        return

    endpoint = str(response.request.url)
    LOGGER.warning(
        "API error status=%s method=%s endpoint=%s",
        status_code,
        response.request.method,
        endpoint,
    )
    if status_code == 403:
        LOGGER.warning("Access denied (insufficient permissions) endpoint=%s", endpoint)
    elif status_code == 404:
        LOGGER.warning("Resource not found endpoint=%s", endpoint)
    elif status_code >= 500:
        LOGGER.warning("Server error status=%s endpoint=%s", status_code, endpoint)
