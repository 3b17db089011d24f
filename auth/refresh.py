from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

import httpx

from auth.session_storage import SessionStorage
from cabinet.constants import API_PREFIX, LOGGER, LOGIN_ROUTE
from cabinet.errors import SessionExpiredError

RefreshFn = Callable[[str], Awaitable[str]]
NavigateFn = Callable[[str], Awaitable[None]]
TokenListener = Callable[[str | None], None]


def refresh_url(api_url: str) -> str:
    return f"{api_url.rstrip('/')}{API_PREFIX}/auth/refresh"


async def refresh_access_token(
    api_url: str,
    refresh_token: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> str:
    own_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)

    try:
        response = await http_client.post(
            refresh_url(api_url),
            json={"refresh_token": refresh_token},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        detail = error.response.text
        raise RuntimeError(
            f"Refresh request failed with status {error.response.status_code}: {detail}"
        ) from error
    finally:
        if own_client:
            await http_client.aclose()

    payload = response.json()
    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not isinstance(access_token, str) or not access_token:
        raise RuntimeError("Refresh response missing access_token.")
    return access_token


async def log_navigation(route: str) -> None:
    LOGGER.warning("Session expired; login required at %s", route)


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshCoordinator:
    """Serializes token refreshes for one client.

    The first caller starts the refresh; callers arriving while it is in
    flight wait on a future and receive the same token (or the same error).
    The refresh runs in its own task, so cancelling the caller that started it
    leaves the queued callers waiting for the real outcome.
    """

    def __init__(
        self,
        storage: SessionStorage,
        refresh_fn: RefreshFn,
        *,
        on_session_expired: NavigateFn = log_navigation,
        on_token: TokenListener | None = None,
        login_route: str = LOGIN_ROUTE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._storage = storage
        self._refresh_fn = refresh_fn
        self._on_session_expired = on_session_expired
        self._on_token = on_token
        self._login_route = login_route
        self._logger = logger or LOGGER
        self._state = RefreshState.IDLE
        self._pending: list[asyncio.Future[str]] = []
        self._refresh_task: asyncio.Task[str] | None = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def refreshed_token(self) -> str:
        if self._state is RefreshState.REFRESHING:
            future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._pending.append(future)
            self._logger.debug("Refresh in flight; queued request (%s waiting)", len(self._pending))
            return await future

        self._state = RefreshState.REFRESHING
        task = asyncio.create_task(self._run_refresh())
        task.add_done_callback(self._refresh_done)
        self._refresh_task = task
        # Cancelling the caller must not abort the refresh the queue depends on.
        return await asyncio.shield(task)

    async def end_session(self) -> None:
        await self._storage.clear()
        if self._on_token is not None:
            self._on_token(None)
        await self._on_session_expired(self._login_route)

    async def _run_refresh(self) -> str:
        try:
            access_token = await self._obtain_token()
        except SessionExpiredError as error:
            for waiter in self._finish():
                if not waiter.done():
                    waiter.set_exception(error)
            await self.end_session()
            raise
        except BaseException:
            # Only reached when the loop itself tears the task down.
            for waiter in self._finish():
                waiter.cancel()
            raise

        waiters = self._finish()
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(access_token)
        self._logger.info("Access token refreshed; replaying %s queued request(s)", len(waiters))
        return access_token

    async def _obtain_token(self) -> str:
        refresh_token = await self._storage.refresh_token()
        if not refresh_token:
            self._logger.warning("No refresh token stored; skipping refresh")
            raise SessionExpiredError("No refresh token available; login required.")

        try:
            access_token = await self._refresh_fn(refresh_token)
            await self._storage.update_access_token(access_token)
        except Exception as error:
            self._logger.warning("Token refresh failed: %s", error)
            raise SessionExpiredError(f"Token refresh failed: {error}") from error

        if self._on_token is not None:
            self._on_token(access_token)
        return access_token

    def _refresh_done(self, task: asyncio.Task[str]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Retrieve the failure in case the caller that started it was cancelled.
        if not task.cancelled():
            task.exception()

    def _finish(self) -> list[asyncio.Future[str]]:
        waiters, self._pending = self._pending, []
        self._state = RefreshState.IDLE
        return waiters
