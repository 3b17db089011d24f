import asyncio
import json

import pytest

from auth.models import SessionCredentials, StorageScope
from auth.refresh import RefreshCoordinator, RefreshState, refresh_access_token, refresh_url
from cabinet.errors import SessionExpiredError
from tests.helpers import API_URL, NavigationRecorder, RefreshRecorder

REFRESH_URL = f"{API_URL}/api/v1/auth/refresh"


def test_refresh_url() -> None:
    assert refresh_url(API_URL + "/") == REFRESH_URL


@pytest.mark.asyncio
async def test_refresh_access_token_success(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", json={"access_token": "access-2"})

    token = await refresh_access_token(API_URL, "refresh-1")

    assert token == "access-2"
    request = httpx_mock.get_request()
    assert json.loads(request.content) == {"refresh_token": "refresh-1"}


@pytest.mark.asyncio
async def test_refresh_access_token_error(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", status_code=401, text="expired")

    with pytest.raises(RuntimeError, match="Refresh request failed with status 401"):
        await refresh_access_token(API_URL, "refresh-1")


@pytest.mark.asyncio
async def test_refresh_access_token_missing_token(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", json={"token": "nope"})

    with pytest.raises(RuntimeError, match="missing access_token"):
        await refresh_access_token(API_URL, "refresh-1")


@pytest.mark.asyncio
async def test_coordinator_success_updates_storage(storage) -> None:
    await storage.save(SessionCredentials("old", "refresh-1", StorageScope.EPHEMERAL))
    seen: list[str | None] = []
    refresh = RefreshRecorder("fresh")
    coordinator = RefreshCoordinator(storage, refresh, on_token=seen.append)

    token = await coordinator.refreshed_token()

    assert token == "fresh"
    assert refresh.calls == ["refresh-1"]
    assert seen == ["fresh"]
    assert await storage.access_token() == "fresh"
    assert coordinator.state is RefreshState.IDLE


@pytest.mark.asyncio
async def test_coordinator_queues_while_refreshing(storage) -> None:
    await storage.save(SessionCredentials("old", "refresh-1", StorageScope.EPHEMERAL))
    release = asyncio.Event()
    refresh = RefreshRecorder("fresh", release=release)
    coordinator = RefreshCoordinator(storage, refresh)

    first = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    assert coordinator.state is RefreshState.REFRESHING

    waiters = [asyncio.create_task(coordinator.refreshed_token()) for _ in range(3)]
    await asyncio.sleep(0)
    assert coordinator.pending_count == 3

    release.set()
    results = await asyncio.gather(first, *waiters)

    assert results == ["fresh"] * 4
    assert refresh.calls == ["refresh-1"]
    assert coordinator.pending_count == 0
    assert coordinator.state is RefreshState.IDLE


@pytest.mark.asyncio
async def test_coordinator_failure_rejects_waiters_and_clears(storage) -> None:
    await storage.save(SessionCredentials("old", "refresh-1", StorageScope.DURABLE))
    release = asyncio.Event()
    refresh = RefreshRecorder(error=RuntimeError("refresh revoked"), release=release)
    navigate = NavigationRecorder()
    seen: list[str | None] = []
    coordinator = RefreshCoordinator(
        storage, refresh, on_session_expired=navigate, on_token=seen.append
    )

    first = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    waiter = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, waiter, return_exceptions=True)

    assert all(isinstance(result, SessionExpiredError) for result in results)
    assert isinstance(results[0].__cause__, RuntimeError)
    assert await storage.load() is None
    assert navigate.routes == ["/login"]
    assert seen == [None]
    assert coordinator.state is RefreshState.IDLE


@pytest.mark.asyncio
async def test_coordinator_without_refresh_token_skips_call(storage) -> None:
    await storage.save(SessionCredentials("old", None, StorageScope.EPHEMERAL))
    refresh = RefreshRecorder()
    navigate = NavigationRecorder()
    coordinator = RefreshCoordinator(storage, refresh, on_session_expired=navigate)

    with pytest.raises(SessionExpiredError, match="No refresh token"):
        await coordinator.refreshed_token()

    assert refresh.calls == []
    assert navigate.routes == ["/login"]
    assert await storage.load() is None


@pytest.mark.asyncio
async def test_coordinator_can_refresh_again_after_failure(storage) -> None:
    refresh = RefreshRecorder("fresh")
    coordinator = RefreshCoordinator(storage, refresh, on_session_expired=NavigationRecorder())

    with pytest.raises(SessionExpiredError):
        await coordinator.refreshed_token()

    await storage.save(SessionCredentials("old", "refresh-2", StorageScope.EPHEMERAL))

    assert await coordinator.refreshed_token() == "fresh"
    assert refresh.calls == ["refresh-2"]


@pytest.mark.asyncio
async def test_cancelling_refreshing_caller_still_resolves_queue(storage) -> None:
    await storage.save(SessionCredentials("old", "refresh-1", StorageScope.EPHEMERAL))
    release = asyncio.Event()
    refresh = RefreshRecorder("fresh", release=release)
    coordinator = RefreshCoordinator(storage, refresh)

    first = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    queued = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    assert coordinator.pending_count == 1

    first.cancel()
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, queued, return_exceptions=True)

    assert isinstance(results[0], asyncio.CancelledError)
    assert results[1] == "fresh"
    assert refresh.calls == ["refresh-1"]
    assert await storage.access_token() == "fresh"
    assert coordinator.state is RefreshState.IDLE


@pytest.mark.asyncio
async def test_cancelling_refreshing_caller_still_rejects_queue_on_failure(storage) -> None:
    await storage.save(SessionCredentials("old", "refresh-1", StorageScope.DURABLE))
    release = asyncio.Event()
    refresh = RefreshRecorder(error=RuntimeError("refresh revoked"), release=release)
    navigate = NavigationRecorder()
    coordinator = RefreshCoordinator(storage, refresh, on_session_expired=navigate)

    first = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)
    queued = asyncio.create_task(coordinator.refreshed_token())
    await asyncio.sleep(0)

    first.cancel()
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, queued, return_exceptions=True)

    assert isinstance(results[0], asyncio.CancelledError)
    assert isinstance(results[1], SessionExpiredError)
    # Teardown finishes in the background task after the queue is rejected.
    for _ in range(5):
        await asyncio.sleep(0)
    assert navigate.routes == ["/login"]
    assert await storage.load() is None
