import asyncio

import httpx

from auth.session_storage import SessionStorage
from cabinet.client import ApiClient

API_URL = "https://api.cabinet.test"
VALID_TOKEN = "new-token"


class RefreshRecorder:
    def __init__(
        self,
        token: str = VALID_TOKEN,
        *,
        error: Exception | None = None,
        release: asyncio.Event | None = None,
    ) -> None:
        self.token = token
        self.error = error
        self.release = release
        self.calls: list[str] = []

    async def __call__(self, refresh_token: str) -> str:
        self.calls.append(refresh_token)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.token


class NavigationRecorder:
    def __init__(self) -> None:
        self.routes: list[str] = []

    async def __call__(self, route: str) -> None:
        self.routes.append(route)


def _make_api_handler(valid_token: str = VALID_TOKEN, statuses: dict[str, int] | None = None):
    calls: list[tuple[str, str | None]] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        authorization = request.headers.get("authorization")
        calls.append((request.url.path, authorization))

        status = (statuses or {}).get(request.url.path)
        if status is not None:
            return httpx.Response(
                status,
                request=request,
                json={"success": False, "error": {"code": "API", "message": f"status {status}"}},
            )

        if authorization == f"Bearer {valid_token}":
            return httpx.Response(
                200,
                request=request,
                json={"success": True, "data": {"path": request.url.path}},
            )
        return httpx.Response(
            401,
            request=request,
            json={"success": False, "error": {"code": "TOKEN_EXPIRED", "message": "expired"}},
        )

    return handler, calls


def _build_client(
    storage: SessionStorage,
    handler,
    *,
    refresh_fn=None,
    navigate=None,
) -> ApiClient:
    return ApiClient(
        API_URL,
        storage=storage,
        transport=httpx.MockTransport(handler),
        refresh_fn=refresh_fn or RefreshRecorder(),
        on_session_expired=navigate or NavigationRecorder(),
    )
