from __future__ import annotations

from dataclasses import replace

from auth.models import SessionCredentials, StorageScope
from auth.token_store import MemoryTokenStore, TokenStore

DEFAULT_SESSION_KEY = "default"


class SessionStorage:
    """Holds the live credential pair in exactly one of two storage scopes.

    The durable scope backs "remember me" sessions and survives restarts; the
    ephemeral scope lives only as long as the process. The scope is recorded
    in the stored credentials, so refreshes write back to where the session
    already lives.
    """

    def __init__(
        self,
        *,
        durable: TokenStore,
        ephemeral: TokenStore | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        self._stores: dict[StorageScope, TokenStore] = {
            StorageScope.DURABLE: durable,
            StorageScope.EPHEMERAL: ephemeral or MemoryTokenStore(),
        }
        self.session_key = session_key

    def store_for(self, scope: StorageScope) -> TokenStore:
        return self._stores[scope]

    async def load(self) -> SessionCredentials | None:
        for scope in (StorageScope.DURABLE, StorageScope.EPHEMERAL):
            credentials = await self._stores[scope].get(self.session_key)
            if credentials is not None:
                return credentials
        return None

    async def access_token(self) -> str | None:
        credentials = await self.load()
        return credentials.access_token if credentials else None

    async def refresh_token(self) -> str | None:
        credentials = await self.load()
        return credentials.refresh_token if credentials else None

    async def save(self, credentials: SessionCredentials) -> None:
        for scope, store in self._stores.items():
            if scope is not credentials.scope:
                await store.delete(self.session_key)
        await self._stores[credentials.scope].set(self.session_key, credentials)

    async def update_access_token(self, access_token: str) -> SessionCredentials:
        current = await self.load()
        if current is None:
            raise RuntimeError("No session to update; login required.")
        updated = replace(current, access_token=access_token)
        await self._stores[current.scope].set(self.session_key, updated)
        return updated

    async def clear(self) -> None:
        for store in self._stores.values():
            await store.delete(self.session_key)
