import pytest

from auth.session_storage import SessionStorage
from auth.token_store import FileTokenStore, MemoryTokenStore


@pytest.fixture
def durable_store(tmp_path) -> FileTokenStore:
    return FileTokenStore(tmp_path / "tokens.json")


@pytest.fixture
def ephemeral_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def storage(durable_store, ephemeral_store) -> SessionStorage:
    return SessionStorage(durable=durable_store, ephemeral=ephemeral_store)
