from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from auth.models import SessionCredentials

FILE_FORMAT_VERSION = 1


class TokenStore(ABC):
    """One storage scope: session key -> serialized ``SessionCredentials``.

    Subclasses only load and persist the raw ``{session_key: payload}``
    mapping; payload validation happens here on the way out.
    """

    async def get(self, session_key: str) -> SessionCredentials | None:
        payload = self._load_sessions().get(session_key)
        if payload is None:
            return None
        return SessionCredentials.from_payload(payload)

    async def set(self, session_key: str, data: SessionCredentials) -> None:
        sessions = self._load_sessions()
        sessions[session_key] = data.to_payload()
        self._save_sessions(sessions)

    async def delete(self, session_key: str) -> None:
        sessions = self._load_sessions()
        if sessions.pop(session_key, None) is None:
            return
        self._save_sessions(sessions)

    @abstractmethod
    def _load_sessions(self) -> dict[str, dict]:
        raise NotImplementedError

    @abstractmethod
    def _save_sessions(self, sessions: dict[str, dict]) -> None:
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    """Process-lifetime scope. Callers get fresh objects, never shared state."""

    def __init__(self) -> None:
        self._sessions: dict[str, dict] = {}

    def _load_sessions(self) -> dict[str, dict]:
        return {key: dict(payload) for key, payload in self._sessions.items()}

    def _save_sessions(self, sessions: dict[str, dict]) -> None:
        self._sessions = sessions


class FileTokenStore(TokenStore):
    """Durable scope backed by a JSON file: ``{"version": 1, "sessions": {...}}``."""

    def __init__(self, path: str | Path = ".cabinet_tokens.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load_sessions(self) -> dict[str, dict]:
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}

        sessions = document.get("sessions") if isinstance(document, dict) else None
        if not isinstance(sessions, dict):
            raise RuntimeError(
                f"Token store {self._path} is invalid; expected a 'sessions' object."
            )
        return sessions

    def _save_sessions(self, sessions: dict[str, dict]) -> None:
        document = {"version": FILE_FORMAT_VERSION, "sessions": sessions}
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            json.dump(document, handle, indent=2, sort_keys=True)
        try:
            os.replace(handle.name, self._path)
        except OSError:
            os.unlink(handle.name)
            raise
