from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StorageScope(str, Enum):
    DURABLE = "durable"
    EPHEMERAL = "ephemeral"

    @classmethod
    def for_remember_me(cls, remember_me: bool) -> "StorageScope":
        return cls.DURABLE if remember_me else cls.EPHEMERAL


@dataclass
class SessionCredentials:
    access_token: str
    refresh_token: str | None
    scope: StorageScope

    def to_payload(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "scope": self.scope.value,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "SessionCredentials":
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        scope = payload.get("scope")

        if not isinstance(access_token, str) or not access_token:
            raise RuntimeError("Stored session is missing access_token.")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise RuntimeError("Stored session refresh_token must be a string.")
        try:
            storage_scope = StorageScope(scope)
        except ValueError as error:
            raise RuntimeError(f"Stored session has an unknown scope: {scope!r}.") from error

        return cls(
            access_token=access_token,
            refresh_token=refresh_token or None,
            scope=storage_scope,
        )
