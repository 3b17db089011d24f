from __future__ import annotations

from cabinet.client import ApiClient
from cabinet.constants import LOGGER
from cabinet.endpoints import AuthEndpoints
from cabinet.errors import ApiError


class AuthSession:
    """Login, logout and password flows on top of an :class:`ApiClient`."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.user: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def login(self, email: str, password: str, *, remember_me: bool = False) -> dict:
        payload = await self.client.post(
            AuthEndpoints.login,
            {"email": email, "motDePasse": password},
        )
        if not isinstance(payload, dict):
            raise ApiError("Login response is not a JSON object.", "CLIENT_ERROR")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ApiError("Login response missing access_token.", "CLIENT_ERROR")
        refresh_token = payload.get("refresh_token")
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = None

        await self.client.set_auth_token(
            access_token, remember_me, refresh_token=refresh_token
        )
        LOGGER.info("Logged in as %s (remember_me=%s)", email, remember_me)

        profile = await self.fetch_profile()
        if profile is None:
            profile = payload.get("user") or payload.get("utilisateur")
            self.user = profile if isinstance(profile, dict) else None
        return self.user or {}

    async def fetch_profile(self) -> dict | None:
        try:
            payload = await self.client.get(AuthEndpoints.profile)
        except ApiError as error:
            LOGGER.info("Profile unavailable (%s): user is not authenticated", error.status_code)
            self.user = None
            return None

        user = payload.get("utilisateur") if isinstance(payload, dict) else None
        self.user = user if isinstance(user, dict) else None
        return self.user

    async def logout(self) -> None:
        try:
            await self.client.post(AuthEndpoints.logout)
        except ApiError as error:
            LOGGER.warning("Logout request failed: %s", error)
        finally:
            await self.client.clear_auth_token()
            self.user = None

    async def forgot_password(self, email: str) -> None:
        await self.client.post(AuthEndpoints.forgot_password, {"email": email})

    async def reset_password(self, token: str, password: str) -> None:
        await self.client.post(
            AuthEndpoints.reset_password,
            {"token": token, "motDePasse": password},
        )

    async def change_password(self, old_password: str, new_password: str) -> None:
        await self.client.post(
            AuthEndpoints.change_password,
            {"ancienMotDePasse": old_password, "nouveauMotDePasse": new_password},
        )
