from __future__ import annotations

from typing import Any

import httpx

ERROR_MESSAGES: dict[str, str] = {
    "INVALID_CREDENTIALS": "Email ou mot de passe incorrect",
    "TOKEN_EXPIRED": "Votre session a expiré, veuillez vous reconnecter",
    "UNAUTHORIZED": "Vous n'êtes pas autorisé à effectuer cette action",
    "VALIDATION_ERROR": "Les données fournies sont invalides",
    "MISSING_FIELD": "Un champ obligatoire est manquant",
    "NOT_FOUND": "La ressource demandée n'existe pas",
    "ALREADY_EXISTS": "Cette ressource existe déjà",
    "FORBIDDEN": "Vous n'avez pas les permissions nécessaires",
    "SERVER_ERROR": "Une erreur serveur est survenue",
    "NETWORK_ERROR": "Erreur de connexion au serveur",
}

DEFAULT_MESSAGE = "Une erreur est survenue"


class ApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 500,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class SessionExpiredError(ApiError):
    """Raised when the session cannot be renewed and the user must log in again."""

    def __init__(self, message: str = "Session expired; login required.") -> None:
        super().__init__(message, code="TOKEN_EXPIRED", status_code=401)


def _error_envelope(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        return {}
    if not isinstance(payload, dict):
        return {}
    error = payload.get("error")
    if isinstance(error, dict):
        return error
    # Some endpoints answer with a flat {"message": ...} body.
    return {"message": payload["message"]} if isinstance(payload.get("message"), str) else {}


def handle_api_error(error: BaseException) -> ApiError:
    if isinstance(error, ApiError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        envelope = _error_envelope(error.response)
        return ApiError(
            envelope.get("message") or str(error) or DEFAULT_MESSAGE,
            envelope.get("code") or "API_ERROR",
            error.response.status_code,
            envelope.get("details"),
        )

    if isinstance(error, httpx.TransportError):
        return ApiError(str(error) or ERROR_MESSAGES["NETWORK_ERROR"], "NETWORK_ERROR", 500)

    return ApiError(str(error) or DEFAULT_MESSAGE, "CLIENT_ERROR", 500)


def get_error_message(error: BaseException) -> str:
    if isinstance(error, ApiError):
        return ERROR_MESSAGES.get(error.code) or error.message
    return str(error) or DEFAULT_MESSAGE
