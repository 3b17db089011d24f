from __future__ import annotations

from typing import Any

from .client import ApiClient
from .endpoints import (
    ClientsEndpoints,
    DocumentsEndpoints,
    DossiersEndpoints,
    EvenementsEndpoints,
    FacturesEndpoints,
    MessagesEndpoints,
    NotesEndpoints,
    TachesEndpoints,
    UsersEndpoints,
)
from .errors import ApiError, handle_api_error

DEFAULT_TAKE = 10


def unwrap(payload: Any) -> Any:
    """Return the ``data`` member of a success envelope, or the payload itself."""
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


def _compact(params: dict | None) -> dict:
    return {key: value for key, value in (params or {}).items() if value is not None}


def _page_params(filters: dict | None, skip: int, take: int) -> dict:
    params = _compact(filters)
    params["skip"] = skip
    params["take"] = take
    return params


class BaseService:
    def __init__(self, client: ApiClient, endpoint: str) -> None:
        self.client = client
        self.endpoint = endpoint

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        try:
            return await self.client.request_json(method, path, json=json, params=params)
        except ApiError:
            raise
        except Exception as error:
            raise handle_api_error(error) from error

    async def _download(self, path: str, *, params: dict | None = None) -> bytes:
        try:
            response = await self.client.request("GET", path, params=params)
        except ApiError:
            raise
        except Exception as error:
            raise handle_api_error(error) from error
        return response.content

    async def get_all(self, params: dict | None = None) -> list:
        return unwrap(await self._call("GET", self.endpoint, params=params))

    async def get_all_paginated(self, params: dict | None = None) -> dict:
        return unwrap(await self._call("GET", self.endpoint, params=params))

    async def get_by_id(self, item_id: str) -> dict:
        return unwrap(await self._call("GET", f"{self.endpoint}/{item_id}"))

    async def create(self, data: dict) -> dict:
        return unwrap(await self._call("POST", self.endpoint, json=data))

    async def update(self, item_id: str, data: dict) -> dict:
        return unwrap(await self._call("PUT", f"{self.endpoint}/{item_id}", json=data))

    async def patch(self, item_id: str, data: dict) -> dict:
        return unwrap(await self._call("PATCH", f"{self.endpoint}/{item_id}", json=data))

    async def delete(self, item_id: str) -> None:
        await self._call("DELETE", f"{self.endpoint}/{item_id}")

    async def bulk_delete(self, ids: list[str]) -> None:
        await self._call("POST", f"{self.endpoint}/bulk-delete", json={"ids": ids})


class ClientsService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, ClientsEndpoints.root)

    async def list_clients(
        self, filters: dict | None = None, *, skip: int = 0, take: int = DEFAULT_TAKE
    ) -> dict:
        return unwrap(
            await self._call("GET", self.endpoint, params=_page_params(filters, skip, take))
        )

    async def change_status(self, client_id: str, statut: str) -> dict:
        return unwrap(
            await self._call("PATCH", ClientsEndpoints.status(client_id), json={"statut": statut})
        )

    async def bulk_delete_clients(self, ids: list[str]) -> dict:
        return unwrap(await self._call("DELETE", self.endpoint, json={"ids": ids}))

    async def client_dossiers(
        self, client_id: str, *, skip: int = 0, take: int = DEFAULT_TAKE
    ) -> dict:
        return unwrap(
            await self._call(
                "GET", ClientsEndpoints.dossiers(client_id), params={"skip": skip, "take": take}
            )
        )

    async def client_documents(
        self, client_id: str, *, skip: int = 0, take: int = DEFAULT_TAKE
    ) -> dict:
        return unwrap(
            await self._call(
                "GET", ClientsEndpoints.documents(client_id), params={"skip": skip, "take": take}
            )
        )


class DossiersService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, DossiersEndpoints.root)

    async def search(self, query: str, *, skip: int = 0, take: int = DEFAULT_TAKE) -> dict:
        return unwrap(
            await self._call(
                "GET", DossiersEndpoints.search, params=_page_params({"q": query}, skip, take)
            )
        )

    async def change_status(self, dossier_id: str, statut: str) -> dict:
        return unwrap(
            await self._call(
                "PATCH", DossiersEndpoints.status(dossier_id), json={"statut": statut}
            )
        )

    async def archive(self, dossier_id: str) -> dict:
        return await self.change_status(dossier_id, "ARCHIVE")

    async def reassign(self, dossier_id: str, responsable_id: str) -> dict:
        return unwrap(
            await self._call(
                "PATCH",
                DossiersEndpoints.assign(dossier_id),
                json={"responsableId": responsable_id},
            )
        )

    async def documents(self, dossier_id: str) -> list:
        return unwrap(await self._call("GET", DossiersEndpoints.documents(dossier_id)))

    async def timeline(self, dossier_id: str) -> list:
        return unwrap(await self._call("GET", DossiersEndpoints.timeline(dossier_id)))


class DocumentsService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, DocumentsEndpoints.root)

    async def versions(self, document_id: str) -> list:
        return unwrap(await self._call("GET", DocumentsEndpoints.versions(document_id)))


class TachesService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, TachesEndpoints.root)

    async def my_tasks(self) -> list:
        return unwrap(await self._call("GET", TachesEndpoints.my_tasks))

    async def assign(self, tache_id: str, user_id: str) -> dict:
        return unwrap(
            await self._call(
                "PATCH", TachesEndpoints.assign(tache_id), json={"assigneeId": user_id}
            )
        )

    async def update_status(self, tache_id: str, statut: str) -> dict:
        return unwrap(
            await self._call("PATCH", TachesEndpoints.status(tache_id), json={"statut": statut})
        )


class UsersService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, UsersEndpoints.root)

    async def my_profile(self) -> dict:
        return unwrap(await self._call("GET", UsersEndpoints.me))

    async def update_my_profile(self, data: dict) -> dict:
        return unwrap(await self._call("PATCH", UsersEndpoints.me, json=data))

    async def change_status(self, user_id: str, statut: str) -> dict:
        return unwrap(
            await self._call("PATCH", UsersEndpoints.status(user_id), json={"statut": statut})
        )


class FacturesService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, FacturesEndpoints.root)

    async def list_factures(
        self, filters: dict | None = None, pagination: dict | None = None
    ) -> dict:
        return await self.get_all_paginated({**_compact(filters), **_compact(pagination)})

    async def change_status(self, facture_id: str, statut: str) -> dict:
        return unwrap(
            await self._call(
                "PATCH", FacturesEndpoints.status(facture_id), json={"statut": statut}
            )
        )

    async def marquer_payee(self, facture_id: str) -> dict:
        return unwrap(await self._call("PATCH", FacturesEndpoints.mark_paid(facture_id)))

    async def generer_pdf(self, facture_id: str) -> bytes:
        return await self._download(FacturesEndpoints.pdf(facture_id))

    async def envoyer_par_email(self, facture_id: str, email: str | None = None) -> None:
        await self._call("POST", FacturesEndpoints.send_email(facture_id), json={"email": email})

    async def envoyer_relance(self, facture_id: str) -> None:
        await self._call("POST", FacturesEndpoints.send_reminder(facture_id))

    async def statistiques(self) -> dict:
        return unwrap(await self._call("GET", FacturesEndpoints.stats))

    async def impayees(self) -> list:
        return unwrap(await self._call("GET", FacturesEndpoints.unpaid))

    async def en_retard(self) -> list:
        return unwrap(await self._call("GET", FacturesEndpoints.overdue))

    async def exporter(self, filters: dict | None = None, format: str = "excel") -> bytes:
        return await self._download(
            FacturesEndpoints.export, params={**_compact(filters), "format": format}
        )

    async def dupliquer(self, facture_id: str) -> dict:
        return unwrap(await self._call("POST", FacturesEndpoints.duplicate(facture_id)))


class NotesService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, NotesEndpoints.root)

    async def list_notes(
        self, *, dossier_id: str | None = None, client_id: str | None = None
    ) -> list:
        return await self.get_all(_compact({"dossierId": dossier_id, "clientId": client_id}))


class MessagesService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, MessagesEndpoints.root)

    async def list_messages(self, dossier_id: str) -> list:
        return await self.get_all({"dossierId": dossier_id})

    async def add_reaction(self, message_id: str, utilisateur_id: str, reaction: str) -> dict:
        return unwrap(
            await self._call(
                "POST",
                MessagesEndpoints.reactions(message_id),
                json={"utilisateurId": utilisateur_id, "type": reaction},
            )
        )


class EvenementsService(BaseService):
    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, EvenementsEndpoints.root)

    async def list_evenements(
        self, filters: dict | None = None, pagination: dict | None = None
    ) -> dict:
        return await self.get_all_paginated({**_compact(filters), **_compact(pagination)})

    async def upcoming(self, utilisateur_id: str) -> list:
        return unwrap(
            await self._call(
                "GET", EvenementsEndpoints.upcoming, params={"utilisateurId": utilisateur_id}
            )
        )
