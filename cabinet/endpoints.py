from __future__ import annotations


class AuthEndpoints:
    login = "/auth/login"
    register = "/auth/register"
    logout = "/auth/logout"
    refresh = "/auth/refresh"
    forgot_password = "/auth/forgot-password"
    reset_password = "/auth/reset-password"
    change_password = "/auth/change-password"
    profile = "/auth/profile"


class UsersEndpoints:
    root = "/users"
    search = "/users/search"
    stats = "/users/stats"
    roles = "/users/roles"
    me = "/users/me"
    bulk_action = "/users/bulk-action"

    @staticmethod
    def by_id(user_id: str) -> str:
        return f"/users/{user_id}"

    @staticmethod
    def status(user_id: str) -> str:
        return f"/users/{user_id}/status"


class ClientsEndpoints:
    root = "/clients"
    search = "/clients/search"
    stats = "/clients/stats"
    bulk_action = "/clients/bulk-action"

    @staticmethod
    def by_id(client_id: str) -> str:
        return f"/clients/{client_id}"

    @staticmethod
    def status(client_id: str) -> str:
        return f"/clients/{client_id}/status"

    @staticmethod
    def dossiers(client_id: str) -> str:
        return f"/clients/{client_id}/dossiers"

    @staticmethod
    def documents(client_id: str) -> str:
        return f"/clients/{client_id}/documents"


class DossiersEndpoints:
    root = "/dossiers"
    search = "/dossiers/search"

    @staticmethod
    def by_id(dossier_id: str) -> str:
        return f"/dossiers/{dossier_id}"

    @staticmethod
    def status(dossier_id: str) -> str:
        return f"/dossiers/{dossier_id}/status"

    @staticmethod
    def assign(dossier_id: str) -> str:
        return f"/dossiers/{dossier_id}/assign"

    @staticmethod
    def documents(dossier_id: str) -> str:
        return f"/dossiers/{dossier_id}/documents"

    @staticmethod
    def timeline(dossier_id: str) -> str:
        return f"/dossiers/{dossier_id}/timeline"


class DocumentsEndpoints:
    root = "/documents"
    search = "/documents/search"

    @staticmethod
    def by_id(document_id: str) -> str:
        return f"/documents/{document_id}"

    @staticmethod
    def versions(document_id: str) -> str:
        return f"/documents/{document_id}/versions"


class TachesEndpoints:
    root = "/taches"
    my_tasks = "/taches/my-tasks"
    team_tasks = "/taches/team-tasks"

    @staticmethod
    def by_id(tache_id: str) -> str:
        return f"/taches/{tache_id}"

    @staticmethod
    def assign(tache_id: str) -> str:
        return f"/taches/{tache_id}/assign"

    @staticmethod
    def status(tache_id: str) -> str:
        return f"/taches/{tache_id}/status"


class FacturesEndpoints:
    root = "/factures"
    stats = "/factures/stats"
    unpaid = "/factures/unpaid"
    overdue = "/factures/overdue"
    export = "/factures/export"

    @staticmethod
    def by_id(facture_id: str) -> str:
        return f"/factures/{facture_id}"

    @staticmethod
    def status(facture_id: str) -> str:
        return f"/factures/{facture_id}/status"

    @staticmethod
    def mark_paid(facture_id: str) -> str:
        return f"/factures/{facture_id}/mark-paid"

    @staticmethod
    def pdf(facture_id: str) -> str:
        return f"/factures/{facture_id}/pdf"

    @staticmethod
    def send_email(facture_id: str) -> str:
        return f"/factures/{facture_id}/send-email"

    @staticmethod
    def send_reminder(facture_id: str) -> str:
        return f"/factures/{facture_id}/send-reminder"

    @staticmethod
    def duplicate(facture_id: str) -> str:
        return f"/factures/{facture_id}/duplicate"


class NotesEndpoints:
    root = "/notes"

    @staticmethod
    def by_id(note_id: str) -> str:
        return f"/notes/{note_id}"


class MessagesEndpoints:
    root = "/messages"

    @staticmethod
    def by_id(message_id: str) -> str:
        return f"/messages/{message_id}"

    @staticmethod
    def reactions(message_id: str) -> str:
        return f"/messages/{message_id}/reactions"


class EvenementsEndpoints:
    root = "/evenements"
    upcoming = "/evenements/upcoming"

    @staticmethod
    def by_id(evenement_id: str) -> str:
        return f"/evenements/{evenement_id}"
