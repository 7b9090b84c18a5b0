"""Client accounts (admin only)."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..api_client import ApiClient, unwrap_list
from ..errors import Conflict, ValidationFailed
from ..models import Client, CreateClientRequest
from .projects import average

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_all_clients(self) -> List[Client]:
        data = self.api.get("/admin/users/clients")
        return Client.parse_many(unwrap_list(data, "clients"))

    def create_client(self, request: CreateClientRequest) -> Client:
        try:
            data = self.api.post("/auth/register", json=request.to_json(), expected=(201,))
        except ValidationFailed as exc:
            raise ValidationFailed(
                f"Invalid client data: {exc.detail or 'Unknown error'}", exc.status_code, exc.detail
            ) from exc
        except Conflict as exc:
            raise Conflict("A client with this email already exists", exc.status_code, exc.detail) from exc

        user = (data.get("user") or data) if isinstance(data, dict) else {}
        client = Client.parse(
            {
                **user,
                "email": user.get("email") or request.email,
                "full_name": user.get("full_name") or request.full_name,
                # a new account has no projects yet
                "active_projects_count": 0,
                "total_projects_count": 0,
            }
        )
        logger.info("Client created: %s", client.email)
        return client

    def get_client_statistics(self) -> Dict[str, Any]:
        return client_statistics(self.get_all_clients())


def client_statistics(clients: List[Client]) -> Dict[str, Any]:
    total = len(clients)
    active_projects = sum(c.active_projects_count for c in clients)
    return {
        "total_clients": total,
        "active_clients": sum(1 for c in clients if c.is_active),
        "clients_with_projects": sum(1 for c in clients if c.active_projects_count > 0),
        "total_active_projects": active_projects,
        "total_projects": sum(c.total_projects_count for c in clients),
        "average_projects_per_client": average(active_projects, total),
    }
