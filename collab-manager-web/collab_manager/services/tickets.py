"""Client ticket submission and lookup."""
from __future__ import annotations

import logging
from typing import List

from ..api_client import ApiClient, unwrap_list
from ..errors import NotFound
from ..models import TICKET_STATUSES, Ticket

logger = logging.getLogger(__name__)


def _ticket_from(data: object) -> object:
    if isinstance(data, dict) and isinstance(data.get("ticket"), dict):
        return data["ticket"]
    return data


class TicketService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def create_ticket(self, project_id: str, message: str) -> Ticket:
        try:
            data = self.api.post(
                f"/client/projects/{project_id}/tickets",
                json={"message": message},
                expected=(200, 201),
            )
        except NotFound as exc:
            raise NotFound("Project not found or you don't have access to it.", exc.status_code, exc.detail) from exc
        ticket = Ticket.parse(_ticket_from(data))
        logger.info("Ticket created: %s", ticket.id)
        return ticket

    def get_client_tickets(self) -> List[Ticket]:
        return Ticket.parse_many(unwrap_list(self.api.get("/client/tickets"), "tickets"))

    def get_ticket_details(self, ticket_id: str) -> Ticket:
        try:
            data = self.api.get(f"/client/tickets/{ticket_id}")
        except NotFound as exc:
            raise NotFound("Ticket not found.", exc.status_code, exc.detail) from exc
        return Ticket.parse(_ticket_from(data))

    def update_ticket_status(self, ticket_id: str, status: str) -> None:
        """Admin-only status change."""
        if status not in TICKET_STATUSES:
            raise ValueError(f"Unknown ticket status: {status}")
        self.api.patch(f"/admin/tickets/{ticket_id}/status", json={"status": status})
