"""Admin ticket triage: pending tickets, assignable staff and task creation."""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..api_client import ApiClient, unwrap_list
from ..errors import ApiError, NotFound
from ..models import ROLE_ADMIN, TICKET_ACCEPTED, TICKET_PROCESSING, TICKET_TO_READ, TaskDraft, Ticket, User

logger = logging.getLogger(__name__)

PENDING_STATUSES = (TICKET_TO_READ, TICKET_PROCESSING)


class AdminTicketService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_tickets_for_admin(self) -> List[Ticket]:
        """Tickets still needing attention, collected from every project."""
        projects = unwrap_list(self.api.get("/admin/projects"), "projects", "data", "results")
        rows = []
        for project in projects:
            if not isinstance(project, dict):
                continue
            for ticket in project.get("tickets") or []:
                if not isinstance(ticket, dict):
                    continue
                if str(ticket.get("status") or "") not in PENDING_STATUSES:
                    continue
                row = dict(ticket)
                row["project_name"] = project.get("name")
                row["project_id"] = project.get("id")
                rows.append(row)
        return Ticket.parse_many(rows)

    def get_staff_members(self) -> List[User]:
        """Everyone a task can be assigned to: staff plus admins, unique by id."""
        staff_payload = self.api.get("/admin/users/staff")
        users = User.parse_many(unwrap_list(staff_payload, "staff", "users"))
        seen = {u.id for u in users}

        try:
            all_users = unwrap_list(self.api.get("/admin/users"), "users")
        except ApiError as exc:
            logger.warning("Could not load admin users for assignment: %s", exc)
            return users

        for row in all_users:
            if isinstance(row, dict) and row.get("role") == ROLE_ADMIN:
                user = User.parse(row)
                if user.id not in seen:
                    seen.add(user.id)
                    users.append(user)
        return users

    def get_ticket_details(self, ticket_id: str) -> Ticket:
        try:
            data = self.api.get(f"/admin/tickets/{ticket_id}")
        except NotFound as exc:
            raise NotFound("Ticket not found", exc.status_code, exc.detail) from exc
        if isinstance(data, dict) and isinstance(data.get("ticket"), dict):
            data = data["ticket"]
        return Ticket.parse(data)

    def create_tasks_for_ticket(self, ticket_id: str, drafts: Sequence[TaskDraft]) -> Dict[str, object]:
        """Create tasks for a ticket, then try to move the ticket to accepted.

        The status follow-up is best effort: its failure is logged and
        reported back as ``ticket_accepted=False``, never raised.
        """
        if not drafts:
            raise ValueError("At least one task is required")
        data = self.api.post(
            f"/admin/tickets/{ticket_id}/tasks",
            json={"tasks": [d.to_json() for d in drafts]},
            expected=(200, 201),
        )
        accepted = self._accept_ticket(ticket_id)
        return {"response": data, "created": len(drafts), "ticket_accepted": accepted}

    def _accept_ticket(self, ticket_id: str) -> bool:
        try:
            self.api.patch(f"/admin/tickets/{ticket_id}", json={"status": TICKET_ACCEPTED}, expected=(200, 204))
        except ApiError as exc:
            logger.warning("Tasks created but ticket %s was not moved to accepted: %s", ticket_id, exc)
            return False
        return True
