"""Task lists, status changes and the per-task timer."""
from __future__ import annotations

import logging
from typing import List, Optional

from ..api_client import ApiClient, unwrap_list
from ..errors import NotFound
from ..models import TASK_STATUSES, ActiveTimer, Task

logger = logging.getLogger(__name__)


def _tasks_from_tickets(tickets: list) -> List[dict]:
    """Flatten ``/client/tickets`` rows into task rows carrying their ticket/project context."""
    rows = []
    for ticket in tickets:
        if not isinstance(ticket, dict):
            continue
        project = ticket.get("project") or {}
        for task in ticket.get("tasks") or []:
            row = dict(task)
            row["project_name"] = project.get("name") or "Unknown Project"
            row["project_id"] = project.get("id")
            row["ticket_id"] = ticket.get("id")
            row["ticket_message"] = ticket.get("message") or "No message"
            if "title" not in row and "action" in row:
                row["title"] = row["action"]
            rows.append(row)
    return rows


class TaskService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_all_tasks(self) -> List[Task]:
        data = self.api.get("/admin/tasks")
        return Task.parse_many(unwrap_list(data, "tasks"))

    def get_my_tasks(self, status: Optional[str] = None) -> List[Task]:
        params = {"status": status} if status else None
        data = self.api.get("/tasks/my", params=params)
        return Task.parse_many(unwrap_list(data, "tasks"))

    def get_my_active_tasks(self) -> List[Task]:
        data = self.api.get("/tasks/my/active")
        return Task.parse_many(unwrap_list(data, "tasks"))

    def update_task_status(self, task_id: str, status: str) -> None:
        if status not in TASK_STATUSES:
            raise ValueError(f"Unknown task status: {status}")
        self.api.patch(f"/tasks/{task_id}/status", json={"status": status})
        logger.info("Task %s -> %s", task_id, status)

    def get_client_tasks(self) -> List[Task]:
        data = self.api.get("/client/tickets")
        return Task.parse_many(_tasks_from_tickets(unwrap_list(data, "tickets")))

    # ---- Timer ----

    def start_timer(self, task_id: str) -> None:
        self.api.post(f"/tasks/{task_id}/timer/start", expected=(200, 201))

    def pause_timer(self, task_id: str, note: Optional[str] = None) -> None:
        self.api.patch(f"/tasks/{task_id}/timer/pause", json={"note": note} if note else {})

    def resume_timer(self, task_id: str, note: Optional[str] = None) -> None:
        self.api.patch(f"/tasks/{task_id}/timer/resume", json={"note": note} if note else {})

    def stop_timer(self, task_id: str) -> None:
        self.api.post(f"/tasks/{task_id}/timer/stop")

    def get_active_timer(self) -> Optional[ActiveTimer]:
        """The user's running or paused timer, or None."""
        try:
            data = self.api.get("/tasks/timer/active")
        except NotFound:
            return None
        if isinstance(data, dict):
            for key in ("timer", "active_timer"):
                if key in data:
                    data = data[key]
                    break
        if not data:
            return None
        return ActiveTimer.parse(data)
