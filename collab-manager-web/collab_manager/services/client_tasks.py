"""Per-project task progress for the signed-in client."""
from __future__ import annotations

from typing import Dict, Optional

from ..api_client import ApiClient, unwrap_list
from ..models import TASK_COMPLETED, TASK_IN_PROGRESS, ProjectTaskStats


class ClientTaskService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_project_task_stats(self) -> Dict[str, ProjectTaskStats]:
        """Task counts grouped by project, keyed by project id."""
        tickets = unwrap_list(self.api.get("/client/tickets"), "tickets")
        counts: Dict[str, dict] = {}
        for ticket in tickets:
            if not isinstance(ticket, dict):
                continue
            project = ticket.get("project")
            if not isinstance(project, dict) or project.get("id") is None:
                continue
            key = str(project["id"])
            entry = counts.setdefault(
                key,
                {"project_id": key, "project_name": project.get("name") or "Unknown Project",
                 "active_tasks": 0, "completed_tasks": 0, "total_tasks": 0},
            )
            for task in ticket.get("tasks") or []:
                status = (task or {}).get("status") or ""
                entry["total_tasks"] += 1
                if status == TASK_IN_PROGRESS:
                    entry["active_tasks"] += 1
                elif status == TASK_COMPLETED:
                    entry["completed_tasks"] += 1
        return {key: ProjectTaskStats.parse(entry) for key, entry in counts.items()}

    def get_project_task_stats_by_id(self, project_id: str) -> Optional[ProjectTaskStats]:
        return self.get_project_task_stats().get(str(project_id))
