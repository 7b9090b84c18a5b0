"""Projects for admins/staff and for the signed-in client."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..api_client import ApiClient, unwrap_list
from ..models import Client, CreateProjectRequest, Project

logger = logging.getLogger(__name__)

ACTIVE_PROJECT_STATUSES = ("in_development", "active")


def average(total: int, count: int) -> str:
    """One-decimal average as shown on the dashboards; ``"0"`` when there is nothing to average."""
    if count <= 0:
        return "0"
    return f"{total / count:.1f}"


class ProjectService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_all_projects(self) -> List[Project]:
        data = self.api.get("/admin/projects")
        return Project.parse_many(unwrap_list(data, "projects", "data", "results"))

    def get_client_projects(self) -> List[Project]:
        data = self.api.get("/client/projects")
        return Project.parse_many(unwrap_list(data, "projects"))

    def get_all_clients(self) -> List[Client]:
        data = self.api.get("/admin/users/clients")
        return Client.parse_many(unwrap_list(data, "clients"))

    def create_project(self, request: CreateProjectRequest) -> Project:
        data = self.api.post("/admin/projects", json=request.to_json(), expected=(200, 201))
        if isinstance(data, dict) and isinstance(data.get("project"), dict):
            data = data["project"]
        project = Project.parse(data)
        logger.info("Project created: %s (%s)", project.name, project.id)
        return project

    def get_project_statistics(self) -> Dict[str, Any]:
        return project_statistics(self.get_all_projects())


def project_statistics(projects: List[Project]) -> Dict[str, Any]:
    total = len(projects)
    open_tickets = sum(p.open_tickets_count for p in projects)
    return {
        "total_projects": total,
        "active_projects": sum(1 for p in projects if p.status in ACTIVE_PROJECT_STATUSES),
        "completed_projects": sum(1 for p in projects if p.status == "completed"),
        "total_open_tickets": open_tickets,
        "total_open_tasks": sum(p.open_tasks_count for p in projects),
        "average_tickets_per_project": average(open_tickets, total),
    }
