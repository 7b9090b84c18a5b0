"""Role-specific dashboard summaries."""
from __future__ import annotations

from ..api_client import ApiClient
from ..errors import ParseError
from ..models import ClientDashboardData, DashboardData, StaffDashboardData


def _object(data: object, path: str) -> dict:
    if not isinstance(data, dict):
        raise ParseError(f"Expected an object from {path}")
    return data


class DashboardService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_admin_dashboard(self) -> DashboardData:
        return DashboardData.from_payload(_object(self.api.get("/admin/dashboard"), "/admin/dashboard"))

    def get_client_dashboard(self) -> ClientDashboardData:
        return ClientDashboardData.from_payload(_object(self.api.get("/client/projects"), "/client/projects"))

    def get_staff_dashboard(self) -> StaffDashboardData:
        active = _object(self.api.get("/tasks/my/active"), "/tasks/my/active")
        everything = _object(self.api.get("/tasks/my"), "/tasks/my")
        return StaffDashboardData.from_payloads(active, everything)
