"""Staff roster with task workload."""
from __future__ import annotations

from typing import Any, Dict, List

from ..api_client import ApiClient, unwrap_list
from ..errors import NotFound
from ..models import TeamMember
from .projects import average


class StaffService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_staff_members(self) -> List[TeamMember]:
        data = self.api.get("/admin/users/staff")
        return [TeamMember.from_staff_row(row) for row in unwrap_list(data, "staff")]

    def get_staff_member(self, staff_id: str) -> TeamMember:
        for member in self.get_staff_members():
            if member.id == staff_id:
                return member
        raise NotFound("Staff member not found")

    def get_staff_statistics(self) -> Dict[str, Any]:
        members = self.get_staff_members()
        return staff_statistics(members)


def staff_statistics(members: List[TeamMember]) -> Dict[str, Any]:
    total = len(members)
    active = sum(m.active_tasks for m in members)
    return {
        "total_staff": total,
        "total_active_tasks": active,
        "total_assigned_tasks": sum(m.total_tasks for m in members),
        "available_members": sum(1 for m in members if m.active_tasks == 0),
        "busy_members": sum(1 for m in members if m.active_tasks > 5),
        "average_workload": average(active, total),
    }
