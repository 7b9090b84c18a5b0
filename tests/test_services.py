import pytest

from collab_manager.errors import ApiError, Conflict, NotFound, ValidationFailed
from collab_manager.models import CreateClientRequest, TaskDraft
from collab_manager.services import (
    AdminTicketService,
    ClientService,
    ClientTaskService,
    DashboardService,
    ProjectService,
    StaffService,
    TaskService,
    TicketService,
)
from collab_manager.services.projects import average

CLIENT_TICKETS = {
    "tickets": [
        {
            "id": 1,
            "message": "New landing page",
            "project": {"id": 10, "name": "Aura"},
            "tasks": [
                {"id": 100, "action": "Design", "status": "completed"},
                {"id": 101, "action": "Build", "status": "in_progress"},
            ],
        },
        {"id": 2, "message": "Logo", "project": {"id": 11, "name": "Nordic"}, "tasks": []},
    ]
}


def test_my_tasks_passes_status_filter(api, http):
    http.add("GET", "/tasks/my", 200, {"tasks": [{"id": 1, "action": "Design"}]})
    tasks = TaskService(api).get_my_tasks(status="in_progress")
    assert [t.id for t in tasks] == ["1"]
    assert http.last()["params"] == {"status": "in_progress"}


def test_update_task_status_rejects_unknown_status(api):
    with pytest.raises(ValueError):
        TaskService(api).update_task_status("1", "archived")


def test_client_tasks_are_flattened_from_tickets(api, http):
    http.add("GET", "/client/tickets", 200, CLIENT_TICKETS)
    tasks = TaskService(api).get_client_tasks()
    assert [(t.id, t.project_name, t.ticket_message) for t in tasks] == [
        ("100", "Aura", "New landing page"),
        ("101", "Aura", "New landing page"),
    ]
    assert tasks[0].title == "Design"


def test_active_timer_absent(api, http):
    assert TaskService(api).get_active_timer() is None
    http.add("GET", "/tasks/timer/active", 200, {"timer": None})
    assert TaskService(api).get_active_timer() is None


def test_active_timer_unwrapped(api, http):
    http.add("GET", "/tasks/timer/active", 200, {"timer": {"task_id": 4, "status": "active"}})
    assert TaskService(api).get_active_timer().task_id == "4"


def test_pause_timer_sends_note(api, http):
    http.add("PATCH", "/tasks/4/timer/pause", 200, {})
    TaskService(api).pause_timer("4", note="Paused by user")
    assert http.last()["json"] == {"note": "Paused by user"}


def test_create_ticket_not_found_message(api, http):
    with pytest.raises(NotFound) as excinfo:
        TicketService(api).create_ticket("99", "Please build a shop")
    assert str(excinfo.value) == "Project not found or you don't have access to it."


def test_create_ticket(api, http):
    http.add("POST", "/client/projects/10/tickets", 201, {"ticket": {"id": 3, "message": "Please build a shop"}})
    ticket = TicketService(api).create_ticket("10", "Please build a shop")
    assert ticket.id == "3"
    assert http.last()["json"] == {"message": "Please build a shop"}


def test_admin_tickets_keep_only_pending(api, http):
    http.add("GET", "/admin/projects", 200, {"projects": [
        {"id": 1, "name": "Aura", "tickets": [
            {"id": 1, "message": "a", "status": "to_read"},
            {"id": 2, "message": "b", "status": "accepted"},
            {"id": 3, "message": "c", "status": "processing"},
        ]},
    ]})
    tickets = AdminTicketService(api).get_tickets_for_admin()
    assert [t.id for t in tickets] == ["1", "3"]
    assert tickets[0].project_name == "Aura"


def test_assignable_staff_includes_admins_once(api, http):
    http.add("GET", "/admin/users/staff", 200, {"staff": [{"id": 1, "email": "s@x.dk", "role": "staff"}]})
    http.add("GET", "/admin/users", 200, {"users": [
        {"id": 1, "email": "s@x.dk", "role": "staff"},
        {"id": 2, "email": "a@x.dk", "role": "admin"},
        {"id": 3, "email": "c@x.dk", "role": "client"},
    ]})
    staff = AdminTicketService(api).get_staff_members()
    assert [u.id for u in staff] == ["1", "2"]


def test_assignable_staff_survives_missing_user_list(api, http):
    http.add("GET", "/admin/users/staff", 200, {"staff": [{"id": 1, "email": "s@x.dk", "role": "staff"}]})
    http.add("GET", "/admin/users", 500, None)
    assert [u.id for u in AdminTicketService(api).get_staff_members()] == ["1"]


def test_create_tasks_then_accept_ticket(api, http):
    http.add("POST", "/admin/tickets/5/tasks", 201, {"created": 2})
    http.add("PATCH", "/admin/tickets/5", 200, {})
    drafts = [TaskDraft(action="Design", assigned_to="1"), TaskDraft(action="Build", assigned_to="2", priority="high")]
    result = AdminTicketService(api).create_tasks_for_ticket("5", drafts)
    assert result["created"] == 2 and result["ticket_accepted"] is True
    assert http.calls[0]["json"]["tasks"][1] == {"action": "Build", "assigned_to": "2", "priority": "high"}
    assert http.last()["json"] == {"status": "accepted"}


def test_create_tasks_reports_unaccepted_ticket(api, http):
    http.add("POST", "/admin/tickets/5/tasks", 201, {})
    http.add("PATCH", "/admin/tickets/5", 403, None)
    result = AdminTicketService(api).create_tasks_for_ticket("5", [TaskDraft(action="x", assigned_to="1")])
    assert result["ticket_accepted"] is False


def test_create_tasks_requires_drafts(api):
    with pytest.raises(ValueError):
        AdminTicketService(api).create_tasks_for_ticket("5", [])


def test_project_statistics(api, http):
    http.add("GET", "/admin/projects", 200, [
        {"id": 1, "status": "in_development", "open_tickets_count": 3},
        {"id": 2, "status": "completed", "open_tickets_count": 0},
    ])
    stats = ProjectService(api).get_project_statistics()
    assert stats["active_projects"] == 1
    assert stats["completed_projects"] == 1
    assert stats["average_tickets_per_project"] == "1.5"


def test_average_of_nothing():
    assert average(0, 0) == "0"


def test_create_client_errors(api, http):
    request = CreateClientRequest(email="bo@x.dk", password="Secret123", full_name="Bo")
    http.add("POST", "/auth/register", 409, {"detail": "exists"})
    with pytest.raises(Conflict, match="already exists"):
        ClientService(api).create_client(request)
    http.add("POST", "/auth/register", 422, {"detail": "bad email"})
    with pytest.raises(ValidationFailed, match="Invalid client data: bad email"):
        ClientService(api).create_client(request)


def test_create_client_sends_client_role(api, http):
    http.add("POST", "/auth/register", 201, {"user": {"id": 8, "email": "bo@x.dk"}})
    client = ClientService(api).create_client(
        CreateClientRequest(email="bo@x.dk", password="Secret123", full_name="Bo Berg")
    )
    assert http.last()["json"]["role"] == "client"
    assert client.full_name == "Bo Berg"
    assert client.total_projects_count == 0


def test_staff_member_lookup(api, http):
    http.add("GET", "/admin/users/staff", 200, {"staff": [
        {"id": 1, "full_name": "Anna", "email": "a@x.dk", "task_counts": {"active_tasks": 0, "total_assigned": 2}},
    ]})
    service = StaffService(api)
    assert service.get_staff_member("1").name == "Anna"
    with pytest.raises(NotFound, match="Staff member not found"):
        service.get_staff_member("2")
    assert service.get_staff_statistics()["available_members"] == 1


def test_client_task_stats_by_project(api, http):
    http.add("GET", "/client/tickets", 200, CLIENT_TICKETS)
    stats = ClientTaskService(api).get_project_task_stats()
    aura = stats["10"]
    assert (aura.total_tasks, aura.completed_tasks, aura.active_tasks) == (2, 1, 1)
    assert aura.completion_percentage == 50
    assert stats["11"].total_tasks == 0


def test_staff_dashboard_counts_projects(api, http):
    http.add("GET", "/tasks/my/active", 200, {"total_tasks": 2})
    http.add("GET", "/tasks/my", 200, {"tasks": [
        {"project_id": 1, "status": "completed"},
        {"project_id": 1, "status": "in_progress"},
        {"project_id": 2, "status": "completed"},
    ]})
    data = DashboardService(api).get_staff_dashboard()
    assert (data.active_tasks, data.completed_tasks, data.total_projects) == (2, 2, 2)


def test_dashboard_rejects_non_object(api, http):
    http.add("GET", "/admin/dashboard", 200, [1, 2])
    with pytest.raises(ApiError):
        DashboardService(api).get_admin_dashboard()
