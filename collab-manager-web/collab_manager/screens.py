"""Per-screen view state, independent of Streamlit.

A screen owns its fetched collection, the filter inputs, a loading flag,
an error message and a queue of transient notices. Pages render that
state and call the action methods; everything here is plain Python so it
can be driven from tests with fake services.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import CollabError, FormError, TimerConflict
from .listing import (
    CLIENT_PROJECT_SEARCH_FIELDS,
    CLIENT_SEARCH_FIELDS,
    CLIENT_TASK_SEARCH_FIELDS,
    TASK_SEARCH_FIELDS,
    TICKET_SEARCH_FIELDS,
    count_by_status,
    filter_items,
    sort_clients_by_activity,
    sort_in_progress_first,
    sort_newest_first,
    sort_projects_by_name,
)
from .models import (
    DEFAULT_PRIORITY,
    PRIORITIES,
    PROJECT_PLANS,
    PROJECT_STATUSES,
    STATUS_ALL,
    TASK_COMPLETED,
    TASK_IN_PROGRESS,
    CreateClientRequest,
    CreateProjectRequest,
    Task,
    TaskDraft,
    Ticket,
    User,
    demo_team,
)
from .services.clients import client_statistics
from .services.projects import project_statistics
from .services.staff import staff_statistics
from .timer import TimerController
from . import validators

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    message: str
    level: str = "info"  # info | success | warning | error
    retry: Optional[Callable[[], Any]] = None
    retry_label: str = "Retry"


class ScreenState:
    def __init__(self) -> None:
        self.notices: List[Notice] = []
        self.mounted = True

    def notify(self, message: str, level: str = "info", retry: Optional[Callable[[], Any]] = None,
               retry_label: str = "Retry") -> Notice:
        notice = Notice(message, level, retry, retry_label)
        self.notices.append(notice)
        return notice

    def drain_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    def detach(self) -> None:
        """The view went away: results of in-flight loads are dropped."""
        self.mounted = False

    def attach(self) -> None:
        self.mounted = True


class ListScreen(ScreenState):
    """Fetch, hold, filter and order one collection."""

    search_fields: Sequence[str] = TASK_SEARCH_FIELDS
    noun = "items"

    def __init__(self) -> None:
        super().__init__()
        self.items: List[Any] = []
        self.loading = False
        self.error: Optional[str] = None
        self.status = STATUS_ALL
        self.query = ""
        self.loaded_once = False

    # ---- subclass hooks ----

    def fetch(self) -> Any:
        raise NotImplementedError

    def apply(self, result: Any) -> None:
        self.items = self.order(list(result))

    def order(self, items: List[Any]) -> List[Any]:
        return sort_newest_first(items)

    def after_load(self, background: bool) -> None:
        if not background:
            self.notify(f"Loaded {len(self.items)} {self.noun}", "success")

    def handle_load_error(self, exc: CollabError) -> bool:
        """Return True when the failure was absorbed (e.g. by a fallback)."""
        return False

    # ---- actions ----

    def load(self, background: bool = False) -> bool:
        self.loading = True
        self.error = None
        try:
            result = self.fetch()
        except CollabError as exc:
            self.loading = False
            if not self.mounted:
                return False
            logger.warning("Loading %s failed: %s", self.noun, exc)
            if self.handle_load_error(exc):
                return False
            self.items = []
            self.error = str(exc)
            self.notify(f"Error loading {self.noun}: {exc}", "warning", retry=self.load)
            return False

        if not self.mounted:
            self.loading = False
            logger.debug("Discarding %s results for a detached screen", self.noun)
            return False
        self.apply(result)
        self.loading = False
        self.loaded_once = True
        self.after_load(background)
        return True

    def set_status(self, status: str) -> None:
        self.status = status or STATUS_ALL

    def set_query(self, query: str) -> None:
        self.query = query or ""

    @property
    def visible(self) -> List[Any]:
        return filter_items(self.items, status=self.status, query=self.query, fields=self.search_fields)

    @property
    def status_counts(self) -> Dict[str, int]:
        return count_by_status(self.items)


# ----- Tasks -----

class StaffTasksScreen(ListScreen):
    """The signed-in user's tasks with timer controls; in-progress work first."""

    noun = "tasks"

    def __init__(self, task_service: Any, timer: Optional[TimerController] = None) -> None:
        super().__init__()
        self.task_service = task_service
        self.timer = timer or TimerController(task_service)

    def fetch_tasks(self) -> List[Task]:
        return self.task_service.get_my_tasks()

    def fetch(self) -> Any:
        tasks = self.fetch_tasks()
        active = self.task_service.get_active_timer()
        return tasks, active

    def apply(self, result: Any) -> None:
        tasks, active = result
        self.items = self.order(list(tasks))
        self.timer.active = active

    def order(self, items: List[Any]) -> List[Any]:
        return sort_in_progress_first(items)

    def after_load(self, background: bool) -> None:
        if background:
            return
        active = self.timer.active
        if active is not None:
            task = self.find(active.task_id)
            name = task.display_title if task else (active.task_title or "Unknown task")
            self.notify(f"Timer active for: {name}", "info")
        else:
            self.notify(f"Loaded {len(self.items)} tasks", "success")

    def find(self, task_id: str) -> Optional[Task]:
        for task in self.items:
            if task.id == str(task_id):
                return task
        return None

    def owns(self, task: Task) -> bool:
        return True

    def can_track(self, task: Task) -> bool:
        """Timer controls apply to open tasks the user is assigned to."""
        return self.owns(task) and not task.is_completed

    def toggle_status(self, task: Task) -> bool:
        if not self.owns(task):
            self.notify("You can only change the status of tasks assigned to you", "error")
            return False
        new_status = TASK_IN_PROGRESS if task.status == TASK_COMPLETED else TASK_COMPLETED
        try:
            self.task_service.update_task_status(task.id, new_status)
        except CollabError as exc:
            self.notify(f"Error updating task: {exc}", "error")
            return False
        label = "completed" if new_status == TASK_COMPLETED else "in progress"
        self.notify(f"Task marked as {label}", "success")
        self.load(background=True)
        return True

    def _refuse_timer(self, task: Task) -> bool:
        if self.can_track(task):
            return False
        self.notify("Time can only be tracked on your own open tasks", "error")
        return True

    def _timer_action(self, action: Callable[[], Any], success: str) -> bool:
        try:
            action()
        except TimerConflict:
            raise
        except CollabError as exc:
            self.notify(f"Timer error: {exc}", "error")
            return False
        self.notify(success, "success")
        self.load(background=True)
        return True

    def start_timer(self, task: Task, stop_other: bool = False) -> bool:
        """Start timing ``task``; a conflict becomes a confirm notice."""
        if self._refuse_timer(task):
            return False
        try:
            return self._timer_action(
                lambda: self.timer.start(task, stop_other=stop_other),
                f"Timer started for: {task.display_title}",
            )
        except TimerConflict as exc:
            self.notify(
                str(exc),
                "warning",
                retry=lambda: self.start_timer(task, stop_other=True),
                retry_label="Stop it and start",
            )
            return False

    def pause_timer(self, task: Task) -> bool:
        if self._refuse_timer(task):
            return False
        return self._timer_action(lambda: self.timer.pause(task.id), f"Timer paused for: {task.display_title}")

    def resume_timer(self, task: Task) -> bool:
        if self._refuse_timer(task):
            return False
        return self._timer_action(lambda: self.timer.resume(task.id), f"Timer resumed for: {task.display_title}")

    def stop_timer(self, task: Task) -> bool:
        if self._refuse_timer(task):
            return False
        return self._timer_action(lambda: self.timer.stop(task.id), f"Timer stopped for: {task.display_title}")


class AdminTasksScreen(StaffTasksScreen):
    """Every task in the system, with the admin's own timer."""

    search_fields = TASK_SEARCH_FIELDS + ("assigned_to_name",)

    def __init__(self, task_service: Any, user_id: Optional[str] = None,
                 timer: Optional[TimerController] = None) -> None:
        super().__init__(task_service, timer)
        self.user_id = None if user_id is None else str(user_id)

    def owns(self, task: Task) -> bool:
        return self.user_id is not None and task.assigned_to == self.user_id

    def fetch_tasks(self) -> List[Task]:
        return self.task_service.get_all_tasks()


class RefreshSchedule:
    """Fixed-interval polling clock (no backoff, no jitter)."""

    def __init__(self, interval_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.last_run: Optional[float] = None

    def due(self) -> bool:
        if self.last_run is None:
            return True
        return self.clock() - self.last_run >= self.interval_seconds

    def mark(self) -> None:
        self.last_run = self.clock()

    def remaining(self) -> float:
        if self.last_run is None:
            return 0.0
        return max(0.0, self.interval_seconds - (self.clock() - self.last_run))


class ClientTasksScreen(ListScreen):
    """Tasks created from the client's tickets, refreshed on a fixed interval."""

    noun = "tasks"
    search_fields = CLIENT_TASK_SEARCH_FIELDS

    def __init__(self, task_service: Any, refresh_seconds: float = 30,
                 clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()
        self.task_service = task_service
        self.schedule = RefreshSchedule(refresh_seconds, clock)

    def fetch(self) -> Any:
        return self.task_service.get_client_tasks()

    def load(self, background: bool = False) -> bool:
        self.schedule.mark()
        return super().load(background)

    def poll(self) -> bool:
        """Reload when the interval has elapsed. Returns True if a refresh ran."""
        if not self.mounted or not self.schedule.due():
            return False
        self.load(background=self.loaded_once)
        return True


# ----- Tickets -----

@dataclass
class TaskRow:
    action: str = ""
    assigned_to: Optional[str] = None
    priority: str = DEFAULT_PRIORITY


class CreateTasksDialog:
    """Turn one ticket into a set of assigned tasks."""

    REQUIRED_MESSAGE = "All fields are required"

    def __init__(self, ticket: Ticket, staff: Sequence[User], service: Any) -> None:
        self.ticket = ticket
        self.staff = list(staff)
        self.service = service
        self.rows: List[TaskRow] = [TaskRow()]
        self.error: Optional[str] = None
        self.submitting = False

    def add_row(self) -> TaskRow:
        row = TaskRow()
        self.rows.append(row)
        return row

    def remove_row(self, index: int) -> None:
        if len(self.rows) > 1:
            del self.rows[index]

    def update_row(self, index: int, **values: Any) -> None:
        row = self.rows[index]
        for name, value in values.items():
            if not hasattr(row, name):
                raise AttributeError(f"Unknown task field: {name}")
            setattr(row, name, value)

    def drafts(self) -> List[TaskDraft]:
        """Validated drafts for every row; raises ``FormError`` if any row is incomplete."""
        for row in self.rows:
            if not row.action.strip() or not row.assigned_to:
                raise FormError({"tasks": self.REQUIRED_MESSAGE})
        return [
            TaskDraft(
                action=row.action.strip(),
                assigned_to=row.assigned_to,
                priority=row.priority if row.priority in PRIORITIES else DEFAULT_PRIORITY,
            )
            for row in self.rows
        ]

    def submit(self) -> List[Notice]:
        """Send the drafts. Returns the notices to show; empty on failure (see ``error``)."""
        self.error = None
        try:
            drafts = self.drafts()
        except FormError as exc:
            self.error = str(exc)
            return []

        self.submitting = True
        try:
            result = self.service.create_tasks_for_ticket(self.ticket.id, drafts)
        except CollabError as exc:
            self.error = f"Error creating tasks: {exc}"
            return []
        finally:
            self.submitting = False

        notices = [Notice(f"{len(drafts)} tasks created successfully! Ticket moved to accepted status.", "success")]
        if not result.get("ticket_accepted", True):
            notices.append(Notice("Ticket status could not be updated automatically.", "warning"))
        return notices


class AdminTicketsScreen(ListScreen):
    """Tickets waiting for triage plus the roster tasks can be assigned to."""

    noun = "tickets"
    search_fields = TICKET_SEARCH_FIELDS

    def __init__(self, service: Any) -> None:
        super().__init__()
        self.service = service
        self.staff: List[User] = []

    def fetch(self) -> Any:
        tickets = self.service.get_tickets_for_admin()
        staff = self.service.get_staff_members()
        return tickets, staff

    def apply(self, result: Any) -> None:
        tickets, staff = result
        self.items = self.order(list(tickets))
        self.staff = list(staff)

    def open_dialog(self, ticket: Ticket) -> CreateTasksDialog:
        return CreateTasksDialog(ticket, self.staff, self.service)

    def submit_dialog(self, dialog: CreateTasksDialog) -> bool:
        notices = dialog.submit()
        if not notices:
            return False
        self.notices.extend(notices)
        self.load(background=True)
        return True


# ----- Projects, clients, team -----

class ProjectsScreen(ListScreen):
    noun = "projects"
    search_fields = ("name", "description", "plan")

    def __init__(self, project_service: Any) -> None:
        super().__init__()
        self.project_service = project_service

    def fetch(self) -> Any:
        return self.project_service.get_all_projects()

    @property
    def statistics(self) -> Dict[str, Any]:
        return project_statistics(self.items)


class ClientProjectsScreen(ListScreen):
    noun = "projects"
    search_fields = CLIENT_PROJECT_SEARCH_FIELDS

    def __init__(self, project_service: Any, client_task_service: Any) -> None:
        super().__init__()
        self.project_service = project_service
        self.client_task_service = client_task_service
        self.task_stats: Dict[str, Any] = {}

    def fetch(self) -> Any:
        projects = self.project_service.get_client_projects()
        stats = self.client_task_service.get_project_task_stats()
        return projects, stats

    def apply(self, result: Any) -> None:
        projects, stats = result
        self.items = self.order(list(projects))
        self.task_stats = dict(stats)

    def order(self, items: List[Any]) -> List[Any]:
        return sort_projects_by_name(items)

    def stats_for(self, project_id: str) -> Optional[Any]:
        return self.task_stats.get(str(project_id))


class ClientsScreen(ListScreen):
    noun = "clients"
    search_fields = CLIENT_SEARCH_FIELDS

    def __init__(self, client_service: Any) -> None:
        super().__init__()
        self.client_service = client_service

    def fetch(self) -> Any:
        return self.client_service.get_all_clients()

    def order(self, items: List[Any]) -> List[Any]:
        return sort_clients_by_activity(items)

    @property
    def statistics(self) -> Dict[str, Any]:
        return client_statistics(self.items)


class TeamScreen(ListScreen):
    """Staff roster and workload. Falls back to a demo roster only when enabled."""

    noun = "team members"
    search_fields = ("name", "email", "role")

    def __init__(self, staff_service: Any, demo_fallback: bool = False) -> None:
        super().__init__()
        self.staff_service = staff_service
        self.demo_fallback = demo_fallback
        self.using_demo = False

    def fetch(self) -> Any:
        return self.staff_service.get_staff_members()

    def apply(self, result: Any) -> None:
        super().apply(result)
        self.using_demo = False

    def order(self, items: List[Any]) -> List[Any]:
        return sorted(items, key=lambda m: m.display_name.lower())

    def handle_load_error(self, exc: CollabError) -> bool:
        if not self.demo_fallback:
            return False
        self.items = self.order(demo_team())
        self.using_demo = True
        self.notify(f"Using demo data: {exc}", "warning", retry=self.load)
        return True

    @property
    def statistics(self) -> Dict[str, Any]:
        return staff_statistics(self.items)


# ----- Forms -----

class Form(ScreenState):
    """Validate synchronously, then make a single service call."""

    def __init__(self) -> None:
        super().__init__()
        self.errors: Dict[str, str] = {}
        self.error: Optional[str] = None
        self.submitting = False

    def _check(self, errors: Dict[str, Optional[str]]) -> None:
        self.errors = {k: v for k, v in errors.items() if v}
        if self.errors:
            raise FormError(self.errors)

    def _run(self, call: Callable[[], Any], failure: str) -> Any:
        self.submitting = True
        self.error = None
        try:
            return call()
        except CollabError as exc:
            self.error = f"{failure}: {exc}"
            self.notify(self.error, "error")
            return None
        finally:
            self.submitting = False


class LoginForm(Form):
    def __init__(self, auth_service: Any) -> None:
        super().__init__()
        self.auth_service = auth_service

    def submit(self, email: str, password: str) -> Any:
        try:
            self._check({"email": validators.email(email), "password": validators.password(password)})
        except FormError:
            return None
        return self._run(lambda: self.auth_service.login(email.strip(), password), "Login failed")


class CreateClientForm(Form):
    def __init__(self, client_service: Any) -> None:
        super().__init__()
        self.client_service = client_service

    def submit(self, full_name: str, email: str, password: str) -> Any:
        try:
            self._check({
                "full_name": validators.full_name(full_name),
                "email": validators.email(email),
                "password": validators.strong_password(password),
            })
        except FormError:
            return None
        request = CreateClientRequest(email=email.strip(), password=password, full_name=full_name.strip())
        client = self._run(lambda: self.client_service.create_client(request), "Error creating client")
        if client is not None:
            self.notify(f"Client {client.display_name} created successfully", "success")
        return client


class CreateProjectForm(Form):
    def __init__(self, project_service: Any) -> None:
        super().__init__()
        self.project_service = project_service

    def submit(
        self,
        name: str,
        description: str,
        plan: str = PROJECT_PLANS[0],
        status: str = PROJECT_STATUSES[0],
        client_id: Optional[str] = None,
        website_url: Optional[str] = None,
        social_links: Sequence[str] = (),
        contract_subscription_date: Optional[date] = None,
    ) -> Any:
        links = [link.strip() for link in social_links if link and link.strip()]
        errors: Dict[str, Optional[str]] = {
            "name": None if (name or "").strip() else "Project name is required",
            "description": None if (description or "").strip() else "Description is required",
            "website_url": validators.url(website_url),
            "plan": None if plan in PROJECT_PLANS else "Please choose a plan",
            "status": None if status in PROJECT_STATUSES else "Please choose a status",
        }
        for index, link in enumerate(links):
            errors[f"social_links.{index}"] = validators.social_url(link)
        try:
            self._check(errors)
        except FormError:
            return None
        if isinstance(contract_subscription_date, datetime):
            contract_subscription_date = contract_subscription_date.date()

        request = CreateProjectRequest(
            name=name.strip(),
            description=description.strip(),
            plan=plan,
            status=status,
            client_id=client_id or None,
            website_url=(website_url or "").strip() or None,
            social_links=links or None,
            contract_subscription_date=contract_subscription_date,
        )
        project = self._run(lambda: self.project_service.create_project(request), "Error creating project")
        if project is not None:
            self.notify(f"Project {project.name} created successfully", "success")
        return project


class CreateTicketForm(Form):
    def __init__(self, ticket_service: Any) -> None:
        super().__init__()
        self.ticket_service = ticket_service

    def submit(self, project_id: Optional[str], message: str) -> Any:
        try:
            self._check({
                "project_id": None if project_id else "Please select a project",
                "message": validators.ticket_message(message),
            })
        except FormError:
            return None
        ticket = self._run(
            lambda: self.ticket_service.create_ticket(project_id, message.strip()), "Error creating ticket"
        )
        if ticket is not None:
            self.notify("Ticket submitted successfully", "success")
        return ticket
