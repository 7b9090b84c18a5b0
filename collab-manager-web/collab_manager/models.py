"""Typed records for everything the backend returns or accepts.

Payloads are validated once, at the API boundary. A row without its
identity, or with a field of the wrong shape, raises ``ParseError``;
optional display fields fall back to the same defaults the screens show.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, model_validator

from .errors import ParseError


# ----- Vocabularies -----
STATUS_ALL = "all"

TASK_IN_PROGRESS = "in_progress"
TASK_COMPLETED = "completed"
TASK_STATUSES = (TASK_IN_PROGRESS, TASK_COMPLETED)

PRIORITIES = ("low", "medium", "high", "urgent")
DEFAULT_PRIORITY = "medium"

TICKET_TO_READ = "to_read"
TICKET_PROCESSING = "processing"
TICKET_ACCEPTED = "accepted"
TICKET_REJECTED = "rejected"
TICKET_STATUSES = (TICKET_TO_READ, TICKET_PROCESSING, TICKET_ACCEPTED, TICKET_REJECTED)

PROJECT_PLANS = ("Starter Launch", "Aura Boost", "Aura Complete")
PROJECT_STATUSES = ("in_development", "developed", "delivered", "completed")

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_CLIENT = "client"


# ----- Field coercions -----
def _identifier(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        text = str(value).strip()
        return text or None
    return value


def _optional_identifier(value: Any) -> Any:
    if value is None:
        return None
    return _identifier(value)


def _lenient_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None


def _default(fallback: Any):
    def coerce(value: Any) -> Any:
        return fallback if value is None else value
    return coerce


def _list_or_empty(value: Any) -> Any:
    return [] if value is None else value


Identifier = Annotated[str, BeforeValidator(_identifier)]
OptionalIdentifier = Annotated[Optional[str], BeforeValidator(_optional_identifier)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(_lenient_timestamp)]
Text = Annotated[str, BeforeValidator(_default(""))]
Count = Annotated[int, BeforeValidator(_default(0))]
Flag = Annotated[bool, BeforeValidator(_default(True))]


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def parse(cls, payload: Any):
        if not isinstance(payload, dict):
            raise ParseError(f"Expected {cls.__name__} object, got {type(payload).__name__}")
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
            raise ParseError(f"Invalid {cls.__name__} payload ({fields})", detail=exc.errors()) from exc

    @classmethod
    def parse_many(cls, payloads: Optional[Iterable[Any]]) -> list:
        return [cls.parse(p) for p in payloads or []]


def role_display_name(role: str) -> str:
    if role == "internal_staff":
        return "Internal Staff"
    if role == ROLE_ADMIN:
        return "Administrator"
    return " ".join(w[:1].upper() + w[1:].lower() for w in role.replace("_", " ").split(" ") if w)


def _initials(name: str) -> str:
    parts = [p for p in name.split(" ") if p]
    if len(parts) >= 2:
        return (parts[0][0] + parts[1][0]).upper()
    return name[:1].upper() or "?"


# ----- Users -----
class User(Record):
    id: Identifier
    email: Text = ""
    username: Optional[str] = None
    full_name: Optional[str] = None
    role: Annotated[str, BeforeValidator(_default(ROLE_CLIENT))] = ROLE_CLIENT
    is_active: Flag = True
    created_at: Timestamp = None

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return self.username or self.email

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == ROLE_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role.lower() in (ROLE_STAFF, "internal_staff")

    @property
    def is_client(self) -> bool:
        return self.role.lower() == ROLE_CLIENT

    @property
    def should_show_role(self) -> bool:
        return not self.is_client

    @property
    def role_key(self) -> str:
        """Normalised role used for navigation (admin/staff/client)."""
        if self.is_admin:
            return ROLE_ADMIN
        if self.is_staff:
            return ROLE_STAFF
        return ROLE_CLIENT

    @property
    def role_display_name(self) -> str:
        role = self.role.lower()
        if role == ROLE_ADMIN:
            return "Administrator"
        if role in (ROLE_STAFF, "internal_staff"):
            return "Staff Member"
        if role == ROLE_CLIENT:
            return "Client"
        return self.role


# ----- Tasks & tickets -----
class Task(Record):
    id: Identifier
    action: Text = ""
    title: Optional[str] = None
    description: Text = ""
    status: Annotated[str, BeforeValidator(_default(TASK_IN_PROGRESS))] = TASK_IN_PROGRESS
    priority: Annotated[str, BeforeValidator(_default(DEFAULT_PRIORITY))] = DEFAULT_PRIORITY
    assigned_to: OptionalIdentifier = None
    assigned_to_name: Optional[str] = None
    project_id: OptionalIdentifier = None
    project_name: Optional[str] = None
    ticket_id: OptionalIdentifier = None
    ticket_message: Optional[str] = None
    total_time_minutes: Count = 0
    time_sessions_count: Count = 0
    created_at: Timestamp = None
    updated_at: Timestamp = None

    @property
    def display_title(self) -> str:
        return self.title or self.action

    @property
    def is_completed(self) -> bool:
        return self.status == TASK_COMPLETED


class ProjectRef(Record):
    id: OptionalIdentifier = None
    name: Annotated[str, BeforeValidator(_default("Unknown Project"))] = "Unknown Project"


class ProjectClient(Record):
    id: Annotated[str, BeforeValidator(lambda v: "" if v is None else str(v))] = ""
    email: Text = ""
    username: Text = ""
    full_name: Text = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class Ticket(Record):
    id: Identifier
    message: Text = ""
    status: Annotated[str, BeforeValidator(_default(TICKET_TO_READ))] = TICKET_TO_READ
    project_id: OptionalIdentifier = None
    project_name: Optional[str] = None
    project: Optional[ProjectRef] = None
    client: Optional[ProjectClient] = None
    tasks: Annotated[List[Task], BeforeValidator(_list_or_empty)] = []
    created_at: Timestamp = None
    updated_at: Timestamp = None

    @model_validator(mode="after")
    def _project_from_ref(self) -> "Ticket":
        if self.project is not None:
            if self.project_id is None:
                self.project_id = self.project.id
            if self.project_name is None:
                self.project_name = self.project.name
        return self

    @property
    def needs_attention(self) -> bool:
        return self.status in (TICKET_TO_READ, TICKET_PROCESSING)


# ----- Projects -----
class ProjectTask(Record):
    id: Identifier
    action: Text = ""
    assigned_to: Annotated[str, BeforeValidator(lambda v: "" if v is None else str(v))] = ""
    status: Annotated[str, BeforeValidator(_default("unknown"))] = "unknown"
    priority: Annotated[str, BeforeValidator(_default(DEFAULT_PRIORITY))] = DEFAULT_PRIORITY
    created_at: Timestamp = None


class ProjectTicket(Record):
    id: Identifier
    message: Text = ""
    status: Annotated[str, BeforeValidator(_default("unknown"))] = "unknown"
    active_tasks_count: Count = 0
    active_tasks: Annotated[List[ProjectTask], BeforeValidator(_list_or_empty)] = []
    created_at: Timestamp = None
    updated_at: Timestamp = None


_PROJECT_STATUS_COLORS = {
    "in_development": "blue",
    "completed": "green",
    "on_hold": "orange",
    "cancelled": "red",
}


class Project(Record):
    id: Identifier
    name: Annotated[str, BeforeValidator(_default("Untitled Project"))] = "Untitled Project"
    description: Text = ""
    client_id: OptionalIdentifier = None
    website_url: Optional[str] = None
    social_links: List[str] = []
    plan: Annotated[str, BeforeValidator(_default("Starter Launch"))] = "Starter Launch"
    contract_subscription_date: Timestamp = None
    status: Annotated[str, BeforeValidator(_default("in_development"))] = "in_development"
    created_by: OptionalIdentifier = None
    created_at: Timestamp = None
    updated_at: Timestamp = None
    client: Optional[ProjectClient] = None
    open_tickets_count: Count = 0
    open_tasks_count: Count = 0
    open_tickets: Annotated[List[ProjectTicket], BeforeValidator(_list_or_empty)] = []

    @model_validator(mode="before")
    @classmethod
    def _normalise_variants(cls, data: Any) -> Any:
        # website/website_url, socials (list or "a, b")/social_links, clients/client
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("website_url") is None and data.get("website") is not None:
            data["website_url"] = data["website"]
        links = data.get("social_links")
        if not isinstance(links, list):
            socials = data.get("socials")
            if isinstance(socials, list):
                links = socials
            elif isinstance(socials, str):
                links = [part.strip() for part in socials.split(",") if part.strip()]
            else:
                links = []
        data["social_links"] = [str(link) for link in links]
        if data.get("client") is None and data.get("clients") is not None:
            data["client"] = data["clients"]
        return data

    @property
    def status_color(self) -> str:
        return _PROJECT_STATUS_COLORS.get(self.status.lower(), "grey")

    @property
    def status_display_name(self) -> str:
        return " ".join(w[:1].upper() + w[1:].lower() for w in self.status.replace("_", " ").split(" ") if w)

    @property
    def priority(self) -> str:
        total = self.open_tickets_count + self.open_tasks_count
        if total >= 10:
            return "High"
        if total >= 5:
            return "Medium"
        if total > 0:
            return "Low"
        return "None"


# ----- People -----
class Client(Record):
    id: Identifier
    email: Text = ""
    username: Text = ""
    full_name: Text = ""
    role: Annotated[str, BeforeValidator(_default(ROLE_CLIENT))] = ROLE_CLIENT
    is_active: Flag = True
    active_projects_count: Count = 0
    total_projects_count: Count = 0
    created_at: Timestamp = None
    updated_at: Timestamp = None

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.username:
            return self.username
        return self.email.split("@")[0]

    @property
    def initials(self) -> str:
        return _initials(self.display_name)

    @property
    def activity_status(self) -> str:
        if not self.is_active:
            return "Inactive"
        if self.active_projects_count == 0:
            return "No Projects"
        return f"{self.active_projects_count} Projects"


class TeamMember(Record):
    id: Identifier
    name: Text = ""
    email: Text = ""
    role: Text = ""
    active_tasks: Count = 0
    total_tasks: Count = 0
    avatar_url: Optional[str] = None
    is_active: Flag = True

    @classmethod
    def from_staff_row(cls, row: Any) -> "TeamMember":
        """Build from an ``/admin/users/staff`` row (``task_counts`` nested)."""
        if not isinstance(row, dict):
            raise ParseError(f"Expected staff object, got {type(row).__name__}")
        counts = row.get("task_counts") or {}
        return cls.parse(
            {
                "id": row.get("id"),
                "name": row.get("full_name") or row.get("username") or "",
                "email": row.get("email"),
                "role": role_display_name(row.get("role") or ROLE_STAFF),
                "active_tasks": counts.get("active_tasks"),
                "total_tasks": counts.get("total_assigned"),
                "avatar_url": row.get("avatar_url"),
                "is_active": row.get("is_active"),
            }
        )

    @property
    def display_name(self) -> str:
        return self.name if self.name.strip() else self.email.split("@")[0]

    @property
    def initials(self) -> str:
        return _initials(self.display_name)

    @property
    def workload_status(self) -> str:
        if self.active_tasks == 0:
            return "Available"
        if self.active_tasks <= 2:
            return "Light"
        if self.active_tasks <= 4:
            return "Moderate"
        return "Heavy"


DEMO_TEAM: List[Dict[str, Any]] = [
    {"id": "1", "name": "Sarah Johnson", "email": "sarah@auravisual.dk", "role": "Senior Developer", "active_tasks": 4, "total_tasks": 8},
    {"id": "2", "name": "Marco Rossi", "email": "marco@auravisual.dk", "role": "UI/UX Designer", "active_tasks": 2, "total_tasks": 5},
    {"id": "3", "name": "Anna Chen", "email": "anna@auravisual.dk", "role": "Project Manager", "active_tasks": 7, "total_tasks": 12},
    {"id": "4", "name": "David Smith", "email": "david@auravisual.dk", "role": "Developer", "active_tasks": 0, "total_tasks": 3},
    {"id": "5", "name": "Lisa Anderson", "email": "lisa@auravisual.dk", "role": "QA Engineer", "active_tasks": 3, "total_tasks": 6},
]


def demo_team() -> List[TeamMember]:
    return TeamMember.parse_many(DEMO_TEAM)


# ----- Timer -----
class ActiveTimer(Record):
    task_id: Identifier
    task_title: Optional[str] = None
    start_time: Timestamp = None
    status: Annotated[str, BeforeValidator(_default("active"))] = "active"

    @model_validator(mode="before")
    @classmethod
    def _title_from_task(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("task_title") and isinstance(data.get("task"), dict):
            data = dict(data)
            data["task_title"] = data["task"].get("action") or data["task"].get("title")
        return data

    @property
    def is_paused(self) -> bool:
        return self.status == "paused"


# ----- Dashboards & statistics -----
class DashboardData(Record):
    total_projects: int = 0
    active_projects: int = 0
    completed_projects: int = 0
    total_clients: int = 0
    total_staff: int = 0
    open_tickets: int = 0
    active_tasks: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DashboardData":
        dashboard = payload.get("dashboard") or {}
        section = lambda key: dashboard.get(key) or {}  # noqa: E731
        return cls.parse(
            {
                "total_projects": section("projects").get("total") or 0,
                "active_projects": section("projects").get("active") or 0,
                "completed_projects": section("projects").get("completed") or 0,
                "total_clients": section("clients").get("total") or 0,
                "total_staff": section("staff").get("total") or 0,
                "open_tickets": section("tickets").get("open") or 0,
                "active_tasks": section("tasks").get("active") or 0,
            }
        )


class ClientDashboardData(Record):
    total_projects: int = 0
    open_tickets_count: int = 0
    project_names: List[str] = []
    primary_plan: str = "No Plan"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ClientDashboardData":
        projects = payload.get("projects") or []
        return cls.parse(
            {
                "total_projects": payload.get("total_projects") or 0,
                "open_tickets_count": sum(int(p.get("open_tickets_count") or 0) for p in projects),
                "project_names": [p.get("name") or "Unnamed Project" for p in projects],
                "primary_plan": (projects[0].get("plan") or "No Plan") if projects else "No Plan",
            }
        )


class StaffDashboardData(Record):
    active_tasks: int = 0
    completed_tasks: int = 0
    total_projects: int = 0

    @classmethod
    def from_payloads(cls, active_payload: Dict[str, Any], all_payload: Dict[str, Any]) -> "StaffDashboardData":
        all_tasks = all_payload.get("tasks") or []
        project_ids = {str(t.get("project_id")) for t in all_tasks if t.get("project_id")}
        return cls.parse(
            {
                "active_tasks": active_payload.get("total_tasks") or 0,
                "completed_tasks": sum(1 for t in all_tasks if t.get("status") == TASK_COMPLETED),
                "total_projects": len(project_ids),
            }
        )


class ProjectTaskStats(Record):
    project_id: Identifier
    project_name: str
    active_tasks: int = 0
    completed_tasks: int = 0
    total_tasks: int = 0

    @property
    def completion_percentage(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks / self.total_tasks * 100

    @property
    def has_active_work(self) -> bool:
        return self.active_tasks > 0


# ----- Requests -----
class CreateClientRequest(BaseModel):
    email: str
    password: str
    full_name: str

    def to_json(self) -> Dict[str, Any]:
        return {"email": self.email, "password": self.password, "full_name": self.full_name, "role": ROLE_CLIENT}


class CreateProjectRequest(BaseModel):
    name: str
    description: str
    plan: str
    status: str
    client_id: Optional[str] = None
    website_url: Optional[str] = None
    social_links: Optional[List[str]] = None
    contract_subscription_date: Optional[date] = None

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.client_id:
            body["client_id"] = self.client_id
        if self.website_url:
            body["website"] = self.website_url
        if self.social_links:
            body["socials"] = ", ".join(self.social_links)
        body["plan"] = self.plan
        if self.contract_subscription_date is not None:
            body["contract_subscription_date"] = self.contract_subscription_date.isoformat()
        body["status"] = self.status
        return body


class TaskDraft(BaseModel):
    action: str
    assigned_to: str
    priority: str = DEFAULT_PRIORITY

    def to_json(self) -> Dict[str, Any]:
        return {"action": self.action, "assigned_to": self.assigned_to, "priority": self.priority}
