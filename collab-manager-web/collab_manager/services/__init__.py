"""One service facade per backend entity, each over a shared ``ApiClient``."""

from .admin_tickets import AdminTicketService
from .auth import AuthService
from .client_tasks import ClientTaskService
from .clients import ClientService
from .dashboard import DashboardService
from .projects import ProjectService
from .staff import StaffService
from .tasks import TaskService
from .tickets import TicketService

__all__ = [
    "AdminTicketService",
    "AuthService",
    "ClientTaskService",
    "ClientService",
    "DashboardService",
    "ProjectService",
    "StaffService",
    "TaskService",
    "TicketService",
]
