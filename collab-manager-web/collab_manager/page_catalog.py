"""Page catalog for the Collab Manager web client.

Single source of truth for navigation: every page declares the roles
allowed to see it, and ``app.py`` builds the sidebar from this list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

ALL_ROLES = ("admin", "staff", "client")


@dataclass(frozen=True)
class PageSpec:
    """Specification for a navigation page."""

    path: str
    title: str
    icon: str
    group: str
    roles: Tuple[str, ...] = ALL_ROLES
    description: str = ""
    default: bool = False


GROUP_ORDER = ["Home", "Work", "Clients", "Platform"]


def get_page_catalog() -> List[PageSpec]:
    return [
        PageSpec(
            path="pages/0_Home.py",
            title="Dashboard",
            icon="🏠",
            group="Home",
            description="Role-specific overview",
            default=True,
        ),
        # Work
        PageSpec(
            path="pages/1_My_Tasks.py",
            title="My Tasks",
            icon="⏱️",
            group="Work",
            roles=("admin", "staff"),
            description="Assigned tasks and time tracking",
        ),
        PageSpec(
            path="pages/2_All_Tasks.py",
            title="All Tasks",
            icon="📋",
            group="Work",
            roles=("admin",),
            description="Every task across projects",
        ),
        PageSpec(
            path="pages/3_Tickets.py",
            title="Tickets",
            icon="🎫",
            group="Work",
            roles=("admin",),
            description="Triage client tickets into tasks",
        ),
        PageSpec(
            path="pages/4_Projects.py",
            title="Projects",
            icon="📁",
            group="Work",
            roles=("admin", "staff"),
            description="Projects, plans and open work",
        ),
        # Clients
        PageSpec(
            path="pages/5_Clients.py",
            title="Clients",
            icon="🧑‍💼",
            group="Clients",
            roles=("admin",),
            description="Client accounts",
        ),
        PageSpec(
            path="pages/6_Team.py",
            title="Team",
            icon="👥",
            group="Clients",
            roles=("admin",),
            description="Staff workload",
        ),
        PageSpec(
            path="pages/7_My_Projects.py",
            title="My Projects",
            icon="📁",
            group="Work",
            roles=("client",),
            description="Your projects and requests",
        ),
        PageSpec(
            path="pages/8_Client_Tasks.py",
            title="Task Progress",
            icon="📈",
            group="Work",
            roles=("client",),
            description="Work in progress on your requests",
        ),
        # Platform
        PageSpec(
            path="pages/9_API_Log.py",
            title="API Log",
            icon="📊",
            group="Platform",
            roles=("admin",),
            description="Backend call history",
        ),
    ]


def pages_for_role(role: str) -> List[PageSpec]:
    return [p for p in get_page_catalog() if role in p.roles]


def catalog_by_group(role: str) -> Dict[str, List[PageSpec]]:
    """Pages visible to ``role``, grouped in GROUP_ORDER."""
    grouped: Dict[str, List[PageSpec]] = {}
    for p in pages_for_role(role):
        grouped.setdefault(p.group, []).append(p)

    ordered: Dict[str, List[PageSpec]] = {}
    for group in GROUP_ORDER:
        if group in grouped:
            ordered[group] = grouped[group]
    for group, pages in grouped.items():
        if group not in ordered:
            ordered[group] = pages
    return ordered


def known_page_paths() -> List[str]:
    return [p.path for p in get_page_catalog()]
