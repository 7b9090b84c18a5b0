"""Task Progress: tasks created from the client's tickets, refreshed automatically."""

import streamlit as st

from collab_manager import ui
from collab_manager.models import TASK_STATUSES
from collab_manager.screens import ClientTasksScreen
from collab_manager.services import TaskService
from collab_manager.settings import get_config
from collab_manager.theme import badge, card_title, hero, set_theme

set_theme(page_title="Task Progress", page_icon="📈")
ui.require_role("client")

hero("Task Progress", "What our team is doing on your requests")

KEY = "client_tasks"
REFRESH_SECONDS = get_config().client_refresh_seconds
screen = ui.get_screen(
    KEY, lambda: ClientTasksScreen(ui.get_service(TaskService), refresh_seconds=REFRESH_SECONDS)
)

ui.toolbar(screen, KEY, statuses=list(TASK_STATUSES), placeholder="Search by task, project or description")


@st.fragment(run_every=REFRESH_SECONDS)
def task_list():
    screen.poll()
    ui.render_notices(screen, KEY)
    if screen.error:
        st.error(screen.error)
        return
    if not screen.visible:
        st.info("No tasks yet. They appear here once we start working on your requests.")
        return
    for task in screen.visible:
        with st.container(border=True):
            st.markdown(
                card_title(task.display_title)
                + f'{badge(task.status.replace("_", " "), task.status)}{badge(task.priority, task.priority)}',
                unsafe_allow_html=True,
            )
            st.caption(f"{task.project_name or 'No project'} · {task.ticket_message or task.description}")
            st.caption(f"Created {ui.format_date(task.created_at)}")
    st.caption(f"Refreshes every {REFRESH_SECONDS} seconds")


task_list()
