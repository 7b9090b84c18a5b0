"""My Projects: the client's projects, task progress and new requests."""

import streamlit as st

from collab_manager import ui
from collab_manager.screens import ClientProjectsScreen, CreateTicketForm
from collab_manager.services import ClientTaskService, ProjectService, TicketService
from collab_manager.theme import badge, card_title, hero, set_theme

set_theme(page_title="My Projects", page_icon="📁")
ui.require_role("client")

hero("My Projects", "Your projects and the requests you have sent us")

KEY = "client_projects"
screen = ui.get_screen(
    KEY, lambda: ClientProjectsScreen(ui.get_service(ProjectService), ui.get_service(ClientTaskService))
)

if screen.items:
    with st.expander("✉️ New request"):
        form = st.session_state.setdefault("cm_ticket_form", CreateTicketForm(ui.get_service(TicketService)))
        projects = {p.id: p for p in screen.items}
        with st.form("create-ticket"):
            project_id = st.selectbox("Project", options=list(projects), format_func=lambda pid: projects[pid].name)
            message = st.text_area("What do you need?", max_chars=500,
                                   placeholder="Describe the change or problem in a few sentences")
            submitted = st.form_submit_button("Send request", type="primary")
        if submitted:
            ticket = form.submit(project_id, message)
            if ticket is not None:
                screen.notices.extend(form.drain_notices())
                st.session_state.pop("cm_ticket_form", None)
                screen.load(background=True)
                st.rerun()
        for error in form.errors.values():
            st.error(error)
        if form.error:
            st.error(form.error)

ui.toolbar(screen, KEY, placeholder="Search by name, description or plan")
ui.render_notices(screen, KEY)

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.info("No projects found.")
else:
    for project in screen.visible:
        with st.container(border=True):
            st.markdown(
                card_title(project.name)
                + badge(project.status_display_name, project.status),
                unsafe_allow_html=True,
            )
            if project.description:
                st.write(project.description)
            st.caption(f"Plan: {project.plan}")
            stats = screen.stats_for(project.id)
            if stats is not None and stats.total_tasks:
                st.progress(
                    stats.completion_percentage / 100,
                    text=f"{stats.completed_tasks} of {stats.total_tasks} tasks done"
                    + (f" · {stats.active_tasks} in progress" if stats.has_active_work else ""),
                )
            else:
                st.caption("No tasks yet.")
