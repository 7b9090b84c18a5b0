"""Projects: all projects with open work; admins can create new ones."""

import streamlit as st

from collab_manager import ui
from collab_manager.errors import CollabError
from collab_manager.models import PROJECT_PLANS, PROJECT_STATUSES
from collab_manager.screens import CreateProjectForm, ProjectsScreen
from collab_manager.services import ProjectService
from collab_manager.theme import badge, card_title, hero, set_theme, stat_card

set_theme(page_title="Projects", page_icon="📁")
user = ui.require_role("admin", "staff")

hero("Projects", "Plans, status and open work per project")

KEY = "projects"
service = ui.get_service(ProjectService)
screen = ui.get_screen(KEY, lambda: ProjectsScreen(service))

stats = screen.statistics
cols = st.columns(4)
with cols[0]:
    stat_card("Projects", stats["total_projects"])
with cols[1]:
    stat_card("Active", stats["active_projects"])
with cols[2]:
    stat_card("Open Tickets", stats["total_open_tickets"])
with cols[3]:
    stat_card("Avg Tickets / Project", stats["average_tickets_per_project"])

if user.is_admin:
    with st.expander("➕ New project"):
        form = st.session_state.setdefault("cm_project_form", CreateProjectForm(service))
        try:
            clients = {c.id: c for c in service.get_all_clients()}
        except CollabError as exc:
            clients = {}
            st.warning(f"Could not load clients: {exc}")
        with st.form("create-project", clear_on_submit=False):
            name = st.text_input("Project name")
            description = st.text_area("Description")
            c1, c2 = st.columns(2)
            with c1:
                plan = st.selectbox("Plan", options=list(PROJECT_PLANS))
                client_id = st.selectbox(
                    "Client",
                    options=[None] + list(clients),
                    format_func=lambda cid: "No client" if cid is None else clients[cid].display_name,
                )
            with c2:
                status = st.selectbox(
                    "Status", options=list(PROJECT_STATUSES), format_func=lambda s: s.replace("_", " ").title()
                )
                contract_date = st.date_input("Contract subscription date", value=None)
            website = st.text_input("Website", placeholder="https://example.com")
            socials = st.text_area("Social links (one per line)")
            submitted = st.form_submit_button("Create project", type="primary")
        if submitted:
            project = form.submit(
                name=name,
                description=description,
                plan=plan,
                status=status,
                client_id=client_id,
                website_url=website,
                social_links=socials.splitlines(),
                contract_subscription_date=contract_date,
            )
            if project is not None:
                screen.notices.extend(form.drain_notices())
                st.session_state.pop("cm_project_form", None)
                screen.load(background=True)
                st.rerun()
        for message in form.errors.values():
            st.error(message)
        if form.error:
            st.error(form.error)

ui.toolbar(screen, KEY, statuses=list(PROJECT_STATUSES), placeholder="Search by name, description or plan")
ui.render_notices(screen, KEY)

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.info("No projects match your filters.")
else:
    for project in screen.visible:
        with st.container(border=True):
            left, right = st.columns([3, 1])
            with left:
                st.markdown(
                    card_title(project.name)
                    + badge(project.status_display_name, project.status),
                    unsafe_allow_html=True,
                )
                if project.description:
                    st.write(project.description)
                meta = [project.plan]
                if project.client:
                    meta.append(project.client.display_name)
                if project.website_url:
                    meta.append(project.website_url)
                st.caption(" · ".join(meta))
            with right:
                st.metric("Priority", project.priority)
                st.caption(f"{project.open_tickets_count} tickets · {project.open_tasks_count} tasks open")
            if project.open_tickets:
                with st.expander(f"Open tickets ({len(project.open_tickets)})"):
                    for ticket in project.open_tickets:
                        st.markdown(f"**{ticket.status.replace('_', ' ').title()}** · {ticket.message}")
                        for task in ticket.active_tasks:
                            st.caption(f"↳ {task.action} ({task.status.replace('_', ' ')})")
