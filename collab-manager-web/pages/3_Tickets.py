"""Tickets: triage client requests into assigned tasks (admin)."""

import streamlit as st

from collab_manager import ui
from collab_manager.models import PRIORITIES, TICKET_PROCESSING, TICKET_TO_READ
from collab_manager.screens import AdminTicketsScreen
from collab_manager.services import AdminTicketService
from collab_manager.theme import badge, card_title, hero, set_theme

set_theme(page_title="Tickets", page_icon="🎫")
ui.require_role("admin")

hero("Tickets", "Client requests waiting to be turned into tasks")

KEY = "admin_tickets"
DIALOG_KEY = "cm_create_tasks_dialog"
screen = ui.get_screen(KEY, lambda: AdminTicketsScreen(ui.get_service(AdminTicketService)))


@st.dialog("Create tasks", width="large")
def create_tasks_dialog():
    dialog = st.session_state.get(DIALOG_KEY)
    if dialog is None:
        return
    st.markdown(f"**{dialog.ticket.project_name or 'Project'}**")
    st.caption(dialog.ticket.message)

    staff = {u.id: u for u in dialog.staff}
    for index, row in enumerate(dialog.rows):
        c1, c2, c3, c4 = st.columns([3, 2, 1.3, 0.5])
        with c1:
            action = st.text_input("Action", value=row.action, key=f"task-action-{dialog.ticket.id}-{index}")
        with c2:
            assignee_ids = [None] + list(staff)
            assigned = st.selectbox(
                "Assign to",
                options=assignee_ids,
                index=assignee_ids.index(row.assigned_to) if row.assigned_to in assignee_ids else 0,
                format_func=lambda uid: "Select..." if uid is None else staff[uid].display_name,
                key=f"task-assignee-{dialog.ticket.id}-{index}",
            )
        with c3:
            priority = st.selectbox(
                "Priority", options=list(PRIORITIES), index=PRIORITIES.index(row.priority), key=f"task-priority-{dialog.ticket.id}-{index}"
            )
        dialog.update_row(index, action=action, assigned_to=assigned, priority=priority)
        with c4:
            st.write("")
            if len(dialog.rows) > 1 and st.button("✕", key=f"task-remove-{dialog.ticket.id}-{index}"):
                dialog.remove_row(index)
                st.rerun(scope="fragment")

    if st.button("+ Add task"):
        dialog.add_row()
        st.rerun(scope="fragment")

    if dialog.error:
        st.error(dialog.error)

    if st.button("Create tasks", type="primary", use_container_width=True):
        if screen.submit_dialog(dialog):
            st.session_state.pop(DIALOG_KEY, None)
            st.rerun()
        else:
            st.rerun(scope="fragment")


ui.toolbar(screen, KEY, statuses=[TICKET_TO_READ, TICKET_PROCESSING], placeholder="Search by message or project")
ui.render_notices(screen, KEY)

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.success("No tickets need attention right now.")
else:
    for ticket in screen.visible:
        with st.container(border=True):
            left, right = st.columns([4, 1])
            with left:
                st.markdown(
                    card_title(ticket.project_name or "Unknown project")
                    + badge(ticket.status.replace("_", " "), ticket.status),
                    unsafe_allow_html=True,
                )
                st.write(ticket.message)
                st.caption(f"Received {ui.format_date(ticket.created_at, '%d %b %Y %H:%M')}")
            with right:
                if st.button("Create tasks", key=f"{KEY}-open-{ticket.id}", use_container_width=True):
                    st.session_state[DIALOG_KEY] = screen.open_dialog(ticket)
                    create_tasks_dialog()
