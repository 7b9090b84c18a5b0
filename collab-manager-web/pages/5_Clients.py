"""Clients: accounts ordered by activity; admins can register new ones."""

import streamlit as st

from collab_manager import ui
from collab_manager.screens import ClientsScreen, CreateClientForm
from collab_manager.services import ClientService
from collab_manager.theme import card_title, hero, set_theme, stat_card

set_theme(page_title="Clients", page_icon="🧑‍💼")
ui.require_role("admin")

hero("Clients", "Client accounts and their projects")

KEY = "clients"
service = ui.get_service(ClientService)
screen = ui.get_screen(KEY, lambda: ClientsScreen(service))

stats = screen.statistics
cols = st.columns(4)
with cols[0]:
    stat_card("Clients", stats["total_clients"])
with cols[1]:
    stat_card("Active", stats["active_clients"])
with cols[2]:
    stat_card("With Projects", stats["clients_with_projects"])
with cols[3]:
    stat_card("Avg Projects / Client", stats["average_projects_per_client"])

with st.expander("➕ New client"):
    form = st.session_state.setdefault("cm_client_form", CreateClientForm(service))
    with st.form("create-client"):
        full_name = st.text_input("Full name")
        email = st.text_input("Email")
        password = st.text_input("Initial password", type="password",
                                 help="At least 8 characters with upper case, lower case and a number")
        submitted = st.form_submit_button("Create client", type="primary")
    if submitted:
        client = form.submit(full_name, email, password)
        if client is not None:
            screen.notices.extend(form.drain_notices())
            st.session_state.pop("cm_client_form", None)
            screen.load(background=True)
            st.rerun()
    for message in form.errors.values():
        st.error(message)
    if form.error:
        st.error(form.error)

ui.toolbar(screen, KEY, placeholder="Search by name, username or email")
ui.render_notices(screen, KEY)

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.info("No clients found.")
else:
    for client in screen.visible:
        with st.container(border=True):
            c1, c2, c3 = st.columns([0.6, 3, 1.2])
            with c1:
                st.markdown(f"### {client.initials}")
            with c2:
                st.markdown(card_title(client.display_name), unsafe_allow_html=True)
                st.caption(f"{client.email} · joined {ui.format_date(client.created_at)}")
            with c3:
                st.metric("Projects", f"{client.active_projects_count} / {client.total_projects_count}")
                st.caption(client.activity_status)
