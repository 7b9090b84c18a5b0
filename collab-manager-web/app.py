import streamlit as st

from collab_manager import ui
from collab_manager.page_catalog import catalog_by_group
from collab_manager.screens import LoginForm
from collab_manager.theme import hero, set_theme

set_theme(page_title="Collab Manager", page_icon="🤝")
ui.restore_session()


def login_view():
    hero("Auravisual Collab Manager", "Sign in to manage projects, tickets and tasks")

    form_state = st.session_state.setdefault("cm_login_form", LoginForm(ui.get_auth()))
    _, center, _ = st.columns([1, 1.4, 1])
    with center:
        with st.form("login"):
            email = st.text_input("Email", placeholder="you@company.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", use_container_width=True, type="primary")
        if submitted:
            with st.spinner("Signing in..."):
                session = form_state.submit(email, password)
            if session is not None:
                st.session_state.pop("cm_login_form", None)
                st.rerun()
        for message in form_state.errors.values():
            st.error(message)
        if form_state.error:
            st.error(form_state.error)


user = ui.current_user()

if user is None:
    nav = st.navigation([st.Page(login_view, title="Sign in", icon="🔐", default=True)])
else:
    sections = {}
    for group, specs in catalog_by_group(user.role_key).items():
        sections[group] = [
            st.Page(spec.path, title=spec.title, icon=spec.icon, default=spec.default)
            for spec in specs
        ]
    nav = st.navigation(sections)

    with st.sidebar:
        st.markdown(f"**{user.display_name}**")
        if user.should_show_role:
            st.caption(user.role_display_name)
        st.caption(user.email)
        if st.button("Log out", use_container_width=True):
            ui.logout()

nav.run()
