"""Dashboard: a different summary for admins, staff and clients."""

import pandas as pd
import plotly.express as px
import streamlit as st

from collab_manager import ui
from collab_manager.errors import CollabError
from collab_manager.listing import count_by_status
from collab_manager.services import DashboardService, TaskService
from collab_manager.theme import hero, set_theme, stat_card

set_theme(page_title="Dashboard", page_icon="🏠")
user = ui.require_role()

hero(f"Welcome back, {user.display_name}", user.role_display_name if user.should_show_role else "Your projects at a glance")

dashboard = ui.get_service(DashboardService)


def status_chart(counts, title):
    if not counts:
        st.info("Nothing to chart yet.")
        return
    df = pd.DataFrame({"status": [s.replace("_", " ").title() for s in counts], "count": list(counts.values())})
    fig = px.bar(df, x="status", y="count", title=title, color="status", text="count")
    fig.update_layout(showlegend=False, height=340, margin=dict(l=10, r=10, t=50, b=10))
    st.plotly_chart(fig, use_container_width=True)


try:
    if user.is_admin:
        data = dashboard.get_admin_dashboard()
        cols = st.columns(4)
        with cols[0]:
            stat_card("Total Projects", data.total_projects)
        with cols[1]:
            stat_card("Clients", data.total_clients)
        with cols[2]:
            stat_card("Open Tickets", data.open_tickets, "#e17055" if data.open_tickets else "")
        with cols[3]:
            stat_card("Active Tasks", data.active_tasks)
        status_chart(
            {
                "active": data.active_projects,
                "completed": data.completed_projects,
                "other": max(0, data.total_projects - data.active_projects - data.completed_projects),
            },
            "Projects by status",
        )
        st.caption(f"Staff members: {data.total_staff}")

    elif user.is_staff:
        data = dashboard.get_staff_dashboard()
        cols = st.columns(3)
        with cols[0]:
            stat_card("Active Tasks", data.active_tasks)
        with cols[1]:
            stat_card("Completed Tasks", data.completed_tasks, "#00b894")
        with cols[2]:
            stat_card("Projects", data.total_projects)
        status_chart(count_by_status(ui.get_service(TaskService).get_my_tasks()), "My tasks by status")

    else:
        data = dashboard.get_client_dashboard()
        cols = st.columns(3)
        with cols[0]:
            stat_card("Projects", data.total_projects)
        with cols[1]:
            stat_card("Open Tickets", data.open_tickets_count)
        with cols[2]:
            stat_card("Plan", data.primary_plan)
        if data.project_names:
            st.markdown("#### Your projects")
            for name in data.project_names:
                st.markdown(f"- {name}")
        else:
            st.info("No projects yet. Your account manager will set one up for you.")

except CollabError as exc:
    st.error(f"Error loading dashboard: {exc}")
    if st.button("Retry"):
        st.rerun()
