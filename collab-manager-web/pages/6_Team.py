"""Team: staff roster and workload (admin)."""

import pandas as pd
import plotly.express as px
import streamlit as st

from collab_manager import ui
from collab_manager.screens import TeamScreen
from collab_manager.services import StaffService
from collab_manager.settings import get_config
from collab_manager.theme import badge, card_title, hero, set_theme, stat_card

set_theme(page_title="Team", page_icon="👥")
ui.require_role("admin")

hero("Team", "Who is working on what")

KEY = "team"
screen = ui.get_screen(
    KEY, lambda: TeamScreen(ui.get_service(StaffService), demo_fallback=get_config().demo_fallback)
)

ui.toolbar(screen, KEY, placeholder="Search by name, email or role")
ui.render_notices(screen, KEY)

if screen.using_demo:
    st.warning("Using demo data: the team roster could not be loaded.")

if screen.error:
    st.error(screen.error)
    st.stop()

stats = screen.statistics
cols = st.columns(4)
with cols[0]:
    stat_card("Team Members", stats["total_staff"])
with cols[1]:
    stat_card("Active Tasks", stats["total_active_tasks"])
with cols[2]:
    stat_card("Available", stats["available_members"], "#00b894")
with cols[3]:
    stat_card("Avg Workload", stats["average_workload"])

if screen.items:
    df = pd.DataFrame(
        [{"member": m.display_name, "active": m.active_tasks, "total": m.total_tasks} for m in screen.items]
    )
    fig = px.bar(df, x="member", y=["active", "total"], barmode="group", title="Workload by member")
    fig.update_layout(height=320, margin=dict(l=10, r=10, t=50, b=10), legend_title_text="")
    st.plotly_chart(fig, use_container_width=True)

for member in screen.visible:
    with st.container(border=True):
        c1, c2, c3 = st.columns([0.6, 3, 1.2])
        with c1:
            st.markdown(f"### {member.initials}")
        with c2:
            st.markdown(
                card_title(member.display_name)
                + badge(member.workload_status, member.workload_status),
                unsafe_allow_html=True,
            )
            st.caption(f"{member.role} · {member.email}")
        with c3:
            st.metric("Active / Total", f"{member.active_tasks} / {member.total_tasks}")
