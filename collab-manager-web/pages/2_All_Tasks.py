"""All Tasks: every task in the system (admin)."""

import pandas as pd
import streamlit as st

from collab_manager import ui
from collab_manager.models import TASK_STATUSES
from collab_manager.screens import AdminTasksScreen
from collab_manager.services import TaskService
from collab_manager.theme import hero, set_theme
from collab_manager.timer import TimerStatus

set_theme(page_title="All Tasks", page_icon="📋")
user = ui.require_role("admin")

hero("All Tasks", "Everything the team is working on")

KEY = "all_tasks"
screen = ui.get_screen(KEY, lambda: AdminTasksScreen(ui.get_service(TaskService), user_id=user.id))

ui.toolbar(screen, KEY, statuses=list(TASK_STATUSES), placeholder="Search by task, project, assignee")
ui.render_notices(screen, KEY)

counts = screen.status_counts
c1, c2, c3 = st.columns(3)
c1.metric("Total", len(screen.items))
c2.metric("In progress", counts.get("in_progress", 0))
c3.metric("Completed", counts.get("completed", 0))

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.info("No tasks match your filters.")
else:
    df = pd.DataFrame(
        [
            {
                "Task": t.display_title,
                "Project": t.project_name or "",
                "Assigned to": t.assigned_to_name or t.assigned_to or "",
                "Status": t.status.replace("_", " "),
                "Priority": t.priority,
                "Logged (min)": t.total_time_minutes,
                "Created": ui.format_date(t.created_at),
            }
            for t in screen.visible
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.markdown("#### Update one of your tasks")
    options = {t.id: t for t in screen.visible if screen.owns(t)}
    if not options:
        st.caption("None of the listed tasks are assigned to you; other people's tasks are view-only.")
        st.stop()
    selected = st.selectbox(
        "Task", options=list(options), format_func=lambda tid: options[tid].display_title, key=f"{KEY}-pick"
    )
    task = options[selected]
    status = screen.timer.status_for(task.id)
    b1, b2, b3 = st.columns(3)
    with b1:
        label = "Reopen" if task.is_completed else "Mark completed"
        if st.button(label, key=f"{KEY}-toggle", use_container_width=True):
            screen.toggle_status(task)
            st.rerun()
    if screen.can_track(task):
        with b2:
            if status is TimerStatus.STOPPED:
                if st.button("▶ Start timer", key=f"{KEY}-start", use_container_width=True):
                    screen.start_timer(task)
                    st.rerun()
            elif status is TimerStatus.ACTIVE:
                if st.button("⏸ Pause timer", key=f"{KEY}-pause", use_container_width=True):
                    screen.pause_timer(task)
                    st.rerun()
            else:
                if st.button("▶ Resume timer", key=f"{KEY}-resume", use_container_width=True):
                    screen.resume_timer(task)
                    st.rerun()
        with b3:
            if status is not TimerStatus.STOPPED:
                if st.button("⏹ Stop timer", key=f"{KEY}-stop", use_container_width=True):
                    screen.stop_timer(task)
                    st.rerun()
