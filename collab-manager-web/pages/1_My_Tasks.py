"""My Tasks: assigned work with status toggles and the task timer."""

import streamlit as st

from collab_manager import ui
from collab_manager.models import TASK_COMPLETED, TASK_STATUSES
from collab_manager.screens import StaffTasksScreen
from collab_manager.services import TaskService
from collab_manager.theme import badge, card_title, hero, set_theme
from collab_manager.timer import TimerStatus, format_clock

set_theme(page_title="My Tasks", page_icon="⏱️")
ui.require_role("admin", "staff")

hero("My Tasks", "Track time and progress on the work assigned to you")

KEY = "my_tasks"
screen = ui.get_screen(KEY, lambda: StaffTasksScreen(ui.get_service(TaskService)))


def task_card(task, key_prefix):
    status = screen.timer.status_for(task.id)
    with st.container(border=True):
        left, right = st.columns([3, 1.4])
        with left:
            st.markdown(
                card_title(task.display_title)
                + f'{badge(task.status.replace("_", " "), task.status)}{badge(task.priority, task.priority)}',
                unsafe_allow_html=True,
            )
            meta = [task.project_name or "No project"]
            if task.total_time_minutes:
                meta.append(f"{task.total_time_minutes // 60}h {task.total_time_minutes % 60}m logged")
            st.caption(" · ".join(meta))
            if task.description:
                st.write(task.description)
            if status is not TimerStatus.STOPPED:
                active = screen.timer.active
                label = "Paused" if status is TimerStatus.PAUSED else "Running"
                st.markdown(
                    f'<span class="cm-timer">⏱ {label} · {screen.timer.elapsed()} '
                    f'(started {format_clock(active.start_time)})</span>',
                    unsafe_allow_html=True,
                )
        with right:
            toggle_label = "Reopen" if task.status == TASK_COMPLETED else "Mark completed"
            if st.button(toggle_label, key=f"{key_prefix}-toggle-{task.id}", use_container_width=True):
                screen.toggle_status(task)
                st.rerun()
            if screen.can_track(task):
                timer_buttons(task, status, key_prefix)


def timer_buttons(task, status, key_prefix):
    if status is TimerStatus.STOPPED:
        if st.button("▶ Start timer", key=f"{key_prefix}-start-{task.id}", use_container_width=True):
            screen.start_timer(task)
            st.rerun()
        return
    if status is TimerStatus.ACTIVE:
        if st.button("⏸ Pause", key=f"{key_prefix}-pause-{task.id}", use_container_width=True):
            screen.pause_timer(task)
            st.rerun()
    else:
        if st.button("▶ Resume", key=f"{key_prefix}-resume-{task.id}", use_container_width=True):
            screen.resume_timer(task)
            st.rerun()
    if st.button("⏹ Stop", key=f"{key_prefix}-stop-{task.id}", use_container_width=True):
        screen.stop_timer(task)
        st.rerun()


ui.toolbar(screen, KEY, statuses=list(TASK_STATUSES), placeholder="Search by task, project or description")
ui.render_notices(screen, KEY)

if screen.timer.active is not None:
    st.info(f"Timer active on: {screen.timer.active.task_title or 'Unknown task'}")

if screen.error:
    st.error(screen.error)
elif not screen.visible:
    st.info("No tasks match your filters.")
else:
    for task in screen.visible:
        task_card(task, KEY)
