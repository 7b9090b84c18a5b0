"""API Log - every backend call made from this app, with timing and failures."""

from datetime import timedelta

import pandas as pd
import plotly.express as px
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from collab_manager import ui
from collab_manager.api_log import (
    cleanup_old_logs,
    get_api_call_stats,
    get_api_calls,
    get_path_stats,
    get_recent_errors,
    init_db,
)
from collab_manager.api_log.config import get_config as get_log_config
from collab_manager.api_log.models import utcnow
from collab_manager.theme import hero, set_theme, stat_card

set_theme(page_title="API Log", page_icon="📊")
ui.require_role("admin")

hero("API Log", "Backend calls made from this app: volume, latency and errors")

log_config = get_log_config()
if not log_config.enabled:
    st.info("API call logging is disabled (API_LOG_ENABLED=false).")
    st.stop()

try:
    init_db()
except SQLAlchemyError as exc:
    st.error(f"Failed to connect to the API log database: {exc}")
    st.info("Check API_LOG_DATABASE_URL / COLLAB_DATABASE_URL in your environment.")
    st.stop()

with st.sidebar:
    st.markdown("### Time Range")
    time_options = {
        "Last Hour": timedelta(hours=1),
        "Last 24 Hours": timedelta(hours=24),
        "Last 7 Days": timedelta(days=7),
        "Last 30 Days": timedelta(days=30),
    }
    selected_range = st.selectbox("Select time range", options=list(time_options), index=1)
    until = utcnow()
    since = until - time_options[selected_range]

    st.markdown("### Maintenance")
    if st.button("Cleanup Old Logs", use_container_width=True, type="secondary"):
        with st.spinner("Cleaning up..."):
            deleted = cleanup_old_logs()
        st.success(f"Deleted {deleted} log entries older than {log_config.retention_days} days")

stats = get_api_call_stats(since=since, until=until)
cols = st.columns(4)
with cols[0]:
    stat_card("Total Calls", f"{stats['total_calls']:,}")
with cols[1]:
    rate = stats["success_rate"]
    stat_card("Success Rate", f"{rate}%", "#22c55e" if rate >= 90 else "#f59e0b" if rate >= 70 else "#ef4444")
with cols[2]:
    stat_card("Avg Duration", f"{stats['avg_duration_ms'] or 0:.0f} ms")
with cols[3]:
    stat_card("Failed Calls", f"{stats['failed_calls']:,}", "#ef4444")

tabs = st.tabs(["Endpoints", "Errors", "Log Browser"])

with tabs[0]:
    path_stats = get_path_stats(since=since, until=until)
    if path_stats:
        df_paths = pd.DataFrame(path_stats)
        df_paths["endpoint"] = df_paths["method"] + " " + df_paths["path"]
        fig = px.bar(
            df_paths,
            x="endpoint",
            y=["successful_calls", "failed_calls"],
            title="Calls by endpoint",
            color_discrete_sequence=["#22c55e", "#ef4444"],
        )
        fig.update_layout(height=360, margin=dict(l=10, r=10, t=50, b=10), legend_title_text="")
        st.plotly_chart(fig, use_container_width=True)
        st.dataframe(
            df_paths.drop(columns=["endpoint"]),
            use_container_width=True,
            hide_index=True,
            column_config={
                "method": st.column_config.TextColumn("Method", width="small"),
                "path": st.column_config.TextColumn("Path", width="large"),
                "total_calls": st.column_config.NumberColumn("Total", format="%d"),
                "successful_calls": st.column_config.NumberColumn("Success", format="%d"),
                "failed_calls": st.column_config.NumberColumn("Failed", format="%d"),
                "avg_duration_ms": st.column_config.NumberColumn("Avg Duration (ms)", format="%.1f"),
            },
        )
    else:
        st.info("No calls recorded in this time range.")

with tabs[1]:
    errors = get_recent_errors(since=since)
    if errors:
        for err in errors:
            with st.expander(f"{err['method']} {err['path']} · {err['status_code'] or 'network'} · {err['started_at']}"):
                st.markdown(f"**{err['error_type'] or 'Error'}:** {err['error_message'] or '-'}")
                if err["user"]:
                    st.caption(f"User: {err['user']}")
                if err["payload_json"]:
                    st.code(err["payload_json"], language="json")
    else:
        st.success("No failed calls in this time range.")

with tabs[2]:
    f1, f2, f3 = st.columns([1, 3, 1])
    with f1:
        method = st.selectbox("Method", options=["All", "GET", "POST", "PATCH"], index=0)
    with f2:
        path_contains = st.text_input("Path contains", placeholder="/tasks")
    with f3:
        outcome = st.selectbox("Outcome", options=["All", "Success", "Failed"], index=0)
    calls = get_api_calls(
        method=None if method == "All" else method,
        path_contains=path_contains or None,
        success=None if outcome == "All" else outcome == "Success",
        since=since,
        until=until,
        limit=500,
    )
    if calls:
        df_calls = pd.DataFrame(calls)[
            ["started_at", "method", "path", "status_code", "success", "duration_ms", "user", "error_message"]
        ]
        st.dataframe(
            df_calls,
            use_container_width=True,
            hide_index=True,
            column_config={
                "started_at": st.column_config.TextColumn("Started"),
                "status_code": st.column_config.NumberColumn("Status", format="%d"),
                "success": st.column_config.CheckboxColumn("OK"),
                "duration_ms": st.column_config.NumberColumn("Duration (ms)", format="%.1f"),
            },
        )
    else:
        st.info("No calls match these filters.")
