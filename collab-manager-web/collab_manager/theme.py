import html
import os

import streamlit as st

THEME_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "assets", "custom_theme.css")


def set_theme(
    page_title: str = "Collab Manager",
    page_icon: str = "🤝",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page and inject the shared CSS.

    Safe to call at the top of every page. Streamlit ignores repeated
    page_config calls; the CSS is injected on each run.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except Exception:
        # set_page_config can only be called once per run on older Streamlit
        pass

    try:
        with open(THEME_FILE, "r", encoding="utf-8") as f:
            st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
    except FileNotFoundError:
        st.error(f"Theme file not found at {THEME_FILE}. Please check the file path.")


def hero(title: str, subtitle: str = "") -> None:
    sub = f"<p>{html.escape(subtitle)}</p>" if subtitle else ""
    st.markdown(f'<div class="cm-hero"><h1>{html.escape(title)}</h1>{sub}</div>', unsafe_allow_html=True)


def stat_card(label: str, value, color: str = "") -> None:
    style = f' style="color: {color};"' if color else ""
    st.markdown(
        f"""
        <div class="stat-card">
            <div class="stat-value"{style}>{html.escape(str(value))}</div>
            <div class="stat-label">{html.escape(label)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def badge(text: str, kind: str) -> str:
    return f'<span class="cm-badge cm-badge-{html.escape(kind, quote=True)}">{html.escape(text)}</span>'


def card_title(text: str) -> str:
    """Backend text is escaped before it reaches unsafe_allow_html markup."""
    return f'<div class="cm-card-title">{html.escape(text)}</div>'
