import os

from collab_manager import theme
from collab_manager.page_catalog import catalog_by_group, get_page_catalog, known_page_paths, pages_for_role

APP_ROOT = os.path.join(os.path.dirname(__file__), "..", "collab-manager-web")


def test_theme_file_exists():
    assert os.path.isfile(theme.THEME_FILE)


def test_badge_markup():
    assert theme.badge("in progress", "in_progress") == '<span class="cm-badge cm-badge-in_progress">in progress</span>'


def test_backend_text_is_escaped():
    assert theme.card_title("<b>Fix & ship</b>") == '<div class="cm-card-title">&lt;b&gt;Fix &amp; ship&lt;/b&gt;</div>'
    assert "<script>" not in theme.badge("<script>", "low")
    assert 'onclick="' not in theme.badge("x", 'low" onclick="x')


def test_every_catalog_page_exists():
    for path in known_page_paths():
        assert os.path.isfile(os.path.join(APP_ROOT, path)), path


def test_exactly_one_default_page():
    assert [p.path for p in get_page_catalog() if p.default] == ["pages/0_Home.py"]


def test_pages_per_role():
    client_pages = {p.title for p in pages_for_role("client")}
    assert client_pages == {"Dashboard", "My Projects", "Task Progress"}
    staff_pages = {p.title for p in pages_for_role("staff")}
    assert staff_pages == {"Dashboard", "My Tasks", "Projects"}
    assert "API Log" in {p.title for p in pages_for_role("admin")}


def test_groups_follow_declared_order():
    assert list(catalog_by_group("admin")) == ["Home", "Work", "Clients", "Platform"]
    assert list(catalog_by_group("client")) == ["Home", "Work"]
