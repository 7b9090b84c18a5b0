from datetime import datetime, timezone

from collab_manager.listing import (
    CLIENT_SEARCH_FIELDS,
    count_by_status,
    filter_items,
    parse_timestamp,
    sort_clients_by_activity,
    sort_in_progress_first,
    sort_newest_first,
    sort_projects_by_name,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

TASKS = [
    {"id": "1", "action": "Design logo", "project_name": "Aura", "status": "completed", "created_at": "2024-05-01T10:00:00Z"},
    {"id": "2", "action": "Build landing page", "project_name": "Nordic", "status": "in_progress", "created_at": "2024-05-03T10:00:00Z"},
    {"id": "3", "action": "Write copy", "project_name": "Aura", "status": "in_progress", "created_at": "2024-05-02T10:00:00"},
    {"id": "4", "action": "Fix footer", "project_name": "Nordic", "status": "completed", "created_at": None},
]


def ids(items):
    return [item["id"] for item in items]


def test_filter_by_status_and_query():
    assert ids(filter_items(TASKS, status="in_progress")) == ["2", "3"]
    assert ids(filter_items(TASKS, query="aura")) == ["1", "3"]
    assert ids(filter_items(TASKS, status="completed", query="FOOTER")) == ["4"]
    assert ids(filter_items(TASKS)) == ["1", "2", "3", "4"]


def test_filter_does_not_mutate_input():
    before = list(TASKS)
    filter_items(TASKS, status="completed")
    assert TASKS == before


def test_missing_timestamp_sorts_as_now():
    assert ids(sort_newest_first(TASKS, now=NOW)) == ["4", "2", "3", "1"]


def test_in_progress_first_then_newest():
    assert ids(sort_in_progress_first(TASKS, now=NOW)) == ["2", "3", "4", "1"]


def test_parse_timestamp_is_utc_aware():
    assert parse_timestamp("2024-05-02T10:00:00", NOW).tzinfo is not None
    assert parse_timestamp("garbage", NOW) == NOW


def test_client_ordering_and_search():
    clients = [
        {"full_name": "Bo", "username": "bo", "email": "bo@x.dk", "active_projects_count": 1, "total_projects_count": 4},
        {"full_name": "Al", "username": "al", "email": "al@x.dk", "active_projects_count": 2, "total_projects_count": 2},
        {"full_name": "Cy", "username": "cy", "email": "cy@x.dk", "active_projects_count": 1, "total_projects_count": 1},
    ]
    assert [c["full_name"] for c in sort_clients_by_activity(clients)] == ["Al", "Bo", "Cy"]
    assert len(filter_items(clients, query="x.dk", fields=CLIENT_SEARCH_FIELDS)) == 3


def test_projects_sorted_case_insensitively():
    projects = [{"name": "beta"}, {"name": "Alpha"}, {"name": "gamma"}]
    assert [p["name"] for p in sort_projects_by_name(projects)] == ["Alpha", "beta", "gamma"]


def test_count_by_status():
    assert count_by_status(TASKS) == {"completed": 2, "in_progress": 2}


def test_query_matches_case_insensitive_substring():
    items = [{"id": "Foobar"}, {"id": "baz"}, {"id": "xFooy"}]
    assert ids(filter_items(items, query="foo", fields=("id",))) == ["Foobar", "xFooy"]


def test_query_whitespace_is_significant():
    items = [{"id": "Foobar"}, {"id": "a foo b"}]
    assert ids(filter_items(items, query=" foo ", fields=("id",))) == ["a foo b"]


def test_completed_task_sorts_after_in_progress_regardless_of_age():
    items = [
        {"id": "D1", "status": "completed", "created_at": "2024-05-10T00:00:00Z"},
        {"id": "D2", "status": "in_progress", "created_at": "2024-05-01T00:00:00Z"},
        {"id": "D3", "status": "in_progress", "created_at": "2024-05-05T00:00:00Z"},
    ]
    assert ids(sort_in_progress_first(items, now=NOW)) == ["D3", "D2", "D1"]
