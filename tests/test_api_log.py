from datetime import datetime, timedelta, timezone

from collab_manager.api_log import (
    cleanup_old_logs,
    get_api_call_stats,
    get_api_calls,
    get_path_stats,
    get_recent_errors,
    init_db,
    log_api_call,
    redact_sensitive,
)
from collab_manager.api_log.models import utcnow


def test_redact_sensitive_nested():
    payload = {"email": "a@x.dk", "password": "hunter2", "nested": [{"access_token": "t", "note": "ok"}]}
    assert redact_sensitive(payload) == {
        "email": "a@x.dk",
        "password": "***REDACTED***",
        "nested": [{"access_token": "***REDACTED***", "note": "ok"}],
    }


def test_logged_calls_can_be_queried(database_url):
    init_db(database_url)
    now = utcnow()
    log_api_call("GET", "/tasks/my", status_code=200, success=True, started_at=now, duration_ms=12.5,
                 user="a@x.dk", database_url=database_url)
    log_api_call("POST", "/auth/login", payload={"email": "a@x.dk", "password": "x"}, status_code=401,
                 success=False, error_message="Invalid credentials", error_type="AuthenticationRequired",
                 started_at=now, duration_ms=40.0, database_url=database_url)

    calls = get_api_calls(database_url=database_url)
    assert {c["path"] for c in calls} == {"/tasks/my", "/auth/login"}
    login = get_api_calls(path_contains="login", database_url=database_url)[0]
    assert "hunter" not in (login["payload_json"] or "")
    assert "***REDACTED***" in login["payload_json"]
    assert [c["path"] for c in get_api_calls(success=False, database_url=database_url)] == ["/auth/login"]

    stats = get_api_call_stats(since=now - timedelta(minutes=1), database_url=database_url)
    assert stats["total_calls"] == 2
    assert stats["failed_calls"] == 1
    assert stats["success_rate"] == 50.0

    paths = get_path_stats(since=now - timedelta(minutes=1), database_url=database_url)
    assert {(p["method"], p["path"]) for p in paths} == {("GET", "/tasks/my"), ("POST", "/auth/login")}

    errors = get_recent_errors(database_url=database_url)
    assert errors[0]["error_type"] == "AuthenticationRequired"


def test_cleanup_keeps_recent_entries(database_url):
    init_db(database_url)
    log_api_call("GET", "/tasks/my", success=True, database_url=database_url)
    assert cleanup_old_logs(retention_days=30, database_url=database_url) == 0
    assert len(get_api_calls(database_url=database_url)) == 1


def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    assert abs((datetime.now(timezone.utc).replace(tzinfo=None) - now).total_seconds()) < 5
