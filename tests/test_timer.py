from datetime import datetime, timedelta, timezone

import pytest

from collab_manager.errors import ApiError, TimerConflict, TimerTransitionError
from collab_manager.models import ActiveTimer, Task
from collab_manager.timer import TimerController, TimerStatus, format_clock, format_elapsed, next_status


class FakeTaskService:
    def __init__(self, active=None, fail_on=None):
        self.active = active
        self.fail_on = fail_on
        self.calls = []

    def _call(self, name, *args):
        if name == self.fail_on:
            raise ApiError("backend down")
        self.calls.append((name,) + args)

    def start_timer(self, task_id):
        self._call("start", task_id)

    def pause_timer(self, task_id, note=None):
        self._call("pause", task_id, note)

    def resume_timer(self, task_id, note=None):
        self._call("resume", task_id, note)

    def stop_timer(self, task_id):
        self._call("stop", task_id)

    def get_active_timer(self):
        return self.active


def task(task_id, action="Task"):
    return Task.parse({"id": task_id, "action": action})


def test_transition_table():
    assert next_status(TimerStatus.STOPPED, "start") == TimerStatus.ACTIVE
    assert next_status(TimerStatus.ACTIVE, "pause") == TimerStatus.PAUSED
    assert next_status(TimerStatus.PAUSED, "resume") == TimerStatus.ACTIVE
    assert next_status(TimerStatus.PAUSED, "stop") == TimerStatus.STOPPED
    with pytest.raises(TimerTransitionError):
        next_status(TimerStatus.STOPPED, "pause")
    with pytest.raises(TimerTransitionError):
        next_status(TimerStatus.ACTIVE, "start")


def test_full_lifecycle():
    service = FakeTaskService()
    timer = TimerController(service)
    t = task("1", "Design logo")

    timer.start(t)
    assert timer.status_for("1") == TimerStatus.ACTIVE
    timer.pause("1")
    assert timer.status_for("1") == TimerStatus.PAUSED
    timer.resume("1")
    assert timer.status_for("1") == TimerStatus.ACTIVE
    timer.stop("1")
    assert timer.status_for("1") == TimerStatus.STOPPED
    assert [c[0] for c in service.calls] == ["start", "pause", "resume", "stop"]
    assert service.calls[1][2] == "Paused by user"


def test_second_timer_conflicts_until_confirmed():
    service = FakeTaskService()
    timer = TimerController(service)
    timer.start(task("1", "Design logo"))

    with pytest.raises(TimerConflict) as excinfo:
        timer.start(task("2", "Write copy"))
    assert excinfo.value.active_task_id == "1"
    assert "Design logo" in str(excinfo.value)
    assert timer.status_for("1") == TimerStatus.ACTIVE

    timer.start(task("2", "Write copy"), stop_other=True)
    assert ("stop", "1") in service.calls
    assert timer.status_for("1") == TimerStatus.STOPPED
    assert timer.status_for("2") == TimerStatus.ACTIVE


def test_failed_call_leaves_state_unchanged():
    service = FakeTaskService(fail_on="pause")
    timer = TimerController(service)
    timer.start(task("1"))
    with pytest.raises(ApiError):
        timer.pause("1")
    assert timer.status_for("1") == TimerStatus.ACTIVE


def test_refresh_adopts_server_timer():
    server = ActiveTimer.parse({"task_id": 9, "status": "paused", "task": {"action": "Review"}})
    timer = TimerController(FakeTaskService(active=server))
    timer.refresh()
    assert timer.status_for("9") == TimerStatus.PAUSED
    assert timer.active.task_title == "Review"


def test_format_elapsed():
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert format_elapsed(now - timedelta(minutes=42), now) == "42m"
    assert format_elapsed(now - timedelta(hours=2, minutes=5), now) == "2h 5m"
    assert format_elapsed(now + timedelta(minutes=5), now) == "0m"
    assert format_elapsed("not a date", now) == "0m"
    assert format_elapsed(None, now) == "0m"


def test_format_clock():
    assert format_clock("2024-06-01T09:05:00") == "9:05"
    assert format_clock("nope") == ""
