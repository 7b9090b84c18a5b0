"""Per-task time tracking.

The backend owns the timer; ``TimerController`` keeps a local mirror of the
user's single running-or-paused timer and only changes it once the matching
server call has succeeded.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import TimerConflict, TimerTransitionError
from .listing import parse_iso
from .models import ActiveTimer, Task

logger = logging.getLogger(__name__)

PAUSE_NOTE = "Paused by user"
RESUME_NOTE = "Resumed by user"


class TimerStatus(str, Enum):
    STOPPED = "stopped"
    ACTIVE = "active"
    PAUSED = "paused"


TRANSITIONS: Dict[Tuple[TimerStatus, str], TimerStatus] = {
    (TimerStatus.STOPPED, "start"): TimerStatus.ACTIVE,
    (TimerStatus.ACTIVE, "pause"): TimerStatus.PAUSED,
    (TimerStatus.PAUSED, "resume"): TimerStatus.ACTIVE,
    (TimerStatus.ACTIVE, "stop"): TimerStatus.STOPPED,
    (TimerStatus.PAUSED, "stop"): TimerStatus.STOPPED,
}


def next_status(current: TimerStatus, action: str) -> TimerStatus:
    try:
        return TRANSITIONS[(TimerStatus(current), action)]
    except KeyError:
        raise TimerTransitionError(f"Cannot {action} a timer that is {TimerStatus(current).value}") from None


def _elapsed(start: Any, now: Optional[datetime] = None) -> Optional[timedelta]:
    if start is None or start == "":
        return None
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    started = parse_iso(start)
    if started is None:
        return None
    if started.tzinfo is None:
        started = started.replace(tzinfo=timezone.utc)
    return max(current - started, timedelta(0))


def format_elapsed(start: Any, now: Optional[datetime] = None) -> str:
    """``"Xh Ym"`` from one hour on, else ``"Ym"``; ``"0m"`` when the start is unusable."""
    elapsed = _elapsed(start, now)
    if elapsed is None:
        return "0m"
    minutes = int(elapsed.total_seconds() // 60)
    hours, rest = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {rest}m"
    return f"{minutes}m"


def format_clock(value: Any) -> str:
    """Wall-clock ``H:MM`` of a timestamp, or ``""`` when it cannot be read."""
    parsed = parse_iso(value)
    if parsed is None:
        return ""
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return f"{parsed.hour}:{parsed.minute:02d}"


class TimerController:
    def __init__(self, task_service: Any, active: Optional[ActiveTimer] = None) -> None:
        self.task_service = task_service
        self.active = active

    def refresh(self) -> Optional[ActiveTimer]:
        self.active = self.task_service.get_active_timer()
        return self.active

    def status_for(self, task_id: str) -> TimerStatus:
        if self.active is None or self.active.task_id != str(task_id):
            return TimerStatus.STOPPED
        return TimerStatus.PAUSED if self.active.is_paused else TimerStatus.ACTIVE

    def start(self, task: Task, stop_other: bool = False, now: Optional[datetime] = None) -> ActiveTimer:
        """Start timing ``task``.

        Raises ``TimerConflict`` while another task holds the timer, unless
        ``stop_other`` confirms that timer should be stopped first.
        """
        next_status(self.status_for(task.id), "start")
        other = self.active
        if other is not None and other.task_id != task.id:
            if not stop_other:
                title = other.task_title or "another task"
                raise TimerConflict(
                    f'You have an active timer for "{title}". Stop it and start new timer?',
                    other.task_id,
                    other.task_title,
                )
            self.task_service.stop_timer(other.task_id)
            self.active = None
            logger.info("Stopped timer on %s before starting %s", other.task_id, task.id)

        self.task_service.start_timer(task.id)
        self.active = ActiveTimer(
            task_id=task.id,
            task_title=task.display_title,
            start_time=now or datetime.now(timezone.utc),
            status=TimerStatus.ACTIVE.value,
        )
        return self.active

    def pause(self, task_id: str, note: str = PAUSE_NOTE) -> ActiveTimer:
        next_status(self.status_for(task_id), "pause")
        self.task_service.pause_timer(task_id, note=note)
        self.active = self.active.model_copy(update={"status": TimerStatus.PAUSED.value})
        return self.active

    def resume(self, task_id: str, note: str = RESUME_NOTE) -> ActiveTimer:
        next_status(self.status_for(task_id), "resume")
        self.task_service.resume_timer(task_id, note=note)
        self.active = self.active.model_copy(update={"status": TimerStatus.ACTIVE.value})
        return self.active

    def stop(self, task_id: str) -> None:
        next_status(self.status_for(task_id), "stop")
        self.task_service.stop_timer(task_id)
        self.active = None

    def elapsed(self, now: Optional[datetime] = None) -> str:
        if self.active is None:
            return "0m"
        return format_elapsed(self.active.start_time, now)
