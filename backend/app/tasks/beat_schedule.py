# backend/app/tasks/beat_schedule.py
"""
Periodic lesson maintenance run by Celery beat.

Expiry runs often because an unpaid PENDING lesson blocks its slot for
everyone else until it is cancelled.
"""

from typing import Any

from celery.schedules import crontab

_TASK_PREFIX = "app.tasks.lesson_tasks."


def _job(task: str, schedule: crontab, expires: int) -> dict[str, Any]:
    # a run that sat in the queue past its next tick is dropped, not stacked
    return {"task": _TASK_PREFIX + task, "schedule": schedule, "options": {"expires": expires}}


CELERYBEAT_SCHEDULE: dict[str, dict[str, Any]] = {
    "expire-unpaid-lessons": _job("expire_unpaid_lessons", crontab(minute="*/5"), 240),
    "send-lesson-reminders": _job("send_lesson_reminders", crontab(minute="*/30"), 1500),
    "complete-past-lessons": _job("complete_past_lessons", crontab(minute=15), 3000),
}

# Local development: holds expire within a minute so the flow is easy to try
_DEVELOPMENT: dict[str, dict[str, Any]] = {
    "expire-unpaid-lessons": _job("expire_unpaid_lessons", crontab(minute="*/1"), 50),
}


def get_beat_schedule(environment: str = "production") -> dict[str, dict[str, Any]]:
    schedule = dict(CELERYBEAT_SCHEDULE)
    if environment == "development":
        schedule.update(_DEVELOPMENT)
    return schedule
