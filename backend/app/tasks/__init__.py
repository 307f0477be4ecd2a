# backend/app/tasks/__init__.py
"""
Celery tasks package for Sideout.

Periodic lesson maintenance: expiring unpaid holds, reminders and
auto-completion. Run the worker with: celery -A app.tasks worker -B
"""

from app.tasks.celery_app import BaseTask, celery_app
from app.tasks.lesson_tasks import (
    complete_past_lessons,
    expire_unpaid_lessons,
    send_lesson_reminders,
)

__all__ = [
    "celery_app",
    "BaseTask",
    "complete_past_lessons",
    "expire_unpaid_lessons",
    "send_lesson_reminders",
]
