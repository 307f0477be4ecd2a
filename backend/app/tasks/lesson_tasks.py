# backend/app/tasks/lesson_tasks.py
"""
Periodic lesson maintenance.

Each task opens its own session and delegates to LessonService, which owns
the rules for what is due.
"""

from datetime import datetime, timezone
import logging
import time
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from app.core.request_context import request_id_scope
from app.database import SessionLocal
from app.monitoring.prometheus_metrics import prometheus_metrics
from app.services.lesson_service import LessonService
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def _run_with_session(
    job_name: str, job: Callable[[LessonService, datetime], int]
) -> Dict[str, Any]:
    with request_id_scope(f"job:{job_name}"):
        db: Session = SessionLocal()
        try:
            now = datetime.now(timezone.utc)
            count = job(LessonService(db), now)
            if count:
                logger.info(f"{job_name}: processed {count} lessons")
            prometheus_metrics.record_lesson_job(job_name, count, time.time())
            return {"processed": count, "processed_at": now.isoformat()}
        finally:
            db.close()


@celery_app.task(name="app.tasks.lesson_tasks.expire_unpaid_lessons")
def expire_unpaid_lessons() -> Dict[str, Any]:
    """Cancel PENDING lessons whose payment hold expired, and their intents."""
    return _run_with_session(
        "expire_unpaid_lessons", lambda service, now: service.expire_unpaid_lessons(now)
    )


@celery_app.task(name="app.tasks.lesson_tasks.send_lesson_reminders")
def send_lesson_reminders() -> Dict[str, Any]:
    """Email both sides about confirmed lessons starting within the reminder lead time."""
    return _run_with_session(
        "send_lesson_reminders", lambda service, now: service.send_due_reminders(now)
    )


@celery_app.task(name="app.tasks.lesson_tasks.complete_past_lessons")
def complete_past_lessons() -> Dict[str, Any]:
    return _run_with_session(
        "complete_past_lessons", lambda service, now: service.complete_past_lessons(now)
    )
