# backend/app/tasks/celery_app.py
"""
Celery worker and beat for Sideout's lesson maintenance jobs.

Redis is both broker and result backend. Under tests tasks run eagerly, so
no broker is needed.
"""

import logging
import os
from typing import Any, Type, cast

from celery import Celery, Task
from celery.signals import setup_logging

from app.core.config import settings

logger = logging.getLogger(__name__)

TASK_MODULES = ("app.tasks.lesson_tasks",)


def create_celery_app() -> Celery:
    broker_url = os.getenv("CELERY_BROKER_URL") or settings.redis_url
    app = Celery(
        "sideout",
        broker=broker_url,
        backend=os.getenv("CELERY_RESULT_BACKEND") or broker_url,
        include=list(TASK_MODULES),
    )
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        result_expires=3600,
        # maintenance jobs are idempotent, so redelivery after a crash is safe
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,
        task_soft_time_limit=240,
        task_time_limit=300,
        worker_hijack_root_logger=False,
        task_always_eager=settings.is_testing,
    )

    from app.tasks.beat_schedule import get_beat_schedule

    app.conf.beat_schedule = get_beat_schedule(settings.environment)
    return app


@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    """Use the API's log format, request id included, instead of Celery's."""
    from app.core.request_context import attach_request_id_filter

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
    )
    attach_request_id_filter()


celery_app = create_celery_app()


class BaseTask(Task):  # type: ignore[misc]
    """Retries with backoff; a job that keeps failing is logged and left for the next beat."""

    autoretry_for = (Exception,)
    retry_kwargs = {"max_retries": 3, "countdown": 60}
    retry_backoff = True
    retry_backoff_max = 600
    retry_jitter = True

    def on_retry(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger.warning(
            f"Task {self.name}[{task_id}] retry {self.request.retries}: {exc}",
            extra={"task_id": task_id, "task_name": self.name},
        )
        super().on_retry(exc, task_id, args, kwargs, einfo)

    def on_failure(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger.error(
            f"Task {self.name}[{task_id}] gave up: {exc}",
            exc_info=True,
            extra={"task_id": task_id, "task_name": self.name},
        )
        super().on_failure(exc, task_id, args, kwargs, einfo)


celery_app.Task = cast(Type[Task], BaseTask)
