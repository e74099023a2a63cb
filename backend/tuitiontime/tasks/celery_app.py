# backend/tuitiontime/tasks/celery_app.py
"""
Celery application configuration for TuitionTime.

This module sets up the Celery app with Redis as the broker and backend,
configures task serialization and routing. Notification delivery runs
here so request handlers never wait on email or SMS providers.
"""

import logging
import os
from typing import Any

from celery import Celery, Task
from celery.signals import setup_logging

from tuitiontime.core.config import settings


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Returns:
        Celery: Configured Celery application instance
    """
    # Priority: CELERY_BROKER_URL -> settings.redis_url
    broker_url = os.getenv("CELERY_BROKER_URL") or settings.redis_url
    result_backend = os.getenv("CELERY_RESULT_BACKEND") or broker_url

    celery_app = Celery(
        "tuitiontime",
        broker=broker_url,
        backend=result_backend,
    )

    celery_app.conf.update(
        {
            "task_serializer": "json",
            "accept_content": ["json"],
            "result_serializer": "json",
            "timezone": "Asia/Kolkata",
            "enable_utc": True,
            "task_ignore_result": True,
            "worker_prefetch_multiplier": 4,
            "worker_max_tasks_per_child": 1000,
            "task_soft_time_limit": 60,
            "task_time_limit": 120,
            "task_acks_late": True,
            "task_reject_on_worker_lost": True,
            "task_default_retry_delay": 60,
            "worker_hijack_root_logger": False,
            # Tests and local runs without a worker execute tasks inline
            "task_always_eager": settings.celery_task_always_eager or settings.is_testing,
            "task_eager_propagates": False,
        }
    )

    celery_app.conf.imports = ("tuitiontime.tasks.notification_tasks",)
    celery_app.conf.task_routes = {
        "tuitiontime.tasks.notifications.*": {"queue": "notifications"},
    }

    return celery_app


# Disable Celery's default logging configuration
@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    """Configure logging to integrate with the application's logging setup."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


celery_app = create_celery_app()


class BaseTask(Task):  # type: ignore[misc]
    """Base task with automatic retry and failure logging."""

    autoretry_for = (Exception,)
    retry_kwargs = {"max_retries": 3, "countdown": 60}
    retry_backoff = True
    retry_backoff_max = 600
    retry_jitter = True

    def on_failure(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger = logging.getLogger(__name__)
        logger.error(
            f"Task {self.name}[{task_id}] failed with exception: {exc}",
            extra={"task_id": task_id, "task_name": self.name},
        )
