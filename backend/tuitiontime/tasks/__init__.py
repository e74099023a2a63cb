"""
Celery tasks package for TuitionTime.

Import ``celery_app`` from here when starting a worker:

    celery -A tuitiontime.tasks worker -Q notifications
"""

from .celery_app import BaseTask, celery_app

__all__ = ["BaseTask", "celery_app"]
