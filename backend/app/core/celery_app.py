"""Celery application: deferred scan ticks, retention sweeps and the daily scan."""
from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

celery_app = Celery(
    "posts_maintenance",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_ignore_result=True,
    broker_connection_retry_on_startup=True,
)

if settings.DAILY_SCAN_ENABLED:
    celery_app.conf.beat_schedule = {
        "daily-posts-scan": {
            "task": "daily_posts_scan",
            "schedule": crontab(minute=0, hour=settings.DAILY_SCAN_HOUR),
        },
    }
