"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from link4coders.config import get_settings

settings = get_settings()

app = Celery(
    "link4coders",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["link4coders.tasks.previews"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,  # 2 minutes max per task
    task_soft_time_limit=90,
)

app.conf.beat_schedule = {
    "refresh-stale-previews": {
        "task": "link4coders.tasks.previews.refresh_stale_previews",
        "schedule": crontab(minute=0, hour="*/6"),
    },
}
