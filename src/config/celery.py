"""Celery configuration."""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.prod"),
)

app = Celery("venueops")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Beat schedule
app.conf.beat_schedule = {
    "performance-weekly-rollover": {
        "task": "performance.tasks.weekly_rollover",
        "schedule": crontab(minute=0, hour=3, day_of_week="mon"),  # Mondays at 3am
    },
    "performance-recompute-recent-weeks": {
        "task": "performance.tasks.recompute_recent_weeks",
        "schedule": crontab(minute=30, hour=4),  # Daily
    },
}
