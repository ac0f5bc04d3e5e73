import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("hosteud")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Deactivate promotions whose end date has passed - every night
    "deactivate-expired-promotions": {
        "task": "promotions.deactivate_expired_promotions",
        "schedule": crontab(minute=5, hour=0),
    },
}
