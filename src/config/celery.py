"""
Celery application for the order lifecycle service.

DJANGO_SETTINGS_MODULE is set before the app is instantiated so Celery
reads its configuration from Django settings (``CELERY_`` prefix).
The beat schedule lives in settings (``CELERY_BEAT_SCHEDULE``).
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("order_lifecycle")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up tasks.py in every installed app
app.autodiscover_tasks()
