"""
Celery configuration for Parley.

Celery runs the periodic maintenance jobs the web process does not:
- Marking idle users offline (presence)
- Pruning expired refresh tokens from the blacklist tables

Redis is both the message broker and result backend. Tasks are
auto-discovered from all installed Django apps; the beat schedule lives in
settings.CELERY_BEAT_SCHEDULE.

Usage:
    celery -A config worker -l info
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("parley")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
