# =============================================================================
# Parley Project Configuration Package
# =============================================================================
# Settings, URLs, ASGI/WSGI applications and the Celery app live here.
#
# The Celery app is imported so tasks are registered when Django starts.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
