"""
Celery tasks for authentication.

This module defines periodic maintenance tasks:
- Marking idle users offline (presence expiry)
- Pruning expired refresh tokens from the blacklist tables

Both are scheduled in settings.CELERY_BEAT_SCHEDULE.

Related files:
    - backends.py: Refreshes last_seen on authenticated requests
    - services.py: Sets presence on signin/signout

Usage:
    from authentication.tasks import mark_idle_users_offline
    mark_idle_users_offline.delay()
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def mark_idle_users_offline(self, idle_seconds: int | None = None) -> int:
    """
    Flip online/away profiles to offline once last_seen is stale.

    Clients poll every few seconds while open, so a profile that has not
    authenticated a request for PRESENCE_OFFLINE_AFTER_SECONDS has gone.

    Args:
        idle_seconds: Override for settings.PRESENCE_OFFLINE_AFTER_SECONDS

    Returns:
        Number of profiles marked offline
    """
    from authentication.models import Profile

    if idle_seconds is None:
        idle_seconds = settings.PRESENCE_OFFLINE_AFTER_SECONDS
    cutoff = timezone.now() - timedelta(seconds=idle_seconds)

    count = (
        Profile.objects.exclude(status=Profile.Status.OFFLINE)
        .filter(last_seen__lt=cutoff)
        .update(status=Profile.Status.OFFLINE)
    )
    if count:
        logger.info(f"Marked {count} idle profiles offline")
    return count


@shared_task
def flush_expired_tokens() -> int:
    """
    Delete outstanding refresh tokens (and their blacklist rows) that
    have expired. Expired tokens are rejected on signature check anyway,
    so the rows only take up space.

    Returns:
        Number of outstanding tokens deleted
    """
    from rest_framework_simplejwt.token_blacklist.models import OutstandingToken

    # Deleting OutstandingToken cascades to BlacklistedToken; count only the former
    _, per_model = OutstandingToken.objects.filter(expires_at__lt=timezone.now()).delete()
    deleted = per_model.get(OutstandingToken._meta.label, 0)
    logger.info(f"Flushed {deleted} expired refresh tokens")
    return deleted
