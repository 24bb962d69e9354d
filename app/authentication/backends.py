"""
Bearer token authentication for the REST API.

BearerTokenAuthentication is the only entry in
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"], so every protected view
resolves its caller the same way:

    Authorization: Bearer <access token>

Missing, malformed, badly signed and expired tokens all fail closed with
401 (raised by simplejwt). On success request.user is the numeric-id User
named by the token's user_id claim.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import Case, F, Q, Value, When
from django.utils import timezone
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger(__name__)


class BearerTokenAuthentication(JWTAuthentication):
    """
    simplejwt authentication that also records presence.

    Each authenticated request bumps Profile.last_seen, throttled to one
    write per PRESENCE_TOUCH_INTERVAL_SECONDS, and flips an offline
    profile back to online. A profile the user set to "away" stays away.
    """

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is not None:
            user, _token = result
            self.touch_presence(user)
        return result

    @staticmethod
    def touch_presence(user):
        """Record activity for user; a no-op within the touch interval."""
        from authentication.models import Profile

        now = timezone.now()
        threshold = now - timedelta(seconds=settings.PRESENCE_TOUCH_INTERVAL_SECONDS)
        updated = (
            Profile.objects.filter(user_id=user.pk)
            .filter(Q(last_seen__isnull=True) | Q(last_seen__lt=threshold))
            .update(
                last_seen=now,
                status=Case(
                    When(status=Profile.Status.OFFLINE, then=Value(Profile.Status.ONLINE)),
                    default=F("status"),
                ),
            )
        )
        if updated:
            logger.debug(f"Presence refreshed for user {user.pk}")
