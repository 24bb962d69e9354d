"""
Password hashers.

Django's bcrypt hasher hard-codes its cost factor as a class attribute;
this subclass reads it from settings.BCRYPT_ROUNDS so deployments can
raise it without code changes. Existing hashes keep verifying, and
must_update() flags them for rehash on next login when the cost changes.
"""

from django.conf import settings
from django.contrib.auth.hashers import BCryptSHA256PasswordHasher


class ConfiguredBCryptSHA256PasswordHasher(BCryptSHA256PasswordHasher):
    """bcrypt_sha256 with the work factor taken from settings (default 12)."""

    @property
    def rounds(self):
        return getattr(settings, "BCRYPT_ROUNDS", 12)
