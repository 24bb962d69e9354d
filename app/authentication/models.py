"""
Authentication models.

This module defines the core account models:
- User: Custom user model with email-based authentication (slim, auth-focused)
- Profile: Public display data (OneToOne with User)

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: AuthService and ProfileService business logic
    - signals.py: Auto-create profile on user creation
    - hashers.py: bcrypt password hasher with configurable cost

Security:
    - User passwords hashed with bcrypt (settings.PASSWORD_HASHERS)
    - Profile never exposes the password hash or email to other users
"""

import re

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower

from authentication.managers import UserManager
from core.models import BaseModel

# Reserved usernames that cannot be used
RESERVED_USERNAMES = frozenset([
    "admin", "administrator", "root", "system", "api", "www",
    "support", "help", "about", "terms", "privacy", "security",
    "login", "logout", "signup", "signin", "signout", "auth",
    "me", "profile", "profiles", "user", "users", "all", "search",
    "contacts", "conversations", "messages", "settings",
    "null", "undefined", "anonymous", "staff", "moderator", "bot",
])

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,30}$")


def validate_username_not_reserved(value):
    """Validate that username is not in the reserved list."""
    if value.lower() in RESERVED_USERNAMES:
        raise ValidationError(
            f"The username '{value}' is reserved and cannot be used."
        )


def validate_username_format(value):
    """Validate username format: 3-30 chars, alphanumeric + _ + -."""
    if not USERNAME_PATTERN.match(value):
        raise ValidationError(
            "Username must be 3-30 characters and contain only "
            "letters, numbers, underscores, and hyphens."
        )


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the login identifier.

    Display data (username, name, avatar, presence) lives on Profile.
    Deleting a user cascades to the profile, participations, messages,
    message statuses and contacts.

    Fields:
        id: Numeric identity embedded in issued tokens
        email: Login identifier, unique
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return the profile's full name, or the email if unset."""
        try:
            return self.profile.full_name or self.email
        except Profile.DoesNotExist:
            return self.email

    def get_short_name(self):
        """Return the username, or the email local part if unset."""
        try:
            return self.profile.username or self.email.split("@")[0]
        except Profile.DoesNotExist:
            return self.email.split("@")[0]

    @property
    def display_name(self):
        """
        Name shown to other users in conversation titles.

        Falls back from full name to username to email.
        """
        try:
            profile = self.profile
        except Profile.DoesNotExist:
            return self.email
        return profile.full_name or profile.username or self.email


class Profile(BaseModel):
    """
    Public-facing display record for a user.

    Fields:
        user: OneToOne link to User (also serves as primary key)
        username: Unique handle (3-30 chars, case-insensitive, stored lowercase)
        full_name: Display name
        avatar_url: Link to an externally hosted avatar image
        bio: Free-text self description
        status: Presence (online, away, offline)
        last_seen: Last authenticated activity

    Note:
        Profile is automatically created via signals when a User is created.
        Signup fills in username and full_name in the same transaction.
    """

    class Status(models.TextChoices):
        ONLINE = "online", "Online"
        AWAY = "away", "Away"
        OFFLINE = "offline", "Offline"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
        help_text="User this profile belongs to",
    )
    username = models.CharField(
        max_length=30,
        blank=True,
        db_index=True,
        validators=[validate_username_format, validate_username_not_reserved],
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )
    full_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="User's display name",
    )
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        help_text="URL of the user's avatar image",
    )
    bio = models.TextField(
        max_length=500,
        blank=True,
        help_text="Short self description",
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.OFFLINE,
        help_text="Presence status shown to other users",
    )
    last_seen = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the user was last active",
    )

    class Meta:
        db_table = "authentication_profile"
        verbose_name = "profile"
        verbose_name_plural = "profiles"
        constraints = [
            # Case-insensitive unique constraint for username
            models.UniqueConstraint(
                Lower("username"),
                name="unique_username_case_insensitive",
                condition=models.Q(username__gt=""),  # Only for non-empty usernames
            ),
        ]

    def __str__(self):
        return self.username or str(self.user)

    def clean(self):
        super().clean()
        if self.username:
            self.username = self.username.lower()

    def save(self, *args, **kwargs):
        """Normalize username before saving."""
        if self.username:
            self.username = self.username.lower()
        super().save(*args, **kwargs)
