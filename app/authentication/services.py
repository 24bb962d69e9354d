"""
Authentication services.

This module provides:
- AuthService: signup, signin, signout and token issuing
- ProfileService: own/public profiles, profile updates and user discovery

Related files:
    - models.py: User, Profile
    - backends.py: Bearer token verification on every request
    - serializers.py: Boundary validation before these services run
    - tasks.py: Presence expiry and token blacklist cleanup

Security:
    - Passwords are hashed with bcrypt (settings.PASSWORD_HASHERS)
    - Signin failures share one message so callers cannot enumerate emails
    - Passwords and tokens are never logged
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from django.contrib.auth import authenticate
from django.db import IntegrityError
from django.db.models import Exists, OuterRef, Q
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import Profile, User


class AuthService(BaseService):
    """
    Account lifecycle and token issuing.

    Successful signup and signin return a session payload:

        {"user": User, "profile": Profile, "token": "<access>", "refresh": "<refresh>"}

    Usage:
        result = AuthService.signup(email, password, full_name, username)
        if not result.success:
            return Response(result.to_response(), status=400)
    """

    INVALID_CREDENTIALS = "Invalid credentials"

    @classmethod
    def issue_tokens(cls, user: User) -> dict[str, str]:
        """
        Issue an access/refresh token pair for user.

        Both tokens carry the numeric user id (user_id claim) and the
        email (email claim). Lifetimes come from settings.SIMPLE_JWT.
        """
        refresh = RefreshToken.for_user(user)
        refresh["email"] = user.email
        return {
            "token": str(refresh.access_token),
            "refresh": str(refresh),
        }

    @classmethod
    def signup(
        cls,
        email: str,
        password: str,
        full_name: str,
        username: str,
    ) -> ServiceResult[dict]:
        """
        Create an account and its profile, then sign the user in.

        User and Profile are written in one transaction, so a failure
        while filling in the profile leaves no user row behind.

        Returns:
            ServiceResult with the session payload, or a failure with
            EMAIL_EXISTS, USERNAME_TAKEN or DUPLICATE_ACCOUNT
        """
        from authentication.models import Profile, User

        email = email.strip().lower()
        username = username.strip().lower()

        if User.objects.filter(email__iexact=email).exists():
            return ServiceResult.failure(
                "A user with this email already exists.",
                error_code="EMAIL_EXISTS",
            )
        if Profile.objects.filter(username__iexact=username).exists():
            return ServiceResult.failure(
                "This username is already taken.",
                error_code="USERNAME_TAKEN",
            )

        try:
            with cls.atomic():
                user = User.objects.create_user(email=email, password=password)
                profile, _ = Profile.objects.get_or_create(user=user)
                profile.username = username
                profile.full_name = full_name.strip()
                profile.status = Profile.Status.ONLINE
                profile.last_seen = timezone.now()
                profile.save()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email/username
            cls.get_logger().warning(f"Signup constraint violation for username {username}")
            return ServiceResult.failure(
                "Username or email already taken",
                error_code="DUPLICATE_ACCOUNT",
            )

        cls.get_logger().info(f"User {user.id} signed up as {username}")
        return ServiceResult.success(
            {"user": user, "profile": profile, **cls.issue_tokens(user)}
        )

    @classmethod
    def signin(cls, email: str, password: str) -> ServiceResult[dict]:
        """
        Verify credentials and issue a fresh token pair.

        Unknown email, wrong password and inactive accounts all fail with
        the same INVALID_CREDENTIALS result.
        """
        from authentication.models import Profile

        user = authenticate(email=email.strip().lower(), password=password)
        if user is None:
            cls.get_logger().info("Signin rejected")
            return ServiceResult.failure(
                cls.INVALID_CREDENTIALS,
                error_code="INVALID_CREDENTIALS",
            )

        profile, _ = Profile.objects.get_or_create(user=user)
        profile.status = Profile.Status.ONLINE
        profile.last_seen = timezone.now()
        profile.save(update_fields=["status", "last_seen", "updated_at"])

        cls.get_logger().info(f"User {user.id} signed in")
        return ServiceResult.success(
            {"user": user, "profile": profile, **cls.issue_tokens(user)}
        )

    @classmethod
    def signout(cls, user: User, refresh: str | None = None) -> ServiceResult[None]:
        """
        Sign the user out.

        Access tokens are stateless, so the client simply discards its
        copy. When the refresh token is supplied it is blacklisted so it
        can no longer mint access tokens. The profile goes offline.
        """
        from authentication.models import Profile

        if refresh:
            try:
                token = RefreshToken(refresh)
            except TokenError:
                return ServiceResult.failure(
                    "Invalid or expired refresh token",
                    error_code="INVALID_TOKEN",
                )
            if str(token.get("user_id")) != str(user.pk):
                return ServiceResult.failure(
                    "Refresh token does not belong to this user",
                    error_code="INVALID_TOKEN",
                )
            token.blacklist()

        Profile.objects.filter(user=user).update(
            status=Profile.Status.OFFLINE,
            last_seen=timezone.now(),
        )
        cls.get_logger().info(f"User {user.id} signed out")
        return ServiceResult.success(None)


class ProfileService(BaseService):
    """
    Profile reads and writes plus user discovery.

    Public profiles never include the email or password hash; that is
    enforced by PublicProfileSerializer, which every discovery endpoint
    renders with.
    """

    USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]{3,30}$")

    @classmethod
    def get_own_profile(cls, user: User) -> Profile:
        """Return the caller's profile, creating it if missing."""
        from authentication.models import Profile

        profile, created = Profile.objects.get_or_create(user=user)
        if created:
            cls.get_logger().debug(f"Profile created on demand for user {user.id}")
        return profile

    @classmethod
    def validate_username(cls, username: str, exclude_user: User = None) -> tuple[bool, str]:
        """
        Validate a username for format, reserved names, and uniqueness.

        Args:
            username: The username to validate
            exclude_user: User to exclude from uniqueness check (for updates)

        Returns:
            Tuple of (is_valid, message)
        """
        from authentication.models import RESERVED_USERNAMES, Profile

        username = username.lower().strip()

        if not cls.USERNAME_RE.match(username):
            return False, (
                "Username must be 3-30 characters and contain only "
                "letters, numbers, underscores, and hyphens."
            )

        if username in RESERVED_USERNAMES:
            return False, f"The username '{username}' is reserved."

        existing = Profile.objects.filter(username__iexact=username)
        if exclude_user is not None:
            existing = existing.exclude(user=exclude_user)
        if existing.exists():
            return False, "This username is already taken."

        return True, "Username is available."

    @classmethod
    def update_profile(cls, user: User, **data) -> ServiceResult[Profile]:
        """
        Partially update the caller's profile.

        Only keys present in data change. "email" updates the account
        row; every other key is a Profile field. Username and email
        uniqueness are re-checked here even though the serializer
        already checked them, since the row may have changed since.
        """
        from authentication.models import User as UserModel

        profile = cls.get_own_profile(user)
        email = data.pop("email", None)

        if "username" in data:
            data["username"] = data["username"].strip().lower()
            is_valid, message = cls.validate_username(data["username"], exclude_user=user)
            if not is_valid:
                return ServiceResult.failure(
                    message,
                    error_code="INVALID_USERNAME",
                    errors={"username": [message]},
                )

        if email is not None:
            email = email.strip().lower()
            if UserModel.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
                return ServiceResult.failure(
                    "A user with this email already exists.",
                    error_code="EMAIL_EXISTS",
                    errors={"email": ["A user with this email already exists."]},
                )

        try:
            with cls.atomic():
                if email is not None and email != user.email:
                    user.email = email
                    user.save(update_fields=["email", "updated_at"])
                for field_name, value in data.items():
                    setattr(profile, field_name, value)
                profile.save()
        except IntegrityError:
            return ServiceResult.failure(
                "Username or email already taken",
                error_code="DUPLICATE_ACCOUNT",
            )

        changed = sorted(data) + (["email"] if email is not None else [])
        cls.get_logger().info(f"Profile updated for user {user.id}: {changed}")
        return ServiceResult.success(profile)

    @classmethod
    def get_public_profile(cls, user_id: int) -> Profile:
        """
        Return the profile of another (active) user.

        Raises:
            NotFoundError: If no active user has this id
        """
        from authentication.models import Profile

        profile = (
            Profile.objects.select_related("user")
            .filter(user_id=user_id, user__is_active=True)
            .first()
        )
        if profile is None:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
        return profile

    @classmethod
    def _discoverable_users(cls, caller: User) -> QuerySet[User]:
        from authentication.models import User as UserModel
        from contacts.models import Contact

        return (
            UserModel.objects.filter(is_active=True)
            .exclude(pk=caller.pk)
            .select_related("profile")
            .annotate(
                is_contact=Exists(
                    Contact.objects.filter(
                        user=caller,
                        contact=OuterRef("pk"),
                        status=Contact.Status.ACCEPTED,
                    )
                )
            )
        )

    @classmethod
    def search_users(
        cls,
        caller: User,
        email: str | None = None,
        q: str | None = None,
    ) -> QuerySet[User]:
        """
        Find other users by exact email or free text.

        email is an exact, case-insensitive match. q matches any part of
        the email, username or full name. With neither, nothing matches.
        """
        users = cls._discoverable_users(caller)
        if email:
            return users.filter(email__iexact=email.strip()).order_by("profile__username")
        if q:
            q = q.strip()
            return users.filter(
                Q(email__icontains=q)
                | Q(profile__username__icontains=q)
                | Q(profile__full_name__icontains=q)
            ).order_by("profile__username")[:50]
        return users.none()

    @classmethod
    def list_users(cls, caller: User) -> QuerySet[User]:
        """All other active users, each annotated with is_contact."""
        return cls._discoverable_users(caller).order_by("profile__username", "id")
