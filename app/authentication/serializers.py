"""
Serializers for authentication models.

This module provides DRF serializers for:
- Signup / signin / signout request bodies
- User and own Profile (read)
- Public profiles for other users (never email or password hash)
- Profile updates (partial, with username/email re-validation)
- User directory entries (search and "all users")

Related files:
    - models.py: User and Profile models
    - views.py: Views that use these serializers
    - services.py: AuthService and ProfileService

Security:
    - Password fields are write-only
    - PublicProfileSerializer is the only shape used for other users
"""

from rest_framework import serializers

from authentication.models import Profile, User
from authentication.services import ProfileService


class UserSerializer(serializers.ModelSerializer):
    """The authenticated caller's own account."""

    class Meta:
        model = User
        fields = ["id", "email", "date_joined"]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for the caller's own Profile (read operations).

    Includes the account email, which other users never see.
    """

    user_id = serializers.IntegerField(source="user.id", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user_id",
            "email",
            "username",
            "full_name",
            "avatar_url",
            "bio",
            "status",
            "last_seen",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicProfileSerializer(serializers.ModelSerializer):
    """Profile as shown to other users: display fields only."""

    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user_id",
            "username",
            "full_name",
            "avatar_url",
            "bio",
            "status",
            "last_seen",
        ]
        read_only_fields = fields


class DirectoryUserSerializer(serializers.ModelSerializer):
    """
    A user in search results or the "all users" directory.

    is_contact comes from the Exists() annotation added by
    ProfileService; it is False when the queryset was not annotated.
    """

    profile = PublicProfileSerializer(read_only=True)
    is_contact = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "profile", "is_contact"]
        read_only_fields = fields

    def get_is_contact(self, obj) -> bool:
        return bool(getattr(obj, "is_contact", False))


class SignupSerializer(serializers.Serializer):
    """
    Request body for POST /api/auth/signup.

    Format checks only; email and username uniqueness are decided by
    AuthService.signup so concurrent signups resolve consistently.
    """

    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        max_length=128,
        style={"input_type": "password"},
        help_text="Password must be at least 8 characters.",
    )
    full_name = serializers.CharField(max_length=150)
    username = serializers.CharField(
        min_length=3,
        max_length=30,
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )

    def validate_email(self, value):
        return value.lower().strip()

    def validate_full_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Full name cannot be blank.")
        return value.strip()

    def validate_username(self, value):
        """Validate username format and reserved names."""
        from authentication.models import RESERVED_USERNAMES

        username = value.lower().strip()
        if not ProfileService.USERNAME_RE.match(username):
            raise serializers.ValidationError(
                "Username must be 3-30 characters and contain only "
                "letters, numbers, underscores, and hyphens."
            )
        if username in RESERVED_USERNAMES:
            raise serializers.ValidationError(
                f"The username '{username}' is reserved and cannot be used."
            )
        return username


class SigninSerializer(serializers.Serializer):
    """Request body for POST /api/auth/signin."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})


class SignoutSerializer(serializers.Serializer):
    """Request body for POST /api/auth/signout."""

    refresh = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="Refresh token to blacklist. Optional.",
    )


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating the caller's profile.

    Always used with partial=True: only provided fields change. The
    account email can be changed here too; it is written to User.
    Expects context["user"] for uniqueness checks.
    """

    username = serializers.CharField(
        min_length=3,
        max_length=30,
        required=False,
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )
    email = serializers.EmailField(required=False, max_length=254)

    class Meta:
        model = Profile
        fields = [
            "username",
            "full_name",
            "avatar_url",
            "bio",
            "status",
            "email",
        ]

    def validate_username(self, value):
        """Validate username format, uniqueness, and reserved names."""
        is_valid, message = ProfileService.validate_username(
            value, exclude_user=self.context.get("user")
        )
        if not is_valid:
            raise serializers.ValidationError(message)
        return value.lower().strip()

    def validate_email(self, value):
        email = value.lower().strip()
        user = self.context.get("user")
        existing = User.objects.filter(email__iexact=email)
        if user is not None:
            existing = existing.exclude(pk=user.pk)
        if existing.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return email


class SessionSerializer(serializers.Serializer):
    """Response body of signup and signin (documentation only)."""

    user = UserSerializer()
    profile = ProfileSerializer()
    token = serializers.CharField(help_text="Bearer access token")
    refresh = serializers.CharField(help_text="Refresh token")


class MeSerializer(serializers.Serializer):
    """Response body of GET /api/auth/me (documentation only)."""

    user = UserSerializer()
    profile = ProfileSerializer()


class MessageResponseSerializer(serializers.Serializer):
    """Plain {"message": ...} response (documentation only)."""

    message = serializers.CharField()
