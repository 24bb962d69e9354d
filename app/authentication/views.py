"""
Authentication views.

This module provides API views for:
- Signup, signin, signout and the current user (/api/auth/...)
- The caller's own profile (/api/profile)
- Public profiles and user discovery (/api/users/...)

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AuthService, ProfileService)
    - urls.py, profile_urls.py: URL routing

Views only translate HTTP to service calls: validation errors become 400
via serializers, ServiceResult failures become 400 (or 401 for bad
credentials), and NotFoundError becomes 404 via the exception handler.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    DirectoryUserSerializer,
    MeSerializer,
    MessageResponseSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    PublicProfileSerializer,
    SessionSerializer,
    SigninSerializer,
    SignoutSerializer,
    SignupSerializer,
    UserSerializer,
)
from authentication.services import AuthService, ProfileService


def session_response(session, request, status_code=status.HTTP_200_OK):
    """Render an AuthService session payload."""
    return Response(
        {
            "user": UserSerializer(session["user"], context={"request": request}).data,
            "profile": ProfileSerializer(session["profile"], context={"request": request}).data,
            "token": session["token"],
            "refresh": session["refresh"],
        },
        status=status_code,
    )


# =============================================================================
# Account Views
# =============================================================================


class SignupView(APIView):
    """
    Create an account and sign in.

    POST /api/auth/signup
        {"email": "...", "password": "...", "full_name": "...", "username": "..."}

    Returns 201 {user, profile, token, refresh}. Duplicate email or
    username returns 400 and writes nothing.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Sign up",
        request=SignupSerializer,
        responses={201: SessionSerializer},
    )
    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.signup(**serializer.validated_data)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)
        return session_response(result.data, request, status.HTTP_201_CREATED)


class SigninView(APIView):
    """
    Exchange email and password for a fresh token pair.

    POST /api/auth/signin
        {"email": "...", "password": "..."}

    Returns 200 {user, profile, token, refresh}, or 401
    {"error": "Invalid credentials"} whatever the reason for rejection.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Sign in",
        request=SigninSerializer,
        responses={200: SessionSerializer},
    )
    def post(self, request):
        serializer = SigninSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.signin(**serializer.validated_data)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_401_UNAUTHORIZED)
        return session_response(result.data, request)


class SignoutView(APIView):
    """
    POST /api/auth/signout
        {"refresh": "..."}   (optional)

    Blacklists the refresh token when given and marks the caller offline.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Sign out",
        request=SignoutSerializer,
        responses={200: MessageResponseSerializer},
    )
    def post(self, request):
        serializer = SignoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.signout(
            request.user, refresh=serializer.validated_data.get("refresh") or None
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)
        return Response({"message": "Signed out successfully"})


class MeView(APIView):
    """GET /api/auth/me: the caller's account and profile."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Current user", responses={200: MeSerializer})
    def get(self, request):
        profile = ProfileService.get_own_profile(request.user)
        return Response(
            {
                "user": UserSerializer(request.user).data,
                "profile": ProfileSerializer(profile).data,
            }
        )


# =============================================================================
# Profile Views
# =============================================================================


class ProfileView(APIView):
    """
    API view for the caller's own profile.

    GET: Retrieve current user's profile
    PUT/PATCH: Update current user's profile

    URL: /api/profile

    Both update verbs have partial semantics: fields missing from the body
    keep their values.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get own profile", responses={200: ProfileSerializer})
    def get(self, request):
        profile = ProfileService.get_own_profile(request.user)
        return Response(ProfileSerializer(profile).data)

    @extend_schema(
        summary="Update own profile",
        request=ProfileUpdateSerializer,
        responses={200: ProfileSerializer},
    )
    def put(self, request):
        return self._update_profile(request)

    @extend_schema(
        summary="Partially update own profile",
        request=ProfileUpdateSerializer,
        responses={200: ProfileSerializer},
    )
    def patch(self, request):
        return self._update_profile(request)

    def _update_profile(self, request):
        profile = ProfileService.get_own_profile(request.user)
        serializer = ProfileUpdateSerializer(
            profile,
            data=request.data,
            partial=True,
            context={"request": request, "user": request.user},
        )
        serializer.is_valid(raise_exception=True)

        result = ProfileService.update_profile(request.user, **serializer.validated_data)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)
        return Response(ProfileSerializer(result.data).data)


class PublicProfileView(APIView):
    """GET /api/users/<user_id>/profile: another user's public profile."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get a user's public profile", responses={200: PublicProfileSerializer})
    def get(self, request, user_id):
        profile = ProfileService.get_public_profile(user_id)
        return Response(PublicProfileSerializer(profile).data)


# =============================================================================
# Discovery Views
# =============================================================================


class UserSearchView(APIView):
    """
    GET /api/users/search?email=<exact email>
    GET /api/users/search?q=<text>

    Returns a plain list; an empty query returns [].
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Search users",
        parameters=[
            OpenApiParameter("email", str, description="Exact email (case-insensitive)"),
            OpenApiParameter("q", str, description="Substring of email, username or name"),
        ],
        responses={200: DirectoryUserSerializer(many=True)},
    )
    def get(self, request):
        users = ProfileService.search_users(
            request.user,
            email=request.query_params.get("email"),
            q=request.query_params.get("q"),
        )
        return Response(DirectoryUserSerializer(users, many=True).data)


class UserListView(generics.ListAPIView):
    """
    GET /api/users/all

    Every other active user with an is_contact flag, page-number
    paginated (settings.REST_FRAMEWORK["PAGE_SIZE"]).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = DirectoryUserSerializer

    def get_queryset(self):
        return ProfileService.list_users(self.request.user)

    @extend_schema(summary="List all users")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
