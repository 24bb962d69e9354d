"""
URL configuration for profile and user discovery endpoints.

Mounted at /api/ in config/urls.py:
    profile                     - GET/PUT/PATCH: own profile
    users/<user_id>/profile     - GET: public profile
    users/search                - GET: search by ?email= or ?q=
    users/all                   - GET: paginated user directory
"""

from django.urls import path

from authentication.views import (
    ProfileView,
    PublicProfileView,
    UserListView,
    UserSearchView,
)

app_name = "users"

urlpatterns = [
    path("profile", ProfileView.as_view(), name="profile"),
    path("users/search", UserSearchView.as_view(), name="search"),
    path("users/all", UserListView.as_view(), name="all"),
    path("users/<int:user_id>/profile", PublicProfileView.as_view(), name="public-profile"),
]
