"""
URL configuration for Parley.

URL Structure:
    /                                  - ReDoc API documentation
    /schema/                           - OpenAPI schema (YAML)
    /admin/                            - Django admin interface
    /health/                           - Health check endpoint (load balancers, Docker)
    /api/auth/                         - Authentication endpoints
        signup                         - Create account, returns token
        signin                         - Email/password login, returns token
        signout                        - Blacklist refresh token, go offline
        token/refresh                  - Exchange refresh token for access token
        me                             - Current user and profile
    /api/profile                       - Own profile (GET/PUT/PATCH)
    /api/users/                        - User discovery
        <id>/profile                   - Public profile of another user
        search                         - Search by email or free text
        all                            - Every other active user
    /api/conversations                 - Conversation list/create
        <id>/details                   - Participants and display name
        <id>/messages                  - Message list/send
        <id>/read                      - Mark conversation as read
    /api/contacts                      - Contact list/add
        <contact_id>                   - Remove contact

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# All routes here are prefixed with /api/ automatically
api_patterns = [
    path("auth/", include("authentication.urls")),
    path("", include("authentication.profile_urls")),
    path("", include("chat.urls")),
    path("", include("contacts.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    path("api/", include(api_patterns)),
]

admin.site.site_header = "Parley Admin"
admin.site.site_title = "Parley Admin Portal"
admin.site.index_title = "Welcome to the Parley Admin Portal"
