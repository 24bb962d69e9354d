"""
URL configuration for account endpoints.

Mounted at /api/auth/ in config/urls.py:
    signup          - POST: create account, returns tokens
    signin          - POST: email/password login, returns tokens
    signout         - POST: blacklist refresh token, go offline
    token/refresh   - POST: exchange refresh token for a new access token
    me              - GET: current user and profile
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import MeView, SigninView, SignoutView, SignupView

app_name = "authentication"

urlpatterns = [
    path("signup", SignupView.as_view(), name="signup"),
    path("signin", SigninView.as_view(), name="signin"),
    path("signout", SignoutView.as_view(), name="signout"),
    path("token/refresh", TokenRefreshView.as_view(), name="token-refresh"),
    path("me", MeView.as_view(), name="me"),
]
