"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures (active, inactive, superuser)
- API client helpers for authenticated requests

The api_client and authenticated_client_factory fixtures live in the
root conftest.py and are shared by every app.

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get("/api/profile")
        assert response.status_code == 200
"""

import pytest

from authentication.models import User
from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """
    Active user with a filled-in profile.

    Signs in with "TestPass123!".
    """
    return UserFactory(
        email="alice@example.com",
        profile__username="alice",
        profile__full_name="Alice Liddell",
    )


@pytest.fixture
def other_user(db):
    return UserFactory(
        email="bob@example.com",
        profile__username="bob",
        profile__full_name="Bob Builder",
    )


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(email="gone@example.com", is_active=False, profile__username="gone")


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(email="admin@example.com", password="AdminPass123!")


@pytest.fixture
def profile(user):
    """Get the profile for the default user fixture."""
    return user.profile


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def authenticated_client(authenticated_client_factory, user):
    """
    API client authenticated with a bearer token for the default user.

    Use this for tests that need a logged-in user.
    """
    return authenticated_client_factory(user)


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def signup_data():
    """Valid signup payload."""
    return {
        "email": "new.user@example.com",
        "password": "SecurePass123!",
        "full_name": "New User",
        "username": "new_user",
    }
