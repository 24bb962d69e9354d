"""
Test configuration and fixtures for contacts tests.

Usage:
    def test_example(alice, bob, alice_client):
        response = alice_client.post("/api/contacts", {"contact_id": bob.id})
        assert response.status_code == 201
"""

import pytest

from authentication.tests.factories import UserFactory


@pytest.fixture
def alice(db):
    return UserFactory(profile__username="alice", profile__full_name="Alice Liddell")


@pytest.fixture
def bob(db):
    return UserFactory(profile__username="bob", profile__full_name="Bob Builder")


@pytest.fixture
def carol(db):
    return UserFactory(profile__username="carol", profile__full_name="Carol Danvers")


@pytest.fixture
def alice_client(authenticated_client_factory, alice):
    """API client authenticated as alice."""
    return authenticated_client_factory(alice)
