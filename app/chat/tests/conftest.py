"""
Test configuration and fixtures for chat tests.

This module provides:
- Users alice, bob and carol who share conversations, and an outsider
- A direct conversation (alice, bob) and a group (alice, bob, carol)
- Authenticated API clients per user

Usage:
    def test_example(group_conversation, alice_client):
        response = alice_client.get(f"/api/conversations/{group_conversation.id}/details")
        assert response.status_code == 200
"""

import pytest

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectConversationFactory, GroupConversationFactory


# =============================================================================
# User Fixtures
# =============================================================================


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
def outsider(db):
    """A user who is not a participant in any test conversation."""
    return UserFactory(profile__username="outsider")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def direct_conversation(alice, bob):
    """Direct conversation between alice and bob."""
    return DirectConversationFactory(user1=alice, user2=bob)


@pytest.fixture
def group_conversation(alice, bob, carol):
    """Group "Weekend Plans" created by alice with bob and carol."""
    return GroupConversationFactory(
        name="Weekend Plans", created_by=alice, members=[bob, carol]
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def alice_client(authenticated_client_factory, alice):
    return authenticated_client_factory(alice)


@pytest.fixture
def bob_client(authenticated_client_factory, bob):
    return authenticated_client_factory(bob)


@pytest.fixture
def outsider_client(authenticated_client_factory, outsider):
    return authenticated_client_factory(outsider)
