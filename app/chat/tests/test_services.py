"""
Tests for chat services.

Test Organization:
    - TestCreateConversation: Validation, direct dedup, group creation
    - TestListConversations: Membership filter, last message, unread counts
    - TestDisplayName: Derived titles
    - TestMarkRead: Read stamps and status transitions
    - TestListMessages: Ordering, after=, membership
    - TestMarkDelivered: Delivery marking scoped to given messages
    - TestPostMessage: Validation, statuses, conversation bump
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.models import (
    Conversation,
    DeliveryStatus,
    DirectConversationPair,
    MessageStatus,
    MessageType,
    Participant,
)
from chat.services import ConversationService, MessageService
from chat.tests.factories import (
    DirectConversationFactory,
    GroupConversationFactory,
    MessageFactory,
)
from core.exceptions import PermissionDeniedError


# =============================================================================
# ConversationService
# =============================================================================


@pytest.mark.django_db
class TestCreateConversation:
    def test_direct_creates_conversation_pair_and_participants(self, alice, bob):
        result = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[bob.id]
        )

        assert result.success
        conversation, created = result.data
        assert created is True
        assert conversation.is_group is False
        assert conversation.created_by == alice
        assert set(conversation.participants.values_list("user_id", flat=True)) == {alice.id, bob.id}
        pair = DirectConversationPair.objects.get(conversation=conversation)
        assert (pair.user_lower_id, pair.user_higher_id) == DirectConversationPair.canonical(
            alice.id, bob.id
        )

    def test_direct_twice_returns_same_conversation(self, alice, bob):
        first = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[bob.id]
        )
        second = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[bob.id]
        )

        assert second.data[0].id == first.data[0].id
        assert second.data[1] is False
        assert Conversation.objects.count() == 1

    def test_direct_from_other_side_returns_same_conversation(self, alice, bob):
        first = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[bob.id]
        )
        second = ConversationService.create_conversation(
            creator=bob, is_group=False, participant_ids=[alice.id]
        )

        assert second.data[0].id == first.data[0].id

    def test_creator_id_in_list_is_ignored(self, alice, bob):
        result = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[alice.id, bob.id]
        )

        conversation, _ = result.data
        assert conversation.participants.filter(user=alice).count() == 1

    def test_only_self_fails(self, alice):
        result = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[alice.id]
        )

        assert not result.success
        assert result.error_code == "NO_PARTICIPANTS"

    def test_direct_with_two_others_fails(self, alice, bob, carol):
        result = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[bob.id, carol.id]
        )

        assert not result.success
        assert result.error_code == "INVALID_PARTICIPANTS"
        assert Conversation.objects.count() == 0

    def test_unknown_participant_fails(self, alice):
        result = ConversationService.create_conversation(
            creator=alice, is_group=True, name="Ghosts", participant_ids=[999999]
        )

        assert not result.success
        assert result.error_code == "INVALID_PARTICIPANTS"
        assert "participant_ids" in result.errors

    def test_inactive_participant_fails(self, alice):
        inactive = UserFactory(is_active=False)

        result = ConversationService.create_conversation(
            creator=alice, is_group=False, participant_ids=[inactive.id]
        )

        assert result.error_code == "INVALID_PARTICIPANTS"

    def test_group_requires_name(self, alice, bob):
        result = ConversationService.create_conversation(
            creator=alice, is_group=True, name="   ", participant_ids=[bob.id]
        )

        assert not result.success
        assert result.error_code == "NAME_REQUIRED"

    def test_group_creates_all_participants(self, alice, bob, carol):
        result = ConversationService.create_conversation(
            creator=alice,
            is_group=True,
            name="  Book Club ",
            participant_ids=[bob.id, carol.id],
        )

        conversation, created = result.data
        assert created is True
        assert conversation.name == "Book Club"
        assert conversation.get_active_participants().count() == 3
        assert not DirectConversationPair.objects.filter(conversation=conversation).exists()

    def test_groups_are_never_deduplicated(self, alice, bob):
        for _ in range(2):
            ConversationService.create_conversation(
                creator=alice, is_group=True, name="Same", participant_ids=[bob.id]
            )

        assert Conversation.objects.filter(is_group=True).count() == 2

    def test_concurrent_direct_creation_returns_winner(self, mocker, alice, bob):
        """A pair inserted between lookup and insert is picked up on re-read."""
        existing = DirectConversationFactory(user1=alice, user2=bob)
        mocker.patch.object(
            ConversationService, "_find_direct", side_effect=[None, existing]
        )

        result = ConversationService.get_or_create_direct(alice, bob)

        assert result.data == (existing, False)
        assert Conversation.objects.count() == 1

    def test_integrity_error_without_winner_propagates(self, mocker, alice, bob):
        DirectConversationFactory(user1=alice, user2=bob)
        mocker.patch.object(ConversationService, "_find_direct", return_value=None)

        with pytest.raises(IntegrityError):
            ConversationService.get_or_create_direct(alice, bob)


@pytest.mark.django_db
class TestListConversations:
    def test_only_active_memberships(self, alice, bob, carol, direct_conversation, group_conversation):
        Participant.objects.filter(conversation=group_conversation, user=bob).update(
            left_at=timezone.now()
        )

        bob_ids = [c.id for c in ConversationService.list_conversations_for_user(bob)]
        carol_ids = [c.id for c in ConversationService.list_conversations_for_user(carol)]

        assert bob_ids == [direct_conversation.id]
        assert carol_ids == [group_conversation.id]

    def test_includes_latest_message_and_participants(self, alice, bob, direct_conversation):
        MessageService.post_message(direct_conversation, sender=alice, content="first")
        MessageService.post_message(direct_conversation, sender=bob, content="second")

        [conversation] = ConversationService.list_conversations_for_user(alice)

        assert [m.content for m in conversation.latest_messages] == ["second"]
        assert {p.user_id for p in conversation.active_participants} == {alice.id, bob.id}

    def test_without_messages_latest_is_empty(self, alice, direct_conversation):
        [conversation] = ConversationService.list_conversations_for_user(alice)

        assert conversation.latest_messages == []
        assert conversation.unread_count == 0

    def test_unread_count_per_caller(self, alice, bob, carol, group_conversation):
        MessageService.post_message(group_conversation, sender=alice, content="one")
        MessageService.post_message(group_conversation, sender=alice, content="two")
        ConversationService.mark_read(group_conversation, carol)

        [for_alice] = ConversationService.list_conversations_for_user(alice)
        [for_bob] = ConversationService.list_conversations_for_user(bob)
        [for_carol] = ConversationService.list_conversations_for_user(carol)

        assert for_alice.unread_count == 0
        assert for_bob.unread_count == 2
        assert for_carol.unread_count == 0

    def test_posting_moves_conversation_to_top(self, alice, bob, carol):
        older = DirectConversationFactory(user1=alice, user2=bob)
        newer = DirectConversationFactory(user1=alice, user2=carol)

        MessageService.post_message(older, sender=bob, content="bump")

        ids = [c.id for c in ConversationService.list_conversations_for_user(alice)]
        assert ids == [older.id, newer.id]


@pytest.mark.django_db
class TestDisplayName:
    def test_name_wins(self, alice, group_conversation):
        assert ConversationService.display_name(group_conversation, alice) == "Weekend Plans"

    def test_direct_shows_other_participant(self, alice, bob, direct_conversation):
        assert ConversationService.display_name(direct_conversation, alice) == "Bob Builder"
        assert ConversationService.display_name(direct_conversation, bob) == "Alice Liddell"

    def test_unnamed_group_joins_other_names(self, alice, bob, carol):
        conversation = GroupConversationFactory(name="", created_by=alice, members=[bob, carol])

        assert ConversationService.display_name(conversation, alice) == "Bob Builder, Carol Danvers"

    def test_falls_back_to_username_then_email(self, alice):
        no_name = UserFactory(profile__full_name="", profile__username="quiet_one")
        nobody = UserFactory(profile__full_name="", profile__username="")
        conversation = GroupConversationFactory(name="", created_by=alice, members=[no_name, nobody])

        assert ConversationService.display_name(conversation, alice) == f"quiet_one, {nobody.email}"

    def test_uses_prefetched_participants(self, alice, bob, direct_conversation, django_assert_num_queries):
        conversation = ConversationService.get_conversation_details(direct_conversation, alice)

        with django_assert_num_queries(0):
            assert ConversationService.display_name(conversation, alice) == "Bob Builder"


@pytest.mark.django_db
class TestGetConversationDetails:
    def test_returns_active_participants(self, alice, group_conversation):
        conversation = ConversationService.get_conversation_details(group_conversation, alice)

        assert len(conversation.active_participants) == 3

    def test_non_participant_denied(self, outsider, group_conversation):
        with pytest.raises(PermissionDeniedError):
            ConversationService.get_conversation_details(group_conversation, outsider)

    def test_left_participant_denied(self, bob, group_conversation):
        Participant.objects.filter(conversation=group_conversation, user=bob).update(
            left_at=timezone.now()
        )

        with pytest.raises(PermissionDeniedError):
            ConversationService.get_conversation_details(group_conversation, bob)


@pytest.mark.django_db
class TestMarkRead:
    def test_marks_statuses_read_and_stamps_participant(self, alice, bob, direct_conversation):
        MessageService.post_message(direct_conversation, sender=alice, content="hi")
        MessageService.post_message(direct_conversation, sender=alice, content="there")

        result = ConversationService.mark_read(direct_conversation, bob)

        assert result.data == 2
        assert not MessageStatus.objects.filter(user=bob).exclude(status=DeliveryStatus.READ).exists()
        participant = direct_conversation.get_active_participant_for_user(bob)
        assert participant.last_read_at is not None

    def test_second_call_updates_nothing(self, alice, bob, direct_conversation):
        MessageService.post_message(direct_conversation, sender=alice, content="hi")
        ConversationService.mark_read(direct_conversation, bob)

        assert ConversationService.mark_read(direct_conversation, bob).data == 0

    def test_non_participant_denied(self, outsider, direct_conversation):
        with pytest.raises(PermissionDeniedError):
            ConversationService.mark_read(direct_conversation, outsider)


# =============================================================================
# MessageService
# =============================================================================


@pytest.mark.django_db
class TestListMessages:
    def test_oldest_first(self, alice, bob, direct_conversation):
        for text in ("a", "b", "c"):
            MessageService.post_message(direct_conversation, sender=alice, content=text)

        messages = list(MessageService.list_messages(direct_conversation, bob))

        assert [m.content for m in messages] == ["a", "b", "c"]
        created = [m.created_at for m in messages]
        assert created == sorted(created)

    def test_after_returns_only_newer(self, alice, bob, direct_conversation):
        first = MessageService.post_message(direct_conversation, sender=alice, content="a").data
        MessageService.post_message(direct_conversation, sender=alice, content="b")

        messages = list(MessageService.list_messages(direct_conversation, bob, after=first.id))

        assert [m.content for m in messages] == ["b"]

    def test_listing_alone_changes_no_status(self, alice, bob, direct_conversation):
        MessageService.post_message(direct_conversation, sender=alice, content="hello")

        list(MessageService.list_messages(direct_conversation, bob))

        assert MessageStatus.objects.get(user=bob).status == DeliveryStatus.SENT

    def test_non_participant_denied(self, outsider, direct_conversation):
        with pytest.raises(PermissionDeniedError):
            MessageService.list_messages(direct_conversation, outsider)


@pytest.mark.django_db
class TestMarkDelivered:
    def test_marks_sent_as_delivered_for_caller_only(self, alice, bob, carol, group_conversation):
        message = MessageService.post_message(group_conversation, sender=alice, content="hello").data

        count = MessageService.mark_delivered(group_conversation, bob, [message.id])

        assert count == 1
        assert MessageStatus.objects.get(user=bob).status == DeliveryStatus.DELIVERED
        assert MessageStatus.objects.get(user=carol).status == DeliveryStatus.SENT

    def test_read_status_is_not_downgraded(self, alice, bob, direct_conversation):
        message = MessageService.post_message(direct_conversation, sender=alice, content="hello").data
        ConversationService.mark_read(direct_conversation, bob)

        MessageService.mark_delivered(direct_conversation, bob, [message.id])

        assert MessageStatus.objects.get(user=bob).status == DeliveryStatus.READ

    def test_only_given_messages_change(self, alice, bob, direct_conversation):
        first = MessageService.post_message(direct_conversation, sender=alice, content="one").data
        second = MessageService.post_message(direct_conversation, sender=alice, content="two").data

        MessageService.mark_delivered(direct_conversation, bob, [first.id])

        assert MessageStatus.objects.get(message=first, user=bob).status == DeliveryStatus.DELIVERED
        assert MessageStatus.objects.get(message=second, user=bob).status == DeliveryStatus.SENT

    def test_empty_ids_is_noop(self, bob, direct_conversation):
        assert MessageService.mark_delivered(direct_conversation, bob, []) == 0


@pytest.mark.django_db
class TestPostMessage:
    def test_creates_message_with_server_timestamp(self, alice, direct_conversation):
        before = timezone.now()

        result = MessageService.post_message(direct_conversation, sender=alice, content="hello")

        assert result.success
        assert result.data.sender == alice
        assert result.data.content == "hello"
        assert result.data.created_at >= before

    def test_content_is_stripped(self, alice, direct_conversation):
        result = MessageService.post_message(direct_conversation, sender=alice, content="  hi  ")

        assert result.data.content == "hi"

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_empty_content_rejected(self, alice, direct_conversation, content):
        result = MessageService.post_message(direct_conversation, sender=alice, content=content)

        assert not result.success
        assert result.error_code == "EMPTY_CONTENT"
        assert not direct_conversation.messages.exists()

    def test_creates_sent_status_for_each_other_participant(self, alice, bob, carol, group_conversation):
        message = MessageService.post_message(group_conversation, sender=alice, content="hey").data

        statuses = MessageStatus.objects.filter(message=message)
        assert {s.user_id for s in statuses} == {bob.id, carol.id}
        assert {s.status for s in statuses} == {DeliveryStatus.SENT}

    def test_left_participant_gets_no_status(self, alice, bob, carol, group_conversation):
        Participant.objects.filter(conversation=group_conversation, user=carol).update(
            left_at=timezone.now()
        )

        message = MessageService.post_message(group_conversation, sender=alice, content="hey").data

        assert set(message.statuses.values_list("user_id", flat=True)) == {bob.id}

    def test_bumps_conversation(self, alice, direct_conversation):
        previous_updated_at = direct_conversation.updated_at

        message = MessageService.post_message(direct_conversation, sender=alice, content="hey").data

        direct_conversation.refresh_from_db()
        assert direct_conversation.last_message_at == message.created_at
        assert direct_conversation.updated_at > previous_updated_at

    def test_last_message_at_never_moves_backwards(self, alice, direct_conversation):
        """A post committing after a newer one keeps the newer timestamp."""
        newer = timezone.now() + timedelta(minutes=5)
        Conversation.objects.filter(pk=direct_conversation.pk).update(last_message_at=newer)

        MessageService.post_message(direct_conversation, sender=alice, content="late")

        direct_conversation.refresh_from_db()
        assert direct_conversation.last_message_at == newer

    def test_unknown_message_type_rejected(self, alice, direct_conversation):
        result = MessageService.post_message(
            direct_conversation, sender=alice, content="hey", message_type="video"
        )

        assert result.error_code == "INVALID_MESSAGE_TYPE"

    def test_image_without_file_url_rejected(self, alice, direct_conversation):
        result = MessageService.post_message(
            direct_conversation, sender=alice, content="look", message_type=MessageType.IMAGE
        )

        assert result.error_code == "MISSING_ATTACHMENT"

    def test_file_message_keeps_metadata(self, alice, direct_conversation):
        result = MessageService.post_message(
            direct_conversation,
            sender=alice,
            content="the report",
            message_type=MessageType.FILE,
            file_url="https://cdn.example.com/report.pdf",
            file_name="report.pdf",
            file_size=2048,
        )

        message = result.data
        assert message.file_name == "report.pdf"
        assert message.file_size == 2048
        assert message.file_url == "https://cdn.example.com/report.pdf"

    def test_reply_in_same_conversation(self, alice, bob, direct_conversation):
        original = MessageService.post_message(direct_conversation, sender=alice, content="q").data

        reply = MessageService.post_message(
            direct_conversation, sender=bob, content="a", reply_to_id=original.id
        ).data

        assert reply.reply_to == original

    def test_reply_to_other_conversation_rejected(self, alice, direct_conversation, group_conversation):
        elsewhere = MessageFactory(conversation=group_conversation, sender=alice)

        result = MessageService.post_message(
            direct_conversation, sender=alice, content="a", reply_to_id=elsewhere.id
        )

        assert result.error_code == "INVALID_REPLY"

    def test_non_participant_denied(self, outsider, direct_conversation):
        with pytest.raises(PermissionDeniedError):
            MessageService.post_message(direct_conversation, sender=outsider, content="hi")

        assert not direct_conversation.messages.exists()
