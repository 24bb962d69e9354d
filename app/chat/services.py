"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations, participants, and messages.

Services:
    ConversationService: Listing, creation (with direct dedup), details, read state
    MessageService: Message history and posting

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Membership is verified here as well as in the view permission
    - Multi-row writes run in a single transaction

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.create_conversation(
        creator=user, is_group=False, participant_ids=[other.id]
    )
    conversation, created = result.data

    result = MessageService.post_message(conversation, sender=user, content="hello")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db.models import Count, F, IntegerField, OuterRef, Prefetch, Subquery, Value
from django.db.models.functions import Coalesce, Greatest
from django.utils import timezone

from chat.models import (
    Conversation,
    DeliveryStatus,
    DirectConversationPair,
    Message,
    MessageStatus,
    MessageType,
    Participant,
)
from core.exceptions import PermissionDeniedError
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User


def active_participants_prefetch() -> Prefetch:
    """Prefetch active participants with their profiles into .active_participants."""
    return Prefetch(
        "participants",
        queryset=Participant.objects.filter(left_at__isnull=True)
        .select_related("user__profile")
        .order_by("joined_at", "id"),
        to_attr="active_participants",
    )


class ConversationService(BaseService):
    """
    Service for conversation lifecycle operations.

    Methods:
        list_conversations_for_user: The caller's conversations, enriched
        create_conversation: Create a group, or get-or-create a direct conversation
        get_or_create_direct: Direct conversation dedup per user pair
        get_conversation_details: Conversation with participants and profiles
        display_name: Derived, never persisted title
        mark_read: Stamp last_read_at and mark statuses read
    """

    @classmethod
    def require_participant(cls, conversation: Conversation, user: User) -> Participant:
        """
        Return the user's active participation or raise.

        Raises:
            PermissionDeniedError: If user is not an active participant
        """
        participant = conversation.get_active_participant_for_user(user)
        if participant is None:
            cls.get_logger().info(
                f"User {user.id} denied access to conversation {conversation.id}"
            )
            raise PermissionDeniedError(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )
        return participant

    @classmethod
    def list_conversations_for_user(cls, user: User) -> QuerySet[Conversation]:
        """
        All conversations where user has an active participant row.

        Each conversation carries:
            active_participants: Participants with user and profile loaded
            latest_messages: At most one message, the newest, with sender profile
            unread_count: The caller's messages not yet read

        Ordered most recently updated first; posting a message bumps
        updated_at.
        """
        unread = (
            MessageStatus.objects.filter(
                user=user,
                message__conversation=OuterRef("pk"),
            )
            .exclude(status=DeliveryStatus.READ)
            .order_by()
            .values("message__conversation")
            .annotate(total=Count("id"))
            .values("total")
        )
        latest_message = Prefetch(
            "messages",
            queryset=Message.objects.select_related("sender__profile").order_by(
                "-created_at", "-id"
            )[:1],
            to_attr="latest_messages",
        )
        return (
            Conversation.objects.filter(
                participants__user=user,
                participants__left_at__isnull=True,
            )
            .annotate(
                unread_count=Coalesce(
                    Subquery(unread, output_field=IntegerField()), Value(0)
                )
            )
            .prefetch_related(active_participants_prefetch(), latest_message)
            .order_by("-updated_at", "-id")
        )

    @classmethod
    def create_conversation(
        cls,
        creator: User,
        is_group: bool,
        participant_ids: list[int],
        name: str = "",
        avatar_url: str = "",
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Create a conversation, or return the existing direct one.

        The creator is always a participant; their own id in
        participant_ids is ignored.

        Returns:
            ServiceResult with (conversation, created)

        Error codes:
            NO_PARTICIPANTS: No participant other than the creator
            INVALID_PARTICIPANTS: Unknown/inactive ids, or a direct
                conversation with more than one other participant
            NAME_REQUIRED: Group without a name
        """
        User = get_user_model()

        other_ids = list(dict.fromkeys(pid for pid in participant_ids if pid != creator.id))
        if not other_ids:
            return ServiceResult.failure(
                "At least one participant other than yourself is required",
                error_code="NO_PARTICIPANTS",
            )

        others = list(User.objects.filter(id__in=other_ids, is_active=True))
        missing = sorted(set(other_ids) - {u.id for u in others})
        if missing:
            return ServiceResult.failure(
                f"Unknown users: {', '.join(str(pid) for pid in missing)}",
                error_code="INVALID_PARTICIPANTS",
                errors={"participant_ids": [f"User {pid} does not exist" for pid in missing]},
            )

        if not is_group:
            if len(others) != 1:
                return ServiceResult.failure(
                    "A direct conversation has exactly one other participant",
                    error_code="INVALID_PARTICIPANTS",
                )
            return cls.get_or_create_direct(creator, others[0])

        name = (name or "").strip()
        if not name:
            return ServiceResult.failure(
                "Group conversations require a name",
                error_code="NAME_REQUIRED",
                errors={"name": ["This field is required for groups."]},
            )

        with cls.atomic():
            conversation = Conversation.objects.create(
                name=name,
                is_group=True,
                avatar_url=avatar_url or "",
                created_by=creator,
            )
            Participant.objects.bulk_create(
                [Participant(conversation=conversation, user=creator)]
                + [Participant(conversation=conversation, user=user) for user in others]
            )

        cls.get_logger().info(
            f"User {creator.id} created group conversation {conversation.id} "
            f"with {len(others) + 1} participants"
        )
        return ServiceResult.success((conversation, True))

    @classmethod
    def get_or_create_direct(
        cls, creator: User, other: User
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Create or retrieve the direct conversation between two users.

        Implementation:
            1. Canonicalize order (lower user id first)
            2. Look up existing DirectConversationPair
            3. If found, return existing conversation
            4. If not found, create conversation, pair and both participants
               in one transaction
            5. If a concurrent request created the pair first, the unique
               constraint fails and the winner's conversation is returned
        """
        lower_id, higher_id = DirectConversationPair.canonical(creator.id, other.id)

        existing = cls._find_direct(lower_id, higher_id)
        if existing is not None:
            cls.get_logger().debug(
                f"Found existing direct conversation {existing.id} "
                f"between users {lower_id} and {higher_id}"
            )
            return ServiceResult.success((existing, False))

        try:
            with cls.atomic():
                conversation = Conversation.objects.create(is_group=False, created_by=creator)
                DirectConversationPair.objects.create(
                    conversation=conversation,
                    user_lower_id=lower_id,
                    user_higher_id=higher_id,
                )
                Participant.objects.bulk_create(
                    [
                        Participant(conversation=conversation, user=creator),
                        Participant(conversation=conversation, user=other),
                    ]
                )
        except IntegrityError:
            existing = cls._find_direct(lower_id, higher_id)
            if existing is None:
                raise
            return ServiceResult.success((existing, False))

        cls.get_logger().info(
            f"Created direct conversation {conversation.id} "
            f"between users {lower_id} and {higher_id}"
        )
        return ServiceResult.success((conversation, True))

    @staticmethod
    def _find_direct(lower_id: int, higher_id: int) -> Conversation | None:
        pair = (
            DirectConversationPair.objects.select_related("conversation")
            .filter(user_lower_id=lower_id, user_higher_id=higher_id)
            .first()
        )
        return pair.conversation if pair else None

    @classmethod
    def get_conversation_details(cls, conversation: Conversation, user: User) -> Conversation:
        """
        Conversation with .active_participants (profiles loaded).

        Raises:
            PermissionDeniedError: If user is not an active participant
        """
        cls.require_participant(conversation, user)
        return Conversation.objects.prefetch_related(active_participants_prefetch()).get(
            pk=conversation.pk
        )

    @staticmethod
    def display_name(conversation: Conversation, viewer: User) -> str:
        """
        Title shown to viewer.

        The conversation name if set. Otherwise a group lists the other
        participants' names comma-joined, and a direct conversation shows
        the other participant's name.
        """
        if conversation.name:
            return conversation.name

        participants = getattr(conversation, "active_participants", None)
        if participants is None:
            participants = conversation.get_active_participants().select_related("user__profile")

        names = [p.user.display_name for p in participants if p.user_id != viewer.id]
        if not names:
            return viewer.display_name
        if conversation.is_group:
            return ", ".join(names)
        return names[0]

    @classmethod
    def mark_read(cls, conversation: Conversation, user: User) -> ServiceResult[int]:
        """
        Mark everything in the conversation read for user.

        Returns:
            ServiceResult with the number of statuses moved to READ
        """
        participant = cls.require_participant(conversation, user)

        with cls.atomic():
            participant.last_read_at = timezone.now()
            participant.save(update_fields=["last_read_at", "updated_at"])
            updated = (
                MessageStatus.objects.filter(user=user, message__conversation=conversation)
                .exclude(status=DeliveryStatus.READ)
                .update(status=DeliveryStatus.READ, updated_at=timezone.now())
            )

        cls.get_logger().debug(
            f"User {user.id} marked conversation {conversation.id} as read ({updated} messages)"
        )
        return ServiceResult.success(updated)


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        list_messages: Oldest-first history, optionally after a message id
        mark_delivered: Move the caller's SENT statuses on shown messages to DELIVERED
        post_message: Validate and persist a message with recipient statuses
    """

    ATTACHMENT_TYPES = (MessageType.IMAGE, MessageType.FILE)

    @classmethod
    def list_messages(
        cls,
        conversation: Conversation,
        user: User,
        after: int | None = None,
    ) -> QuerySet[Message]:
        """
        Messages ordered by (created_at, id) with sender profiles joined.

        after limits the result to messages newer than that message id,
        which is what polling clients send. The queryset is lazy; call
        mark_delivered with the messages actually returned to the client.

        Raises:
            PermissionDeniedError: If user is not an active participant
        """
        ConversationService.require_participant(conversation, user)

        queryset = Message.objects.filter(conversation=conversation).select_related(
            "sender__profile"
        )
        if after is not None:
            queryset = queryset.filter(id__gt=after)
        return queryset.order_by("created_at", "id")

    @classmethod
    def mark_delivered(
        cls,
        conversation: Conversation,
        user: User,
        message_ids: list[int],
    ) -> int:
        """
        Move the user's SENT statuses for message_ids to DELIVERED.

        Only the given messages change, so messages beyond the page a
        client fetched stay SENT. READ statuses are never downgraded.

        Returns:
            Number of statuses updated
        """
        if not message_ids:
            return 0

        delivered = MessageStatus.objects.filter(
            user=user,
            message__conversation=conversation,
            message_id__in=message_ids,
            status=DeliveryStatus.SENT,
        ).update(status=DeliveryStatus.DELIVERED, updated_at=timezone.now())
        if delivered:
            cls.get_logger().debug(
                f"Marked {delivered} messages delivered to user {user.id} "
                f"in conversation {conversation.id}"
            )
        return delivered

    @classmethod
    def post_message(
        cls,
        conversation: Conversation,
        sender: User,
        content: str,
        message_type: str = MessageType.TEXT,
        file_url: str = "",
        file_name: str = "",
        file_size: int | None = None,
        reply_to_id: int | None = None,
    ) -> ServiceResult[Message]:
        """
        Send a message to a conversation.

        Args:
            conversation: Target conversation
            sender: User sending the message (must be an active participant)
            content: Message text, stored stripped
            message_type: text, image or file
            file_url, file_name, file_size: Attachment metadata
            reply_to_id: Optional id of a message in the same conversation

        Returns:
            ServiceResult with new Message

        Raises:
            PermissionDeniedError: If sender is not an active participant

        Error codes:
            EMPTY_CONTENT: Content is empty or whitespace
            INVALID_MESSAGE_TYPE: Unknown message type
            MISSING_ATTACHMENT: image/file message without file_url
            INVALID_REPLY: reply_to is not a message of this conversation
        """
        ConversationService.require_participant(conversation, sender)

        validation = cls.validate_required(content=content)
        if validation is not None:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
                errors=validation.errors,
            )
        content = content.strip()

        if message_type not in MessageType.values:
            return ServiceResult.failure(
                f"Unknown message type '{message_type}'",
                error_code="INVALID_MESSAGE_TYPE",
            )
        if message_type in cls.ATTACHMENT_TYPES and not file_url:
            return ServiceResult.failure(
                f"A {message_type} message requires file_url",
                error_code="MISSING_ATTACHMENT",
            )

        reply_to = None
        if reply_to_id is not None:
            reply_to = Message.objects.filter(id=reply_to_id, conversation=conversation).first()
            if reply_to is None:
                return ServiceResult.failure(
                    "Replied-to message not found in this conversation",
                    error_code="INVALID_REPLY",
                )

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                message_type=message_type,
                content=content,
                file_url=file_url or "",
                file_name=file_name or "",
                file_size=file_size,
                reply_to=reply_to,
            )

            recipient_ids = (
                conversation.get_active_participants()
                .exclude(user=sender)
                .values_list("user_id", flat=True)
            )
            MessageStatus.objects.bulk_create(
                [MessageStatus(message=message, user_id=uid) for uid in recipient_ids]
            )

            # Never move backwards when concurrent posts commit out of order
            Conversation.objects.filter(pk=conversation.pk).update(
                last_message_at=Greatest(
                    Coalesce(F("last_message_at"), Value(message.created_at)),
                    Value(message.created_at),
                ),
                updated_at=timezone.now(),
            )
        conversation.refresh_from_db(fields=["last_message_at", "updated_at"])

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} to conversation {conversation.id}"
        )
        return ServiceResult.success(message)
