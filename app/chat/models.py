"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) conversations between exactly two users
- Named group conversations

Models:
    Conversation: Container for messages between participants
    DirectConversationPair: Helper for enforcing uniqueness of direct conversations
    Participant: User participation in a conversation with read tracking
    Message: Individual message within a conversation
    MessageStatus: Per-recipient delivery state of a message

Design Decisions:
    - Direct conversations are deduplicated per user pair at the storage level
    - Leaving sets Participant.left_at; rejoining creates a new record
    - Messages are never pushed; clients poll, optionally with ?after=<id>
    - Replies may reference any message of the same conversation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: Plain text
    IMAGE: Image hosted at file_url, content is the caption
    FILE: File hosted at file_url, content is the caption
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"


class DeliveryStatus(models.TextChoices):
    """
    Delivery state of a message for one recipient.

    Ordered: SENT < DELIVERED < READ. Transitions only move forward.
    """

    SENT = "sent", "Sent"
    DELIVERED = "delivered", "Delivered"
    READ = "read", "Read"


class Conversation(BaseModel):
    """
    A conversation between two or more users.

    Direct conversations (is_group=False) have exactly two participants
    and are unique per user pair (enforced via DirectConversationPair).
    Group conversations (is_group=True) require a name.

    Fields:
        name: Display name (required for groups, usually empty for direct)
        is_group: Whether this is a group conversation
        avatar_url: Optional image for the conversation
        created_by: User who created the conversation
        last_message_at: Timestamp of most recent message

    Posting a message bumps updated_at, which drives list ordering.
    """

    name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Conversation name (required for groups)",
    )
    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group conversation",
    )
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="URL of the conversation's avatar image",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_conversations",
        help_text="User who created this conversation",
    )
    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-updated_at", "-id"]
        indexes = [
            models.Index(fields=["-updated_at", "-id"], name="chat_conv_recent_idx"),
        ]

    def __str__(self) -> str:
        if self.name:
            return f"{'Group' if self.is_group else 'Direct'}: {self.name}"
        return f"{'Group' if self.is_group else 'Direct'}({self.pk})"

    def get_active_participants(self):
        """Participants whose left_at is NULL."""
        return self.participants.filter(left_at__isnull=True)

    def get_active_participant_for_user(self, user: User) -> Participant | None:
        """Active participant record for user, or None."""
        return self.participants.filter(user=user, left_at__isnull=True).first()


class DirectConversationPair(models.Model):
    """
    Enforces uniqueness of direct conversations between two users.

    Stores the user pair in canonical order (lower user id first) so that
    whoever initiates, there is only one direct conversation per pair.

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One conversation per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    conversation = models.OneToOneField(
        Conversation,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct conversation this pair represents",
    )
    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this conversation pair",
    )
    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this conversation pair",
    )

    class Meta:
        db_table = "chat_direct_conversation_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_conversation_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the pair ordered (lower, higher)."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Participant(BaseModel):
    """
    Tracks user participation in conversations.

    Fields:
        conversation: Conversation this participation belongs to
        user: User participating in the conversation
        joined_at: When the user joined
        left_at: When the user left (NULL if still active)
        last_read_at: Last time user marked the conversation read

    Constraints:
        - UniqueConstraint(conversation, user) WHERE left_at IS NULL:
          Only one active participation per user per conversation
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Conversation this participation belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="conversation_participations",
        help_text="User participating in the conversation",
    )
    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user joined this conversation",
    )
    left_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When the user left (null if still active)",
    )
    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time user marked conversation as read",
    )

    class Meta:
        db_table = "chat_participant"
        ordering = ["joined_at", "id"]
        indexes = [
            models.Index(fields=["conversation", "left_at"], name="chat_part_conv_active_idx"),
            models.Index(fields=["user", "left_at"], name="chat_part_user_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                condition=Q(left_at__isnull=True),
                name="unique_active_participation",
            ),
        ]

    def __str__(self) -> str:
        state = "active" if self.is_active else "left"
        return f"Participant: {self.user_id} in {self.conversation_id} [{state}]"

    @property
    def is_active(self) -> bool:
        return self.left_at is None


class Message(BaseModel):
    """
    A message within a conversation.

    Fields:
        conversation: Conversation this message belongs to
        sender: User who sent the message
        message_type: text, image or file
        content: Message text (caption for image/file), never blank
        file_url / file_name / file_size: Attachment metadata (image/file)
        reply_to: Message being replied to, same conversation only

    created_at is assigned by the server; listing order is
    (created_at, id) ascending.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )
    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Type of message (text, image or file)",
    )
    content = models.TextField(
        help_text="Message text, or the caption of an attachment",
    )
    file_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="URL of the attached image or file",
    )
    file_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Original name of the attached file",
    )
    file_size = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Attachment size in bytes",
    )
    reply_to = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
        help_text="Message this one replies to",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a conversation (cursor pagination)
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_cursor_idx",
            ),
            models.Index(fields=["sender", "-created_at"], name="chat_msg_sender_idx"),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"User {self.sender_id}: {preview}"


class MessageStatus(BaseModel):
    """
    Delivery state of one message for one recipient.

    Created as SENT for every other active participant when the message
    is posted. Becomes DELIVERED when the recipient lists the
    conversation's messages, and READ when they mark it read.
    The sender never gets a row for their own message.
    """

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="statuses",
        help_text="Message this status refers to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="message_statuses",
        help_text="Recipient whose delivery state this is",
    )
    status = models.CharField(
        max_length=10,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.SENT,
        help_text="Delivery state (sent, delivered, read)",
    )

    class Meta:
        db_table = "chat_message_status"
        indexes = [
            models.Index(fields=["user", "status"], name="chat_msgstatus_user_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user"],
                name="unique_message_status_per_user",
            ),
        ]

    def __str__(self) -> str:
        return f"Message {self.message_id} -> {self.user_id}: {self.status}"
