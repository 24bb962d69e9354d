"""
Serializers for chat API.

Serializer Hierarchy:
    ConversationListSerializer: List view with last message and unread count
    ConversationDetailSerializer: Details with active participants
    ConversationCreateSerializer: Direct/group conversation creation

    ParticipantSerializer: Participant with public profile

    MessageSerializer: Message with sender profile
    MessagePreviewSerializer: Minimal message for list preview
    MessageCreateSerializer: Send new message

Read and write serializers are separate. Fields derived for the caller
(display_name) need the request in the serializer context.
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import PublicProfileSerializer
from chat.models import Conversation, Message, MessageType, Participant
from chat.services import ConversationService


# =============================================================================
# Message Serializers
# =============================================================================


class MessagePreviewSerializer(serializers.ModelSerializer):
    """
    Minimal message serializer for conversation list preview.

    Used to show the last message in conversation lists.
    """

    sender_name = serializers.SerializerMethodField(
        help_text="Display name of the message sender"
    )

    class Meta:
        model = Message
        fields = [
            "id",
            "sender_id",
            "sender_name",
            "content",
            "message_type",
            "created_at",
        ]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str:
        return obj.sender.display_name


class MessageSerializer(serializers.ModelSerializer):
    """Full message serializer, sender resolved to their public profile."""

    sender = PublicProfileSerializer(source="sender.profile", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender_id",
            "sender",
            "message_type",
            "content",
            "file_url",
            "file_name",
            "file_size",
            "reply_to_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending messages.

    Supports:
    - Text messages
    - Image/file messages (file_url required, content is the caption)
    - Replies (reply_to is a message id in the same conversation)
    """

    content = serializers.CharField(
        max_length=10000,
        help_text="Message content (max 10,000 characters)",
    )
    message_type = serializers.ChoiceField(
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="text, image or file",
    )
    file_url = serializers.URLField(
        max_length=500,
        required=False,
        allow_blank=True,
        default="",
    )
    file_name = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        default="",
    )
    file_size = serializers.IntegerField(
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
    )
    reply_to = serializers.IntegerField(
        required=False,
        allow_null=True,
        default=None,
        help_text="ID of the message being replied to (optional)",
    )

    def validate(self, attrs):
        if attrs["message_type"] != MessageType.TEXT and not attrs.get("file_url"):
            raise serializers.ValidationError(
                {"file_url": [f"Required for {attrs['message_type']} messages."]}
            )
        return attrs


# =============================================================================
# Participant Serializers
# =============================================================================


class ParticipantSerializer(serializers.ModelSerializer):
    """Active participant with public profile."""

    profile = PublicProfileSerializer(source="user.profile", read_only=True)

    class Meta:
        model = Participant
        fields = [
            "user_id",
            "profile",
            "joined_at",
            "last_read_at",
        ]
        read_only_fields = fields


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationDetailSerializer(serializers.ModelSerializer):
    """
    Conversation with its active participants.

    Expects .active_participants to be prefetched
    (see chat.services.active_participants_prefetch).
    """

    display_name = serializers.SerializerMethodField(
        help_text="Name if set, otherwise derived from the other participants"
    )
    participants = ParticipantSerializer(
        source="active_participants", many=True, read_only=True
    )

    class Meta:
        model = Conversation
        fields = [
            "id",
            "name",
            "display_name",
            "is_group",
            "avatar_url",
            "created_by_id",
            "participants",
            "last_message_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_display_name(self, obj: Conversation) -> str:
        return ConversationService.display_name(obj, self.context["request"].user)


class ConversationListSerializer(ConversationDetailSerializer):
    """
    Serializer for conversation list view.

    Adds the annotations made by
    ConversationService.list_conversations_for_user:
    - last_message: Preview of the most recent message
    - unread_count: Messages not yet read by the caller
    """

    last_message = serializers.SerializerMethodField(
        help_text="Most recent message preview"
    )
    unread_count = serializers.IntegerField(read_only=True, default=0)

    class Meta(ConversationDetailSerializer.Meta):
        fields = ConversationDetailSerializer.Meta.fields + [
            "last_message",
            "unread_count",
        ]
        read_only_fields = fields

    def get_last_message(self, obj: Conversation) -> dict | None:
        latest = getattr(obj, "latest_messages", None)
        if not latest:
            return None
        return MessagePreviewSerializer(latest[0]).data


class ConversationCreateSerializer(serializers.Serializer):
    """
    Serializer for creating conversations.

    For direct conversations:
        - participant_ids holds exactly one other user
        - name is ignored

    For group conversations:
        - name is required
        - participant_ids holds at least one other user
    """

    is_group = serializers.BooleanField(default=False)
    name = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        default="",
    )
    avatar_url = serializers.URLField(
        max_length=500,
        required=False,
        allow_blank=True,
        default="",
    )
    participant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
        help_text="User IDs to include (the creator is added automatically)",
    )

    def validate(self, attrs):
        if attrs["is_group"] and not attrs["name"].strip():
            raise serializers.ValidationError(
                {"name": ["This field is required for group conversations."]}
            )
        return attrs
