"""
Permission classes for chat API.

- IsConversationParticipant: User is an active participant

Active participant = Participant row with left_at IS NULL. The services
repeat this check, so a view that forgets the permission still cannot
leak a conversation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from chat.models import Conversation, Message, Participant

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsConversationParticipant(permissions.BasePermission):
    """
    Allows access only to active participants of the conversation.

    Accepts a Conversation, or a Participant/Message belonging to one.
    """

    message = "You are not a participant in this conversation."

    def has_object_permission(
        self, request: Request, view: APIView, obj: Conversation | Participant | Message
    ) -> bool:
        if not request.user.is_authenticated:
            return False

        if isinstance(obj, (Participant, Message)):
            conversation_id = obj.conversation_id
        else:
            conversation_id = obj.pk

        return Participant.objects.filter(
            conversation_id=conversation_id,
            user=request.user,
            left_at__isnull=True,
        ).exists()
