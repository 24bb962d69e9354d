"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Listing, creation, details and read state
- MessageViewSet: Message history and posting (nested under conversation)

URL Structure:
    /api/conversations                      GET, POST
    /api/conversations/{id}/details         GET
    /api/conversations/{id}/read            POST
    /api/conversations/{id}/messages        GET, POST

Design Decisions:
    - All operations use the service layer for business logic
    - Permissions are enforced at both view and service level
    - Unknown conversation ids are 404, non-participants are 403
    - Clients poll; GET messages accepts ?after=<message id>
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import serializers, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.models import Conversation
from chat.pagination import ConversationCursorPagination, MessageCursorPagination
from chat.permissions import IsConversationParticipant
from chat.serializers import (
    ConversationCreateSerializer,
    ConversationDetailSerializer,
    ConversationListSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from chat.services import ConversationService, MessageService
from core.exceptions import NotFoundError


class ConversationLookupMixin:
    """Resolve the conversation named in the URL and check participation."""

    conversation_url_kwarg = "pk"

    def get_conversation(self) -> Conversation:
        conversation = Conversation.objects.filter(
            pk=self.kwargs[self.conversation_url_kwarg]
        ).first()
        if conversation is None:
            raise NotFoundError("Conversation not found", error_code="CONVERSATION_NOT_FOUND")
        self.check_object_permissions(self.request, conversation)
        return conversation


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        tags=["Chat - Conversations"],
    ),
    create=extend_schema(
        operation_id="create_conversation",
        summary="Create conversation",
        tags=["Chat - Conversations"],
        request=ConversationCreateSerializer,
        responses={
            201: ConversationDetailSerializer,
            200: OpenApiResponse(
                ConversationDetailSerializer,
                description="Existing direct conversation returned",
            ),
        },
    ),
    details=extend_schema(
        operation_id="get_conversation_details",
        summary="Get conversation details",
        tags=["Chat - Conversations"],
        responses={200: ConversationDetailSerializer},
    ),
    read=extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        tags=["Chat - Conversations"],
        request=None,
        responses={200: OpenApiTypes.OBJECT},
    ),
)
class ConversationViewSet(ConversationLookupMixin, viewsets.GenericViewSet):
    """
    ViewSet for conversation operations.

    list:
        Conversations the caller actively participates in, most recently
        updated first, with last message preview and unread count.

    create:
        Direct: returns the existing conversation (200) if the pair
        already has one, creates it otherwise (201).
        Group: always creates (201); name required.

    details:
        Conversation with active participants and their profiles.

    read:
        Stamp last_read_at and mark the caller's messages read.
    """

    permission_classes = [IsAuthenticated, IsConversationParticipant]
    pagination_class = ConversationCursorPagination

    def get_queryset(self):
        return ConversationService.list_conversations_for_user(self.request.user)

    def get_serializer_class(self):
        if self.action == "list":
            return ConversationListSerializer
        if self.action == "create":
            return ConversationCreateSerializer
        return ConversationDetailSerializer

    def list(self, request):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        serializer = ConversationListSerializer(page, many=True, context={"request": request})
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ConversationService.create_conversation(
            creator=request.user,
            is_group=data["is_group"],
            participant_ids=data["participant_ids"],
            name=data["name"],
            avatar_url=data["avatar_url"],
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        conversation, created = result.data
        conversation = ConversationService.get_conversation_details(conversation, request.user)
        return Response(
            ConversationDetailSerializer(conversation, context={"request": request}).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def details(self, request, pk=None):
        conversation = ConversationService.get_conversation_details(
            self.get_conversation(), request.user
        )
        return Response(
            ConversationDetailSerializer(conversation, context={"request": request}).data
        )

    def read(self, request, pk=None):
        result = ConversationService.mark_read(self.get_conversation(), request.user)
        return Response({"status": "read", "updated": result.data})


class AfterQuerySerializer(serializers.Serializer):
    after = serializers.IntegerField(required=False, min_value=1)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        tags=["Chat - Messages"],
        parameters=[
            OpenApiParameter(
                "after",
                int,
                description="Only return messages with an id greater than this",
            ),
        ],
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        tags=["Chat - Messages"],
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
    ),
)
class MessageViewSet(ConversationLookupMixin, viewsets.GenericViewSet):
    """
    ViewSet for message operations within a conversation.

    list:
        Messages oldest first, cursor paginated. Listing marks the
        caller's undelivered messages on the returned page as delivered.

    create:
        Send a message to the conversation.
    """

    permission_classes = [IsAuthenticated, IsConversationParticipant]
    pagination_class = MessageCursorPagination
    serializer_class = MessageSerializer
    conversation_url_kwarg = "conversation_pk"

    def list(self, request, conversation_pk=None):
        conversation = self.get_conversation()

        params = AfterQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        queryset = MessageService.list_messages(
            conversation,
            request.user,
            after=params.validated_data.get("after"),
        )
        page = self.paginate_queryset(queryset)
        MessageService.mark_delivered(conversation, request.user, [m.id for m in page])
        return self.get_paginated_response(MessageSerializer(page, many=True).data)

    def create(self, request, conversation_pk=None):
        conversation = self.get_conversation()

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.post_message(
            conversation,
            sender=request.user,
            content=data["content"],
            message_type=data["message_type"],
            file_url=data["file_url"],
            file_name=data["file_name"],
            file_size=data["file_size"],
            reply_to_id=data["reply_to"],
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)
