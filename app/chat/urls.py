"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations                      GET, POST
        /conversations/{id}/details         GET
        /conversations/{id}/read            POST

    Messages:
        /conversations/{id}/messages        GET, POST

All URLs are prefixed with /api/ in the main URL configuration.
"""

from django.urls import path

from chat.views import ConversationViewSet, MessageViewSet

app_name = "chat"

urlpatterns = [
    path(
        "conversations",
        ConversationViewSet.as_view({"get": "list", "post": "create"}),
        name="conversation-list",
    ),
    path(
        "conversations/<int:pk>/details",
        ConversationViewSet.as_view({"get": "details"}),
        name="conversation-details",
    ),
    path(
        "conversations/<int:pk>/read",
        ConversationViewSet.as_view({"post": "read"}),
        name="conversation-read",
    ),
    path(
        "conversations/<int:conversation_pk>/messages",
        MessageViewSet.as_view({"get": "list", "post": "create"}),
        name="conversation-message-list",
    ),
]
