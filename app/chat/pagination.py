"""
Pagination classes for chat API.

- MessageCursorPagination: For message lists (oldest first)
- ConversationCursorPagination: For conversation lists (most recently updated first)

Cursors stay stable while new messages are inserted, which is what
polling clients need.
"""

from rest_framework.pagination import CursorPagination


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message lists.

    Orders messages oldest-first for natural reading flow.
    Uses (created_at, id) for a stable cursor position.

    Default: 50 messages per page
    Maximum: 100 messages per page
    """

    page_size = 50
    max_page_size = 100
    page_size_query_param = "page_size"
    ordering = ("created_at", "id")
    cursor_query_param = "cursor"


class ConversationCursorPagination(CursorPagination):
    """
    Cursor pagination for conversation lists.

    Posting a message bumps Conversation.updated_at, so active
    conversations float to the first page.

    Default: 20 conversations per page
    Maximum: 50 conversations per page
    """

    page_size = 20
    max_page_size = 50
    page_size_query_param = "page_size"
    ordering = ("-updated_at", "-id")
    cursor_query_param = "cursor"
