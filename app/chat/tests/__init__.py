"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Participant, Message model tests
- test_services.py: ConversationService and MessageService tests
- test_views.py: REST API endpoint tests
- test_permissions.py: IsConversationParticipant tests
- test_serializers.py: Response shapes and request validation

Usage:
    pytest app/chat/tests/
"""
