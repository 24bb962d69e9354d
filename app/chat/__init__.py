"""
Chat app for polling-based messaging.

This app handles:
- Conversations (direct and group), with direct pairs deduplicated
- Message sending and history (clients poll with ?after=<id>)
- Per-recipient delivery state and unread counts

Related apps:
    - authentication: User model for participants and senders
    - contacts: Contact list shown alongside conversations

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.create_conversation(
        creator=user,
        is_group=False,
        participant_ids=[other_user.id],
    )
    conversation, created = result.data

    MessageService.post_message(conversation, sender=user, content="Hello!")
"""
