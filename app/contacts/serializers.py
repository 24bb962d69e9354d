"""
Serializers for contacts API.

- ContactSerializer: Contact entry with the contact's public profile
- ContactCreateSerializer: Add a contact by user id
"""

from rest_framework import serializers

from authentication.serializers import PublicProfileSerializer
from contacts.models import Contact


class ContactSerializer(serializers.ModelSerializer):
    """Contact entry; profile is the added user's public profile."""

    profile = PublicProfileSerializer(source="contact.profile", read_only=True)

    class Meta:
        model = Contact
        fields = [
            "id",
            "contact_id",
            "status",
            "profile",
            "created_at",
        ]
        read_only_fields = fields


class ContactCreateSerializer(serializers.Serializer):
    contact_id = serializers.IntegerField(min_value=1)
