"""
Contact views.

URL Structure:
    /api/contacts                  GET, POST
    /api/contacts/{contact_id}     DELETE

contact_id is always the id of the added user, not of the Contact row.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from contacts.serializers import ContactCreateSerializer, ContactSerializer
from contacts.services import ContactService


class ContactListView(APIView):
    """
    GET: The caller's accepted contacts (plain list)
    POST: Add a contact, {"contact_id": <user id>}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List contacts",
        tags=["Contacts"],
        responses={200: ContactSerializer(many=True)},
    )
    def get(self, request):
        contacts = ContactService.list_contacts(request.user)
        return Response(ContactSerializer(contacts, many=True).data)

    @extend_schema(
        summary="Add contact",
        tags=["Contacts"],
        request=ContactCreateSerializer,
        responses={201: ContactSerializer},
    )
    def post(self, request):
        serializer = ContactCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ContactService.add_contact(
            request.user, serializer.validated_data["contact_id"]
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)
        return Response(ContactSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ContactDetailView(APIView):
    """DELETE: Remove a contact."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Remove contact", tags=["Contacts"], responses={204: None})
    def delete(self, request, contact_id):
        ContactService.remove_contact(request.user, contact_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
