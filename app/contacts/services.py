"""
Contact service layer.

Services:
    ContactService: List, add and remove entries in a user's contact list

Usage:
    from contacts.services import ContactService

    result = ContactService.add_contact(user, contact_id=other.id)
    if not result.success:
        return Response(result.to_response(), status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError

from contacts.models import Contact
from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User


class ContactService(BaseService):
    """
    Service for a user's contact list.

    Adding is unilateral and immediate; there is no request/approve step.

    Methods:
        list_contacts: Accepted contacts with profiles joined
        add_contact: Add another active user
        remove_contact: Delete an entry
    """

    @classmethod
    def list_contacts(cls, user: User) -> QuerySet[Contact]:
        """Accepted contacts of user, ordered by the contact's username."""
        return (
            Contact.objects.filter(user=user, status=Contact.Status.ACCEPTED)
            .select_related("contact__profile")
            .order_by("contact__profile__username", "id")
        )

    @classmethod
    def add_contact(cls, user: User, contact_id: int) -> ServiceResult[Contact]:
        """
        Add the user with id contact_id to user's contacts.

        Returns:
            ServiceResult with the new Contact

        Raises:
            NotFoundError: If no active user has contact_id

        Error codes:
            SELF_CONTACT: contact_id is the caller
            CONTACT_EXISTS: Already in the list
        """
        if contact_id == user.id:
            return ServiceResult.failure(
                "You cannot add yourself as a contact",
                error_code="SELF_CONTACT",
            )

        target = get_user_model().objects.filter(id=contact_id, is_active=True).first()
        if target is None:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")

        if Contact.objects.filter(user=user, contact=target).exists():
            return ServiceResult.failure(
                "Contact already exists",
                error_code="CONTACT_EXISTS",
            )

        try:
            with cls.atomic():
                contact = Contact.objects.create(
                    user=user,
                    contact=target,
                    status=Contact.Status.ACCEPTED,
                )
        except IntegrityError:
            return ServiceResult.failure(
                "Contact already exists",
                error_code="CONTACT_EXISTS",
            )

        cls.get_logger().info(f"User {user.id} added contact {target.id}")
        return ServiceResult.success(contact)

    @classmethod
    def remove_contact(cls, user: User, contact_id: int) -> None:
        """
        Remove the user with id contact_id from user's contacts.

        Raises:
            NotFoundError: If no such entry exists
        """
        deleted, _ = Contact.objects.filter(user=user, contact_id=contact_id).delete()
        if not deleted:
            raise NotFoundError("Contact not found", error_code="CONTACT_NOT_FOUND")
        cls.get_logger().info(f"User {user.id} removed contact {contact_id}")
