"""
Contact models.

Models:
    Contact: Directed edge "user has added contact"

Adding is unilateral: the edge is stored as ACCEPTED straight away and
the other user is not asked. PENDING rows can exist from imported data
but are hidden from listings.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel


class Contact(BaseModel):
    """
    One entry in a user's contact list.

    Fields:
        user: Owner of the contact list
        contact: The user who was added
        status: pending or accepted

    Constraints:
        - UniqueConstraint(user, contact): No duplicate entries
        - CheckConstraint(user != contact): No self-contacts
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="contacts",
        help_text="Owner of this contact list entry",
    )
    contact = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="contact_of",
        help_text="User that was added as a contact",
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACCEPTED,
        help_text="Whether this contact is pending or accepted",
    )

    class Meta:
        db_table = "contacts_contact"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "contact"],
                name="unique_contact_edge",
            ),
            models.CheckConstraint(
                condition=~Q(user=F("contact")),
                name="contact_not_self",
            ),
        ]

    def __str__(self) -> str:
        return f"Contact: {self.user_id} -> {self.contact_id} [{self.status}]"
