"""
Factory Boy factories for contact models.

Usage:
    from contacts.tests.factories import ContactFactory

    ContactFactory(user=alice, contact=bob)
"""

import factory

from authentication.tests.factories import UserFactory
from contacts.models import Contact


class ContactFactory(factory.django.DjangoModelFactory):
    """Accepted contact edge between two fresh users by default."""

    class Meta:
        model = Contact

    user = factory.SubFactory(UserFactory)
    contact = factory.SubFactory(UserFactory)
    status = Contact.Status.ACCEPTED
