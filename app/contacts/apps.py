"""
Contacts application configuration.

This app provides the caller's address book: a directed edge from a user
to each user they have added.
"""

from django.apps import AppConfig


class ContactsConfig(AppConfig):
    """Configuration for the contacts application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "contacts"
    verbose_name = "Contacts"
