"""
URL configuration for contacts API.

Mounted at /api/ in config/urls.py:
    contacts                  - GET: list, POST: add
    contacts/<contact_id>     - DELETE: remove
"""

from django.urls import path

from contacts.views import ContactDetailView, ContactListView

app_name = "contacts"

urlpatterns = [
    path("contacts", ContactListView.as_view(), name="contact-list"),
    path("contacts/<int:contact_id>", ContactDetailView.as_view(), name="contact-detail"),
]
