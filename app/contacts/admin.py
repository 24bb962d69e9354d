"""Django admin configuration for contacts."""

from django.contrib import admin

from contacts.models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "contact", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["user__email", "contact__email", "contact__profile__username"]
    raw_id_fields = ["user", "contact"]
    readonly_fields = ["created_at", "updated_at"]
