"""Admin configuration for venues."""
from django.contrib import admin

from venues.models import Venue


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "city", "is_active", "created_at")
    list_filter = ("is_active", "city")
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
