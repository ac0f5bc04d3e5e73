"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import SNAPSHOT_FIELDS, Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "property",
        "guest",
        "status",
        "check_in",
        "check_out",
        "total_amount",
        "platform_amount",
        "created_at",
    )
    list_filter = ("status", "check_in", "check_out")
    search_fields = ("booking_code", "property__title", "guest__username")
    readonly_fields = ("booking_code", "created_at", "updated_at", *SNAPSHOT_FIELDS)
