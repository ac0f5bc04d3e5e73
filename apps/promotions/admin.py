"""Admin registrations for promotions."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Promotion


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = (
        "property",
        "discount_percentage",
        "start_date",
        "end_date",
        "is_active",
        "replaced_by",
        "created_at",
    )
    list_filter = ("is_active",)
    search_fields = ("property__title",)
    date_hierarchy = "start_date"
    # changes must go through the conflict manager
    readonly_fields = (
        "property",
        "discount_percentage",
        "start_date",
        "end_date",
        "created_by",
        "replaced_by",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):  # type: ignore
        return False
