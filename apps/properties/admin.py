"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Property, PropertyExtra, PropertyType, SpecialPrice


@admin.register(PropertyType)
class PropertyTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "is_hotel_type")
    list_filter = ("is_hotel_type",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


class PropertyExtraInline(admin.TabularInline):
    model = PropertyExtra
    extra = 0
    fields = ("name", "price_eur", "pricing_type", "is_active")


class SpecialPriceInline(admin.TabularInline):
    model = SpecialPrice
    extra = 0
    fields = ("price_eur", "weekdays", "start_date", "end_date", "activate")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "property_type",
        "status",
        "base_price",
        "max_guests",
        "owner",
        "created_at",
    )
    list_filter = ("status", "property_type")
    search_fields = ("title", "slug", "owner__username", "owner__email")
    readonly_fields = ("slug", "published_at", "created_at", "updated_at")
    inlines = [PropertyExtraInline, SpecialPriceInline]
