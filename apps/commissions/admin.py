"""Admin registrations for commission configuration.

Saves go through the configuration store so the resolver cache is
invalidated the same way as for API changes.
"""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from . import services
from .models import Commission, CommissionSettings

RATE_FIELDS = (
    "host_commission_rate",
    "host_commission_fixed",
    "client_commission_rate",
    "client_commission_fixed",
)


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ("title", "property_type", *RATE_FIELDS, "is_active", "updated_at")
    list_filter = ("is_active", "property_type")
    search_fields = ("title", "property_type__name")
    readonly_fields = ("created_by", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):  # type: ignore
        values = {name: form.cleaned_data[name] for name in ("title", "description", "is_active", *RATE_FIELDS)}
        if change:
            services.update_commission(
                obj.pk,
                actor=request.user,
                property_type_id=obj.property_type_id,
                **values,
            )
        else:
            created = services.create_commission(obj.property_type_id, created_by=request.user, **values)
            obj.pk = created.pk

    def delete_model(self, request, obj):  # type: ignore
        services.delete_commission(obj.pk, actor=request.user)

    def delete_queryset(self, request, queryset):  # type: ignore
        for obj in queryset:
            services.delete_commission(obj.pk, actor=request.user)


@admin.register(CommissionSettings)
class CommissionSettingsAdmin(admin.ModelAdmin):
    list_display = ("id", *RATE_FIELDS, "is_active", "created_at")
    list_filter = ("is_active",)
    readonly_fields = ("created_at", "updated_at")

    def save_model(self, request, obj, form, change):  # type: ignore
        values = {name: form.cleaned_data[name] for name in ("is_active", *RATE_FIELDS)}
        if change:
            services.update_commission_settings(obj.pk, actor=request.user, **values)
        else:
            created = services.create_commission_settings(actor=request.user, **values)
            obj.pk = created.pk

    def delete_model(self, request, obj):  # type: ignore
        services.delete_commission_settings(obj.pk, actor=request.user)

    def delete_queryset(self, request, queryset):  # type: ignore
        for obj in queryset:
            services.delete_commission_settings(obj.pk, actor=request.user)
