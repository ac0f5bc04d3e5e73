"""Booking models for Hosteud."""

from __future__ import annotations

import builtins
import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.exceptions import ValidationError

SNAPSHOT_FIELDS = (
    "subtotal",
    "extras_total",
    "client_commission",
    "host_commission",
    "platform_amount",
    "host_amount",
    "total_amount",
    "number_of_nights",
    "base_price_per_night",
    "total_savings",
    "pricing_breakdown",
)


def _money_field(help_text: str = "") -> models.DecimalField:
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=help_text,
    )


class Booking(models.Model):
    """A guest's stay at a property, with the price frozen at confirmation."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)

    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    currency = models.CharField(max_length=3, default="EUR")

    # pricing snapshot, written once at confirmation
    subtotal = _money_field(_("Sum of the nightly prices."))
    extras_total = _money_field()
    client_commission = _money_field(_("Platform fee added to what the guest pays."))
    host_commission = _money_field(_("Platform fee deducted from the host payout."))
    platform_amount = _money_field()
    host_amount = _money_field()
    total_amount = _money_field(_("Amount paid by the guest."))
    number_of_nights = models.PositiveSmallIntegerField(default=0)
    base_price_per_night = _money_field(_("Average nightly price of the stay."))
    total_savings = _money_field()
    pricing_breakdown = models.JSONField(default=dict, blank=True)

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.property_id}"

    @classmethod
    def from_db(cls, db, field_names, values):  # type: ignore
        instance = super().from_db(db, field_names, values)
        instance._remember_snapshot()
        return instance

    def _remember_snapshot(self) -> None:
        self._stored_snapshot = {
            name: getattr(self, name)
            for name in SNAPSHOT_FIELDS
            if name in self.__dict__
        }

    def changed_snapshot_fields(self) -> list:
        stored = getattr(self, "_stored_snapshot", None)
        if not stored:
            return []
        return [name for name, value in stored.items() if getattr(self, name) != value]

    def apply_price(self, result) -> None:
        """Copy a ``BookingPriceResult`` onto a booking that is not saved yet."""
        if not self._state.adding:
            raise ValidationError(
                "The price of a stored booking cannot be recalculated",
                booking=self.pk,
            )
        summary = result.summary
        self.subtotal = summary.subtotal
        self.extras_total = summary.extras_total
        self.client_commission = summary.client_commission
        self.host_commission = summary.host_commission
        self.platform_amount = summary.platform_amount
        self.host_amount = summary.host_amount
        self.total_amount = summary.total_amount
        self.number_of_nights = summary.number_of_nights
        self.base_price_per_night = summary.average_nightly_price
        self.total_savings = summary.total_savings
        self.currency = result.currency
        self.pricing_breakdown = result.to_dict()

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            changed = self.changed_snapshot_fields()
            if changed:
                raise ValidationError(
                    "The pricing snapshot of a booking cannot be changed",
                    booking=self.pk,
                    fields=changed,
                )
        elif not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)
        self._remember_snapshot()

    @staticmethod
    def generate_booking_code() -> str:
        return secrets.token_hex(4).upper()

    @builtins.property
    def is_cancellable(self) -> bool:
        return self.status in self.BLOCKING_STATUSES

    def mark_cancelled(self, reason: str = "") -> None:
        self.status = self.Status.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])
