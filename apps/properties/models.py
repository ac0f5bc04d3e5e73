"""Property domain models for Hosteud.

Contains the listing side of the marketplace as far as pricing needs it:
property types (the commission join key), the property itself with its
base nightly price, the extras catalog and weekday special prices.
"""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateWindow


class PropertyType(models.Model):
    """Catalog of rental types (apartment, villa, hotel room...)."""

    slug = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_hotel_type = models.BooleanField(
        default=False,
        help_text=_("Hotel-like types list rooms instead of whole properties."),
    )

    class Meta:
        verbose_name = _("Property type")
        verbose_name_plural = _("Property types")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            self.slug = slugify(self.name)[:50]
        super().save(*args, **kwargs)


class Property(models.Model):
    """A listing offered for nightly rental (the priced product)."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        PENDING = "pending", _("Awaiting validation")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    property_type = models.ForeignKey(
        PropertyType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Nightly price in EUR."),
    )
    price_mga = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Nightly price in Malagasy ariary, informational."),
    )
    currency = models.CharField(max_length=3, default="EUR")
    max_guests = models.PositiveSmallIntegerField(default=2)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["owner", "status"]),
        ]

    def __str__(self) -> str:
        return self.title

    def activate(self) -> None:
        if self.status != self.Status.ACTIVE:
            self.status = self.Status.ACTIVE
            self.published_at = timezone.now()
            self.save(update_fields=["status", "published_at"])

    def deactivate(self) -> None:
        if self.status == self.Status.ACTIVE:
            self.status = self.Status.INACTIVE
            self.save(update_fields=["status"])

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.title)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class PropertyExtra(models.Model):
    """Optional paid extra a guest can add to a stay (breakfast, transfer...)."""

    class PricingType(models.TextChoices):
        PER_BOOKING = "per_booking", _("Per booking")
        PER_DAY = "per_day", _("Per night")
        PER_PERSON = "per_person", _("Per guest")
        PER_DAY_PERSON = "per_day_person", _("Per guest and night")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="extras",
    )
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    price_eur = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    price_mga = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    pricing_type = models.CharField(
        max_length=20,
        choices=PricingType.choices,
        default=PricingType.PER_BOOKING,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Extra")
        verbose_name_plural = _("Extras")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.property_id})"


class SpecialPrice(models.Model):
    """Fixed nightly price on given weekdays, optionally limited to a date window."""

    class Weekday(models.IntegerChoices):
        MONDAY = 0, _("Monday")
        TUESDAY = 1, _("Tuesday")
        WEDNESDAY = 2, _("Wednesday")
        THURSDAY = 3, _("Thursday")
        FRIDAY = 4, _("Friday")
        SATURDAY = 5, _("Saturday")
        SUNDAY = 6, _("Sunday")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="special_prices",
    )
    price_eur = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    price_mga = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    weekdays = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Weekdays the price applies to (0=Mon ... 6=Sun)."),
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    activate = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Special price")
        verbose_name_plural = _("Special prices")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(start_date__isnull=True)
                    | models.Q(end_date__isnull=True)
                    | models.Q(end_date__gte=models.F("start_date"))
                ),
                name="special_price_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "activate"]),
        ]

    def __str__(self) -> str:
        return f"{self.property_id}: {self.price_eur} EUR on {self.weekdays}"

    @builtins.property
    def window(self) -> DateWindow:
        return DateWindow(self.start_date, self.end_date)

