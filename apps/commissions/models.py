"""Commission configuration models for Hosteud.

Rates are stored as fractions (``0.0500`` is five percent) and fixed
amounts in EUR. A ``Commission`` overrides the global ``CommissionSettings``
for one property type.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

RATE_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))]
FIXED_VALIDATORS = [MinValueValidator(Decimal("0.00"))]


class CommissionRatesBase(models.Model):
    """The four values every commission source provides."""

    host_commission_rate = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        default=Decimal("0"),
        validators=RATE_VALIDATORS,
        help_text=_("Share of the stay deducted from the host payout (0.05 = 5%)."),
    )
    host_commission_fixed = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=FIXED_VALIDATORS,
    )
    client_commission_rate = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        default=Decimal("0"),
        validators=RATE_VALIDATORS,
        help_text=_("Share of the stay added to the guest total (0.05 = 5%)."),
    )
    client_commission_fixed = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=FIXED_VALIDATORS,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Commission(CommissionRatesBase):
    """Per property type commission override."""

    title = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    property_type = models.OneToOneField(
        "properties.PropertyType",
        on_delete=models.CASCADE,
        related_name="commission",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="commissions_created",
    )

    class Meta:
        verbose_name = _("Commission")
        verbose_name_plural = _("Commissions")
        ordering = ["property_type__name"]
        indexes = [
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.property_type_id})"


class CommissionSettings(CommissionRatesBase):
    """Global fallback rates. The most recent active row is the one in force."""

    class Meta:
        verbose_name = _("Commission settings")
        verbose_name_plural = _("Commission settings")
        ordering = ["-created_at", "-id"]
        get_latest_by = ["created_at", "id"]

    def __str__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"Commission settings #{self.pk} ({state})"
