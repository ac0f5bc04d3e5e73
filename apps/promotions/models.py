"""Promotion models for Hosteud."""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateWindow


class PromotionQuerySet(models.QuerySet):
    def active(self):  # type: ignore
        return self.filter(is_active=True)

    def overlapping(self, start_date, end_date):  # type: ignore
        """Closed-interval overlap with [start_date, end_date]."""
        return self.filter(start_date__lte=end_date, end_date__gte=start_date)


class Promotion(models.Model):
    """Percentage discount off the base price over an inclusive date range.

    Deactivated rows are kept for audit; ``replaced_by`` points at the
    promotion whose confirmation switched this one off.
    """

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="promotions",
    )
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="promotions_created",
    )
    replaced_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replaced_promotions",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PromotionQuerySet.as_manager()

    class Meta:
        verbose_name = _("Promotion")
        verbose_name_plural = _("Promotions")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="promotion_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "is_active", "start_date", "end_date"]),
        ]

    def __str__(self) -> str:
        return f"-{self.discount_percentage}% on {self.property_id} [{self.start_date}, {self.end_date}]"

    @builtins.property
    def window(self) -> DateWindow:
        return DateWindow(self.start_date, self.end_date)
