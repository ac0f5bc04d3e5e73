"""URL routing for commission configuration."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import CommissionSettingsViewSet, CommissionViewSet

router = SimpleRouter()
router.register(r"settings", CommissionSettingsViewSet, basename="commission-settings")
router.register(r"", CommissionViewSet, basename="commission")

urlpatterns = [
    path("", include(router.urls)),
]
