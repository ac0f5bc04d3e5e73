"""URL routing for promotions."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PromotionViewSet

router = SimpleRouter()
router.register(r"", PromotionViewSet, basename="promotion")

urlpatterns = [
    path("", include(router.urls)),
]
