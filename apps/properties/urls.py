"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PropertyExtraViewSet, PropertyTypeViewSet, PropertyViewSet, SpecialPriceViewSet

router = SimpleRouter()
router.register(r"types", PropertyTypeViewSet, basename="property-type")
router.register(r"", PropertyViewSet, basename="property")

special_price_list = SpecialPriceViewSet.as_view({"get": "list", "post": "create"})
special_price_detail = SpecialPriceViewSet.as_view(
    {"patch": "partial_update", "put": "update", "delete": "destroy", "get": "retrieve"}
)

extra_list = PropertyExtraViewSet.as_view({"get": "list", "post": "create"})
extra_detail = PropertyExtraViewSet.as_view(
    {"patch": "partial_update", "put": "update", "delete": "destroy", "get": "retrieve"}
)

urlpatterns = [
    # Weekday special prices
    path(
        "<int:property_id>/special-prices/",
        special_price_list,
        name="property-special-price-list",
    ),
    path(
        "<int:property_id>/special-prices/<int:pk>/",
        special_price_detail,
        name="property-special-price-detail",
    ),
    # Extras catalog
    path(
        "<int:property_id>/extras/",
        extra_list,
        name="property-extra-list",
    ),
    path(
        "<int:property_id>/extras/<int:pk>/",
        extra_detail,
        name="property-extra-detail",
    ),
    path("", include(router.urls)),
]
