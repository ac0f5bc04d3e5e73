"""Shared pytest fixtures."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.cache import caches

from apps.commissions.cache import InMemoryCommissionCache
from apps.commissions.resolver import CommissionResolver


@pytest.fixture(autouse=True)
def _clear_django_caches():
    for cache in caches.all():
        cache.clear()
    yield
    for cache in caches.all():
        cache.clear()


@pytest.fixture
def resolver():
    return CommissionResolver(cache=InMemoryCommissionCache(), ttl=300)


@pytest.fixture
def host(django_user_model):
    return django_user_model.objects.create_user(username="host", password="StrongPass123")


@pytest.fixture
def guest(django_user_model):
    return django_user_model.objects.create_user(username="guest", password="StrongPass123")


@pytest.fixture
def staff_user(django_user_model):
    return django_user_model.objects.create_user(
        username="staff",
        password="StrongPass123",
        is_staff=True,
    )


@pytest.fixture
def villa_type(db):
    from apps.properties.models import PropertyType

    return PropertyType.objects.create(name="Villa")


@pytest.fixture
def hotel_type(db):
    from apps.properties.models import PropertyType

    return PropertyType.objects.create(name="Hotel room", is_hotel_type=True)


@pytest.fixture
def villa(host, villa_type):
    from apps.properties.models import Property

    return Property.objects.create(
        owner=host,
        title="Villa Ifaty",
        property_type=villa_type,
        base_price=Decimal("100.00"),
        status=Property.Status.ACTIVE,
    )
