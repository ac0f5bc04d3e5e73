"""Commission configuration store.

CRUD over per-type ``Commission`` rows and the global ``CommissionSettings``
rows. There is at most one ``Commission`` per property type. Every mutation
drops the affected resolver cache entries right away and once more after
the transaction commits, so a request that read the old row in between
cannot leave stale rates behind.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from django.db import IntegrityError  # type: ignore

from apps.properties.models import PropertyType
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError

from .events import CommissionConfigurationChanged
from .models import Commission, CommissionSettings
from .resolver import CommissionResolver, get_commission_resolver

logger = logging.getLogger(__name__)

RATE_FIELDS = ("host_commission_rate", "client_commission_rate")
FIXED_FIELDS = ("host_commission_fixed", "client_commission_fixed")
COMMISSION_FIELDS = ("title", "description", "is_active", *RATE_FIELDS, *FIXED_FIELDS)
SETTINGS_FIELDS = ("is_active", *RATE_FIELDS, *FIXED_FIELDS)


def _validate_values(values: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = dict(values)
    for name in RATE_FIELDS + FIXED_FIELDS:
        if name not in cleaned:
            continue
        try:
            value = Decimal(str(cleaned[name]))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(f"{name} must be a number", field=name) from e
        if name in RATE_FIELDS and not Decimal("0") <= value <= Decimal("1"):
            raise ValidationError(f"{name} must be between 0 and 1", field=name)
        if name in FIXED_FIELDS and value < 0:
            raise ValidationError(f"{name} must not be negative", field=name)
        cleaned[name] = value
    if "title" in cleaned and not str(cleaned["title"]).strip():
        raise ValidationError("title must not be empty", field="title")
    return cleaned


def _get_property_type(type_id: Any) -> PropertyType:
    try:
        return PropertyType.objects.get(pk=type_id)
    except (PropertyType.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Property type {type_id} not found", property_type=type_id) from e


def _ensure_type_is_free(type_id: Any, exclude_id: Any = None) -> None:
    taken = Commission.objects.filter(property_type_id=type_id)
    if exclude_id is not None:
        taken = taken.exclude(pk=exclude_id)
    if taken.exists():
        raise ConflictError(
            f"Property type {type_id} already has a commission",
            property_type=type_id,
        )


def _invalidate_types(
    uow: DjangoUnitOfWork,
    resolver: CommissionResolver,
    type_ids: Iterable[Any],
    action: str,
    actor: Any = None,
) -> None:
    type_ids = tuple(dict.fromkeys(type_ids))

    def invalidate():
        for type_id in type_ids:
            resolver.invalidate_type(type_id)

    invalidate()
    uow.on_commit(invalidate)
    uow.add_event(CommissionConfigurationChanged(
        action=action,
        property_type_ids=type_ids,
        actor_id=getattr(actor, "pk", None),
    ))


def _invalidate_everything(
    uow: DjangoUnitOfWork,
    resolver: CommissionResolver,
    action: str,
    actor: Any = None,
) -> None:
    # types without an override resolve through the global row, so every
    # cached type entry may hold the old global values
    resolver.invalidate_all()
    uow.on_commit(resolver.invalidate_all)
    uow.add_event(CommissionConfigurationChanged(
        action=action,
        affects_global=True,
        actor_id=getattr(actor, "pk", None),
    ))


# ===== Per-type commissions =====

def get_all_commissions():
    return Commission.objects.select_related("property_type", "created_by").all()


def get_commission_by_id(commission_id: Any) -> Commission:
    try:
        return Commission.objects.select_related("property_type").get(pk=commission_id)
    except (Commission.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Commission {commission_id} not found", commission=commission_id) from e


def get_commission_by_type(type_id: Any) -> Optional[Commission]:
    return Commission.objects.select_related("property_type").filter(property_type_id=type_id).first()


def get_types_without_commission():
    """Property types that fall back to the global settings (configuration gaps)."""
    return PropertyType.objects.filter(commission__isnull=True).order_by("name")


def create_commission(
    property_type_id: Any,
    *,
    created_by: Any = None,
    resolver: Optional[CommissionResolver] = None,
    **values: Any,
) -> Commission:
    resolver = resolver or get_commission_resolver()
    values = _validate_values({k: v for k, v in values.items() if k in COMMISSION_FIELDS})
    if "title" not in values:
        raise ValidationError("title is required", field="title")

    property_type = _get_property_type(property_type_id)
    _ensure_type_is_free(property_type.pk)

    try:
        with DjangoUnitOfWork() as uow:
            commission = Commission.objects.create(
                property_type=property_type,
                created_by=created_by,
                **values,
            )
            _invalidate_types(uow, resolver, [property_type.pk], "created", created_by)
    except IntegrityError as e:
        raise ConflictError(
            f"Property type {property_type.pk} already has a commission",
            property_type=property_type.pk,
        ) from e

    logger.info(f"Commission {commission.pk} created for property type {property_type.pk}")
    return commission


def update_commission(
    commission_id: Any,
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
    **changes: Any,
) -> Commission:
    """
    Update a commission; changing ``property_type_id`` moves the override
    to another type and invalidates both types.
    """
    resolver = resolver or get_commission_resolver()
    commission = get_commission_by_id(commission_id)
    new_type_id = changes.pop("property_type_id", None)
    values = _validate_values({k: v for k, v in changes.items() if k in COMMISSION_FIELDS})

    touched = [commission.property_type_id]
    if new_type_id is not None and new_type_id != commission.property_type_id:
        new_type = _get_property_type(new_type_id)
        _ensure_type_is_free(new_type.pk, exclude_id=commission.pk)
        commission.property_type = new_type
        touched.append(new_type.pk)

    for name, value in values.items():
        setattr(commission, name, value)

    try:
        with DjangoUnitOfWork() as uow:
            commission.save()
            _invalidate_types(uow, resolver, touched, "updated", actor)
    except IntegrityError as e:
        raise ConflictError(
            f"Property type {commission.property_type_id} already has a commission",
            property_type=commission.property_type_id,
        ) from e

    logger.info(f"Commission {commission.pk} updated (types {touched})")
    return commission


def delete_commission(
    commission_id: Any,
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
) -> None:
    resolver = resolver or get_commission_resolver()
    commission = get_commission_by_id(commission_id)
    type_id = commission.property_type_id

    with DjangoUnitOfWork() as uow:
        commission.delete()
        _invalidate_types(uow, resolver, [type_id], "deleted", actor)

    logger.info(f"Commission {commission_id} deleted (type {type_id})")


def toggle_commission_active(
    commission_id: Any,
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
) -> Commission:
    resolver = resolver or get_commission_resolver()
    commission = get_commission_by_id(commission_id)
    commission.is_active = not commission.is_active

    with DjangoUnitOfWork() as uow:
        commission.save(update_fields=["is_active", "updated_at"])
        _invalidate_types(uow, resolver, [commission.property_type_id], "toggled", actor)

    logger.info(
        f"Commission {commission.pk} {'activated' if commission.is_active else 'deactivated'}"
    )
    return commission


# ===== Global settings =====

def get_all_commission_settings():
    return CommissionSettings.objects.all()


def get_commission_settings_by_id(settings_id: Any) -> CommissionSettings:
    try:
        return CommissionSettings.objects.get(pk=settings_id)
    except (CommissionSettings.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(
            f"Commission settings {settings_id} not found",
            commission_settings=settings_id,
        ) from e


def get_active_commission_settings() -> Optional[CommissionSettings]:
    return CommissionSettings.objects.filter(is_active=True).order_by("-created_at", "-id").first()


def create_commission_settings(
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
    **values: Any,
) -> CommissionSettings:
    resolver = resolver or get_commission_resolver()
    values = _validate_values({k: v for k, v in values.items() if k in SETTINGS_FIELDS})

    with DjangoUnitOfWork() as uow:
        row = CommissionSettings.objects.create(**values)
        _invalidate_everything(uow, resolver, "settings_created", actor)

    logger.info(f"Commission settings {row.pk} created")
    return row


def update_commission_settings(
    settings_id: Any,
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
    **changes: Any,
) -> CommissionSettings:
    resolver = resolver or get_commission_resolver()
    row = get_commission_settings_by_id(settings_id)
    values = _validate_values({k: v for k, v in changes.items() if k in SETTINGS_FIELDS})
    for name, value in values.items():
        setattr(row, name, value)

    with DjangoUnitOfWork() as uow:
        row.save()
        _invalidate_everything(uow, resolver, "settings_updated", actor)

    logger.info(f"Commission settings {row.pk} updated")
    return row


def delete_commission_settings(
    settings_id: Any,
    *,
    actor: Any = None,
    resolver: Optional[CommissionResolver] = None,
) -> None:
    resolver = resolver or get_commission_resolver()
    row = get_commission_settings_by_id(settings_id)

    with DjangoUnitOfWork() as uow:
        row.delete()
        _invalidate_everything(uow, resolver, "settings_deleted", actor)

    logger.info(f"Commission settings {settings_id} deleted")
