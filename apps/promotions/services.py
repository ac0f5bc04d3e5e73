"""Promotion conflict manager.

At most one active promotion may cover a given night of a property. This
is enforced here rather than by a database constraint because replaced
promotions are kept (inactive) for audit.

Creating a promotion is two-phase: ``propose_promotion`` writes nothing
when active promotions overlap and hands them back to the caller, then
``confirm_overlap`` replaces them and creates the new one in a single
transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.commissions.models import Commission
from apps.commissions.resolver import CommissionRates
from apps.properties.models import Property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError
from shared.infrastructure.locking import lock_queryset_if_possible

from .domain import PromotionCancelled, PromotionProposal, PromotionTerms, ProposalState
from .models import Promotion

logger = logging.getLogger(__name__)


@dataclass
class ProposalOutcome:
    """Result of ``propose_promotion``: a created promotion or a conflict"""
    proposal: PromotionProposal
    promotion: Optional[Promotion] = None
    overlapping: List[Promotion] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.proposal.state == ProposalState.CONFIRMED

    @property
    def conflict(self) -> bool:
        return self.proposal.state == ProposalState.CONFLICT_PRESENTED


def _get_property(property_id: Any) -> Property:
    try:
        return Property.objects.select_related("property_type").get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Property {property_id} not found", property=property_id) from e


def get_promotion(promotion_id: Any) -> Promotion:
    try:
        return Promotion.objects.select_related("property").get(pk=promotion_id)
    except (Promotion.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Promotion {promotion_id} not found", promotion=promotion_id) from e


def find_overlapping_promotions(
    property_id: Any,
    start_date: date,
    end_date: date,
    *,
    exclude_id: Any = None,
    lock: bool = False,
) -> List[Promotion]:
    """Active promotions of the property with ``start <= end_date AND end >= start_date``."""
    qs = Promotion.objects.active().filter(property_id=property_id).overlapping(start_date, end_date)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if lock:
        qs = lock_queryset_if_possible(qs)
    return list(qs.order_by("start_date", "id"))


def validate_promotion_commission(property_obj: Property, terms: PromotionTerms) -> Decimal:
    """
    Reject discounts that leave the platform less than
    ``PROMOTION_MIN_PLATFORM_REVENUE`` on one discounted night.

    Only applies when the property type has an active commission of its
    own. Returns the discounted nightly price.
    """
    discounted = terms.discounted(property_obj.base_price)
    if discounted < 0:
        raise ValidationError("Discounted price cannot be negative", field="discount_percentage")

    if property_obj.property_type_id is None:
        return discounted
    commission = Commission.objects.filter(
        property_type_id=property_obj.property_type_id,
        is_active=True,
    ).first()
    if commission is None:
        return discounted

    rates = CommissionRates.from_record(commission, CommissionRates.SOURCE_TYPE)
    platform_revenue = rates.client_commission(discounted) + rates.host_commission(discounted)
    minimum = Decimal(str(getattr(settings, "PROMOTION_MIN_PLATFORM_REVENUE", "1.00")))
    if platform_revenue < minimum:
        logger.info(
            f"Promotion of {terms.discount_percentage}% on property {property_obj.pk} rejected: "
            f"platform revenue {platform_revenue} below {minimum}"
        )
        raise ValidationError(
            "This discount is too large: the platform could not cover its fees. "
            "Please lower the discount percentage.",
            field="discount_percentage",
            platform_revenue=str(platform_revenue),
            minimum_platform_revenue=str(minimum),
        )
    return discounted


def _build_terms(property_id, discount_percentage, start_date, end_date) -> PromotionTerms:
    if start_date is None or end_date is None:
        raise ValidationError("Both start_date and end_date are required", field="start_date")
    return PromotionTerms(
        property_id=property_id,
        discount_percentage=discount_percentage,
        start_date=start_date,
        end_date=end_date,
    )


def _create_promotion(terms: PromotionTerms, created_by: Any) -> Promotion:
    return Promotion.objects.create(
        property_id=terms.property_id,
        discount_percentage=terms.discount_percentage,
        start_date=terms.start_date,
        end_date=terms.end_date,
        created_by=created_by,
        is_active=True,
    )


def propose_promotion(
    property_id: Any,
    discount_percentage: Any,
    start_date: date,
    end_date: date,
    created_by: Any = None,
) -> ProposalOutcome:
    """
    Create the promotion when nothing overlaps; otherwise write nothing and
    return the overlapping active promotions for the caller to confirm.
    """
    property_obj = _get_property(property_id)
    terms = _build_terms(property_obj.pk, discount_percentage, start_date, end_date)
    proposal = PromotionProposal(terms=terms, created_by_id=getattr(created_by, "pk", None))

    try:
        validate_promotion_commission(property_obj, terms)
    except ValidationError as e:
        proposal.abort(e.message)
        raise

    with DjangoUnitOfWork() as uow:
        overlapping = find_overlapping_promotions(property_obj.pk, start_date, end_date, lock=True)
        if overlapping:
            proposal.present_conflict([promo.pk for promo in overlapping])
            logger.info(
                f"Promotion proposal on property {property_obj.pk} overlaps "
                f"{list(proposal.overlapping_ids)}, waiting for confirmation"
            )
            return ProposalOutcome(proposal=proposal, overlapping=overlapping)

        promotion = _create_promotion(terms, created_by)
        proposal.confirm(promotion.pk)
        uow.collect_events(proposal)

    logger.info(f"Promotion {promotion.pk} created on property {property_obj.pk}")
    return ProposalOutcome(proposal=proposal, promotion=promotion)


def confirm_overlap(
    promotion_data: dict,
    overlapping_ids: Iterable[Any],
    created_by: Any = None,
) -> Promotion:
    """
    Deactivate ``overlapping_ids`` and create the promotion atomically.

    ``promotion_data`` holds ``property``, ``discount_percentage``,
    ``start_date`` and ``end_date``. If another active promotion started
    overlapping since the conflict was presented, nothing is written and a
    ``ConflictError`` lists the current overlap set so the caller can
    confirm again.
    """
    property_obj = _get_property(promotion_data.get("property"))
    terms = _build_terms(
        property_obj.pk,
        promotion_data.get("discount_percentage"),
        promotion_data.get("start_date"),
        promotion_data.get("end_date"),
    )
    requested_ids = {str(pk) for pk in overlapping_ids}
    proposal = PromotionProposal(terms=terms, created_by_id=getattr(created_by, "pk", None))

    validate_promotion_commission(property_obj, terms)

    with DjangoUnitOfWork() as uow:
        foreign = Promotion.objects.filter(pk__in=list(requested_ids)).exclude(property_id=property_obj.pk)
        if foreign.exists():
            raise ValidationError(
                "Overlapping promotions must belong to the same property",
                field="overlapping_ids",
                foreign_ids=sorted(foreign.values_list("pk", flat=True)),
            )

        overlapping = find_overlapping_promotions(
            property_obj.pk,
            terms.start_date,
            terms.end_date,
            lock=True,
        )
        if overlapping:
            proposal.present_conflict([promo.pk for promo in overlapping])

        unexpected = [promo for promo in overlapping if str(promo.pk) not in requested_ids]
        if unexpected:
            proposal.abort("overlap set changed before confirmation")
            logger.warning(
                f"Promotion confirmation on property {property_obj.pk} aborted, "
                f"unconfirmed overlaps {[promo.pk for promo in unexpected]}"
            )
            raise ConflictError(
                "New overlapping promotions appeared, please confirm again",
                overlapping_promotions=[_summary(promo) for promo in overlapping],
            )

        # every listed id is replaced, including ones that no longer overlap
        listed_ids = Promotion.objects.active().filter(
            property_id=property_obj.pk,
            pk__in=list(requested_ids),
        ).values_list("pk", flat=True)
        replaced_ids: Tuple[Any, ...] = tuple(sorted(
            set(listed_ids) | {promo.pk for promo in overlapping}
        ))

        promotion = _create_promotion(terms, created_by)
        if replaced_ids:
            Promotion.objects.filter(pk__in=replaced_ids).update(
                is_active=False,
                replaced_by=promotion,
                updated_at=timezone.now(),
            )
        proposal.confirm(promotion.pk, replaced_ids)
        uow.collect_events(proposal)

    logger.info(
        f"Promotion {promotion.pk} created on property {property_obj.pk}, replacing {list(replaced_ids)}"
    )
    return promotion


def update_promotion(promotion_id: Any, **changes: Any) -> Promotion:
    """Change dates or discount of an active promotion; overlaps are refused."""
    promotion = get_promotion(promotion_id)
    if not promotion.is_active:
        raise ConflictError("Only active promotions can be changed", promotion=promotion.pk)

    terms = _build_terms(
        promotion.property_id,
        changes.get("discount_percentage", promotion.discount_percentage),
        changes.get("start_date", promotion.start_date),
        changes.get("end_date", promotion.end_date),
    )
    if terms.discount_percentage != promotion.discount_percentage:
        validate_promotion_commission(promotion.property, terms)

    with DjangoUnitOfWork():
        overlapping = find_overlapping_promotions(
            promotion.property_id,
            terms.start_date,
            terms.end_date,
            exclude_id=promotion.pk,
            lock=True,
        )
        if overlapping:
            raise ConflictError(
                "The new dates overlap another active promotion",
                overlapping_promotions=[_summary(promo) for promo in overlapping],
            )
        promotion.discount_percentage = terms.discount_percentage
        promotion.start_date = terms.start_date
        promotion.end_date = terms.end_date
        promotion.save(update_fields=["discount_percentage", "start_date", "end_date", "updated_at"])

    logger.info(f"Promotion {promotion.pk} updated")
    return promotion


def cancel_promotion(promotion_id: Any, reason: str = "cancelled") -> Promotion:
    """Soft delete: the row stays for audit with ``is_active = False``."""
    promotion = get_promotion(promotion_id)
    if not promotion.is_active:
        return promotion

    with DjangoUnitOfWork() as uow:
        promotion.is_active = False
        promotion.save(update_fields=["is_active", "updated_at"])
        uow.add_event(PromotionCancelled(
            aggregate_id=promotion.pk,
            property_id=promotion.property_id,
            reason=reason,
        ))

    logger.info(f"Promotion {promotion.pk} cancelled ({reason})")
    return promotion


def deactivate_expired_promotions(today: Optional[date] = None) -> int:
    """Switch off active promotions whose end date is before ``today``."""
    today = today or timezone.localdate()
    expired_ids = list(
        Promotion.objects.active().filter(end_date__lt=today).values_list("pk", flat=True)
    )
    if not expired_ids:
        return 0

    with DjangoUnitOfWork() as uow:
        updated = Promotion.objects.filter(pk__in=expired_ids, is_active=True).update(
            is_active=False,
            updated_at=timezone.now(),
        )
        for promotion in Promotion.objects.filter(pk__in=expired_ids).only("pk", "property_id"):
            uow.add_event(PromotionCancelled(
                aggregate_id=promotion.pk,
                property_id=promotion.property_id,
                reason="expired",
            ))

    logger.info(f"Deactivated {updated} expired promotions")
    return updated


def promotions_for_host(user: Any):
    qs = Promotion.objects.select_related("property", "created_by", "replaced_by")
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return qs
    return qs.filter(property__owner=user)


def _summary(promotion: Promotion) -> dict:
    return {
        "id": promotion.pk,
        "discount_percentage": str(promotion.discount_percentage),
        "start_date": promotion.start_date.isoformat(),
        "end_date": promotion.end_date.isoformat(),
    }

