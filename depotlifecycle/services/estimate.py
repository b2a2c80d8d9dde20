"""Estimate service: damage estimates, revisions, customer approval, photos.

Allocation rules:
  line total   = hours × laborRate + materialCost + Σ(part.quantity × part.price)
  each line total is charged to its responsibility code
      O owner · U customer (user) · I insurance · D depot · S special handling
  insurance    the redelivery coverage for the unit then takes over customer
               damage up to amountCovered, except when
                 - the estimate is a CTL and the coverage does not apply to CTL
                 - allOrNothing is set and customer damage exceeds the coverage
                 - the coverage is in another currency

Revisions: an estimate number may be resubmitted only with a higher
revision. The highest revision is the current estimate.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.config import settings
from depotlifecycle.middleware.exceptions import (
    BusinessRuleError,
    DepotLifecycleError,
    FeatureNotImplementedError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from depotlifecycle.models.estimate import (
    Estimate,
    EstimateAllocation,
    EstimateLineItem,
    EstimateLineItemPart,
    EstimatePhoto,
)
from depotlifecycle.models.insurance import InsuranceCoverage
from depotlifecycle.schemas.estimate import EstimateCustomerApprovalIn, EstimateIn
from depotlifecycle.services.parties import PartyResolver
from depotlifecycle.services.redelivery import find_redelivery_unit

logger = logging.getLogger("depotlifecycle.estimate")

PENDING = "PENDING"
CUSTOMER_APPROVED = "CUSTOMER_APPROVED"

PHOTO_FEATURE = "estimate.photo"

CENT = Decimal("0.01")
ZERO = Decimal("0")

RESPONSIBILITY_TOTALS = {
    "O": "owner_total",
    "U": "customer_total",
    "I": "insurance_total",
    "D": "depot_total",
    "S": "special_total",
}


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_allocation(
    line_items: list[EstimateLineItem],
    currency: str,
    labor_rate: Decimal | None,
    ctl: bool = False,
    coverage: InsuranceCoverage | None = None,
) -> EstimateAllocation:
    rate = labor_rate or ZERO
    totals = {name: ZERO for name in RESPONSIBILITY_TOTALS.values()}
    labor_total = material_total = parts_total = ZERO

    for item in line_items:
        labor = Decimal(item.hours or 0) * rate
        material = Decimal(item.material_cost or 0)
        parts = sum(
            (Decimal(p.quantity) * Decimal(p.price) for p in item.parts), ZERO
        )
        labor_total += labor
        material_total += material
        parts_total += parts
        totals[RESPONSIBILITY_TOTALS[item.responsibility]] += labor + material + parts

    covered = insurance_cover(totals["customer_total"], currency, ctl, coverage)
    totals["customer_total"] -= covered
    totals["insurance_total"] += covered

    return EstimateAllocation(
        currency=currency,
        labor_total=_money(labor_total),
        material_total=_money(material_total),
        parts_total=_money(parts_total),
        total=_money(labor_total + material_total + parts_total),
        **{name: _money(value) for name, value in totals.items()},
    )


def insurance_cover(
    customer_damage: Decimal,
    currency: str,
    ctl: bool,
    coverage: InsuranceCoverage | None,
) -> Decimal:
    """How much of the customer's damage the coverage takes over."""
    if coverage is None or coverage.amount_covered is None or customer_damage <= 0:
        return ZERO
    if coverage.amount_currency and coverage.amount_currency != currency:
        return ZERO
    if ctl and not coverage.applies_to_ctl:
        return ZERO
    limit = Decimal(coverage.amount_covered)
    if coverage.all_or_nothing and customer_damage > limit:
        return ZERO
    return min(customer_damage, limit)


def preliminary_decision(estimate: Estimate) -> tuple[str, str]:
    if estimate.ctl:
        return "SELL", "Damage is a constructive total loss"
    if not estimate.line_items:
        return "HOLD", "No damage reported"
    return "REPAIR", "Repair cost within unit value"


def _build_line_items(body: EstimateIn) -> list[EstimateLineItem]:
    return [
        EstimateLineItem(
            position=i,
            line_number=li.line_number,
            damage_location_code=li.damage_location_code,
            component_code=li.component_code,
            damage_code=li.damage_code,
            repair_code=li.repair_code,
            material_code=li.material_code,
            length=li.length,
            width=li.width,
            quantity=li.quantity,
            hours=li.hours,
            material_cost=li.material_cost,
            responsibility=li.responsibility,
            comments=li.comments,
            parts=[
                EstimateLineItemPart(
                    position=j,
                    description=p.description,
                    number=p.number,
                    quantity=p.quantity,
                    price=p.price,
                )
                for j, p in enumerate(li.parts or [])
            ],
        )
        for i, li in enumerate(body.line_items or [])
    ]


async def find_estimate(db: AsyncSession, estimate_number: str) -> Estimate | None:
    """Current (highest) revision of an estimate."""
    result = await db.execute(
        select(Estimate)
        .where(Estimate.estimate_number == estimate_number)
        .order_by(Estimate.revision.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_estimate(db: AsyncSession, estimate_number: str) -> Estimate:
    estimate = await find_estimate(db, estimate_number)
    if not estimate:
        raise ResourceNotFoundError("Estimate", estimate_number)
    return estimate


async def create_estimate(db: AsyncSession, body: EstimateIn) -> Estimate:
    """Create an estimate, or store a new revision of an existing one."""
    current = await find_estimate(db, body.estimate_number)
    if current:
        if body.revision <= current.revision:
            logger.warning(
                "Estimate %s revision %d rejected (current %d)",
                body.estimate_number, body.revision, current.revision,
            )
            raise BusinessRuleError(
                f"Estimate {body.estimate_number} revision {body.revision} must be "
                f"greater than current revision {current.revision}",
                error_code="EST405",
            )
        if current.unit_number != body.unit_number:
            raise BusinessRuleError(
                f"Estimate {body.estimate_number} belongs to unit {current.unit_number}",
                error_code="EST405",
            )

    line_numbers = [li.line_number for li in body.line_items or []]
    duplicates = sorted({n for n in line_numbers if line_numbers.count(n) > 1})
    if duplicates:
        raise InvalidRequestError(
            "Duplicate line numbers",
            details=[f"lineItems: line number {n} repeated" for n in duplicates],
        )

    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    owner = await resolver.get(body.owner, "owner")
    customer = await resolver.get(body.customer, "customer")
    resolver.check()

    coverage = None
    found = await find_redelivery_unit(db, body.unit_number)
    if found:
        coverage = found[0].insurance_coverage

    line_items = _build_line_items(body)
    estimate = Estimate(
        estimate_number=body.estimate_number,
        revision=body.revision,
        unit_number=body.unit_number,
        estimate_time=body.estimate_time,
        currency=body.currency,
        labor_rate=body.labor_rate,
        ctl=body.ctl,
        comments=body.comments,
        status=PENDING,
        depot=depot,
        owner=owner,
        customer=customer,
        line_items=line_items,
        allocation=compute_allocation(
            line_items, body.currency, body.labor_rate, body.ctl, coverage
        ),
    )
    estimate.recommendation, estimate.recommendation_reason = preliminary_decision(estimate)

    db.add(estimate)
    await db.flush()
    logger.info(
        "Estimate %s rev %d for %s created, total %s %s",
        estimate.estimate_number, estimate.revision, estimate.unit_number,
        estimate.allocation.total, estimate.currency,
    )
    return estimate


async def approve_estimate(
    db: AsyncSession, estimate_number: str, body: EstimateCustomerApprovalIn
) -> Estimate:
    estimate = await get_estimate(db, estimate_number)
    if estimate.status == CUSTOMER_APPROVED:
        logger.warning("Estimate %s already customer approved", estimate_number)
        raise BusinessRuleError(
            f"Estimate {estimate_number} is already customer approved",
            error_code="EST405",
        )
    if body.currency and body.currency != estimate.currency:
        raise InvalidRequestError(
            "Approval currency does not match the estimate",
            details=[f"currency: expected {estimate.currency}"],
        )

    estimate.approval_number = body.approval_number
    estimate.approval_time = body.approval_time
    estimate.approval_total = body.approval_total
    estimate.status = CUSTOMER_APPROVED
    if body.comments:
        estimate.comments = list(estimate.comments or []) + body.comments

    await db.flush()
    logger.info("Estimate %s customer approved (%s)", estimate_number, body.approval_number)
    return estimate


async def add_photo(
    db: AsyncSession,
    estimate_number: str,
    content: bytes,
    filename: str | None = None,
    content_type: str | None = None,
    line_number: int | None = None,
    status: str = "BEFORE",
) -> EstimatePhoto:
    if PHOTO_FEATURE in settings.unsupported_feature_set:
        raise FeatureNotImplementedError(PHOTO_FEATURE)

    estimate = await get_estimate(db, estimate_number)
    if not content:
        raise InvalidRequestError("Photo file is empty", details=["file: empty upload"])
    if len(content) > settings.max_photo_bytes:
        raise DepotLifecycleError(
            f"Photo exceeds {settings.max_photo_bytes} bytes",
            status_code=413,
            error_code="VAL413",
        )
    if line_number is not None and line_number not in {
        li.line_number for li in estimate.line_items
    }:
        raise InvalidRequestError(
            f"Estimate {estimate_number} has no line {line_number}",
            details=[f"lineNumber: unknown line {line_number}"],
        )

    photo = EstimatePhoto(
        estimate_id=estimate.id,
        line_number=line_number,
        status=status,
        filename=filename,
        content_type=content_type,
        size=len(content),
        content=content,
    )
    db.add(photo)
    await db.flush()
    logger.info("Photo %s stored for estimate %s", photo.id, estimate_number)
    return photo
