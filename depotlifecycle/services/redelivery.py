"""Redelivery service: create, fetch, replace and search turn-in authorizations.

Mirrors the release service. Redelivery units additionally carry the
inspection criteria and, through their detail, the insurance coverage
that gate and estimate handling look up.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.middleware.exceptions import (
    BusinessRuleError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from depotlifecycle.models.insurance import InsuranceCoverage
from depotlifecycle.models.party import Party
from depotlifecycle.models.redelivery import (
    MachineryInfo,
    Redelivery,
    RedeliveryDetail,
    RedeliveryUnit,
)
from depotlifecycle.models.types import utcnow
from depotlifecycle.schemas.insurance import InsuranceCoverageIn
from depotlifecycle.schemas.redelivery import RedeliveryDetailIn, RedeliveryIn
from depotlifecycle.services.parties import PartyResolver

logger = logging.getLogger("depotlifecycle.redelivery")

APPROVED = "APPROVED"


def _build_coverage(body: InsuranceCoverageIn | None) -> InsuranceCoverage | None:
    if body is None:
        return None
    return InsuranceCoverage(
        amount_covered=body.amount_covered,
        amount_currency=body.amount_currency,
        applies_to_ctl=body.applies_to_ctl,
        all_or_nothing=body.all_or_nothing,
        exceptions=body.exceptions,
        exclusions=body.exclusions,
        inclusions=body.inclusions,
    )


async def _build_details(
    resolver: PartyResolver, details: list[RedeliveryDetailIn]
) -> list[RedeliveryDetail]:
    built = []
    for i, d in enumerate(details):
        path = f"details[{i}]"
        units = []
        for j, u in enumerate(d.units or []):
            unit_path = f"{path}.units[{j}]"
            units.append(RedeliveryUnit(
                position=j,
                unit_number=u.unit_number,
                manufacture_date=u.manufacture_date,
                last_on_hire_date=u.last_on_hire_date,
                last_on_hire_location=await resolver.get(
                    u.last_on_hire_location, f"{unit_path}.lastOnHireLocation"
                ),
                billing_party=await resolver.get(u.billing_party, f"{unit_path}.billingParty"),
                inspection_criteria=u.inspection_criteria,
                status=u.status,
                cargo_number=u.cargo_number,
                technical_bulletins=u.technical_bulletins,
                machinery=MachineryInfo(**u.machinery.model_dump()) if u.machinery else None,
                comments=u.comments,
            ))
        built.append(RedeliveryDetail(
            position=i,
            customer=await resolver.get(d.customer, f"{path}.customer"),
            contract=d.contract,
            equipment=d.equipment,
            grade=d.grade,
            quantity=d.quantity,
            comments=d.comments,
            insurance_coverage=_build_coverage(d.insurance_coverage),
            units=units,
        ))
    return built


async def find_redelivery(db: AsyncSession, redelivery_number: str) -> Redelivery | None:
    result = await db.execute(
        select(Redelivery).where(Redelivery.redelivery_number == redelivery_number)
    )
    return result.scalar_one_or_none()


async def get_redelivery(db: AsyncSession, redelivery_number: str) -> Redelivery:
    redelivery = await find_redelivery(db, redelivery_number)
    if not redelivery:
        raise ResourceNotFoundError("Redelivery", redelivery_number)
    return redelivery


async def create_redelivery(db: AsyncSession, body: RedeliveryIn) -> Redelivery:
    if await find_redelivery(db, body.redelivery_number):
        logger.warning("Duplicate redelivery %s rejected", body.redelivery_number)
        raise BusinessRuleError(f"Redelivery {body.redelivery_number} already exists")

    resolver = PartyResolver(db)
    redelivery = Redelivery(
        redelivery_number=body.redelivery_number,
        status=body.status,
        approval_date=body.approval_date,
        expiration_date=body.expiration_date,
        quantity=body.quantity,
        comments=body.comments,
        estimate_recipient_emails=body.estimate_recipient_emails,
        depot=await resolver.get(body.depot, "depot"),
        recipient=await resolver.get(body.recipient, "recipient"),
        owner=await resolver.get(body.owner, "owner"),
        details=await _build_details(resolver, body.details),
    )
    resolver.check()

    db.add(redelivery)
    await db.flush()
    logger.info(
        "Redelivery %s created with %d detail(s)",
        redelivery.redelivery_number, len(redelivery.details),
    )
    return redelivery


async def replace_redelivery(
    db: AsyncSession, redelivery_number: str, body: RedeliveryIn
) -> Redelivery:
    """PUT semantics, as for releases; owned coverage and units go with their detail."""
    if body.redelivery_number != redelivery_number:
        raise InvalidRequestError(
            "redeliveryNumber in body does not match the path",
            details=[f"redeliveryNumber: expected {redelivery_number}"],
        )
    redelivery = await get_redelivery(db, redelivery_number)

    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    recipient = await resolver.get(body.recipient, "recipient")
    owner = await resolver.get(body.owner, "owner")
    details = await _build_details(resolver, body.details)
    resolver.check()

    provided = body.provided_fields()
    redelivery.status = body.status
    redelivery.approval_date = body.approval_date
    redelivery.expiration_date = body.expiration_date
    redelivery.quantity = body.quantity
    if "comments" in provided:
        redelivery.comments = body.comments
    if "estimate_recipient_emails" in provided:
        redelivery.estimate_recipient_emails = body.estimate_recipient_emails
    redelivery.depot = depot
    redelivery.recipient = recipient
    redelivery.owner = owner
    redelivery.details = details

    await db.flush()
    logger.info("Redelivery %s replaced", redelivery_number)
    return redelivery


def _active_filter():
    return (
        Redelivery.status == APPROVED,
        (Redelivery.expiration_date.is_(None)) | (Redelivery.expiration_date > utcnow()),
    )


async def search_redeliveries(
    db: AsyncSession,
    redelivery_number: str,
    depot: str | None = None,
    unit_number: str | None = None,
    gate_check: bool = False,
) -> list[Redelivery]:
    stmt = select(Redelivery).where(Redelivery.redelivery_number == redelivery_number)
    if depot:
        stmt = stmt.join(Party, Redelivery.depot_id == Party.id).where(
            Party.company_id == depot
        )
    if unit_number:
        stmt = stmt.where(
            Redelivery.details.any(
                RedeliveryDetail.units.any(RedeliveryUnit.unit_number == unit_number)
            )
        )
    if gate_check:
        stmt = stmt.where(*_active_filter())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def find_redelivery_unit(
    db: AsyncSession,
    unit_number: str,
    redelivery_number: str | None = None,
    approved_only: bool = True,
    depot_id: str | None = None,
) -> tuple[RedeliveryDetail, RedeliveryUnit] | None:
    """Locate a unit on a redelivery, returning its detail too.

    Without a redelivery number the most recently approved redelivery
    holding the unit is used. `depot_id` limits the search to
    redeliveries addressed to that depot.
    """
    stmt = select(Redelivery).where(
        Redelivery.details.any(
            RedeliveryDetail.units.any(RedeliveryUnit.unit_number == unit_number)
        )
    )
    if redelivery_number:
        stmt = stmt.where(Redelivery.redelivery_number == redelivery_number)
    if depot_id:
        stmt = stmt.where(Redelivery.depot_id == depot_id)
    if approved_only:
        stmt = stmt.where(*_active_filter())
    stmt = stmt.order_by(Redelivery.approval_date.desc())

    result = await db.execute(stmt)
    for redelivery in result.scalars().all():
        for detail in redelivery.details:
            for unit in detail.units:
                if unit.unit_number == unit_number:
                    return detail, unit
    return None
