"""Release service: create, fetch, replace and search lease-out authorizations.

A release is written as one aggregate: the release row, its details and
their units and criteria go in the same flush, so a failure anywhere
leaves nothing behind.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.middleware.exceptions import (
    BusinessRuleError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from depotlifecycle.models.party import Party
from depotlifecycle.models.release import (
    Release,
    ReleaseDetail,
    ReleaseDetailCriteria,
    ReleaseUnit,
)
from depotlifecycle.models.types import utcnow
from depotlifecycle.schemas.release import ReleaseDetailIn, ReleaseIn
from depotlifecycle.services.parties import PartyResolver

logger = logging.getLogger("depotlifecycle.release")

APPROVED = "APPROVED"


async def _build_details(
    resolver: PartyResolver, details: list[ReleaseDetailIn]
) -> list[ReleaseDetail]:
    built = []
    for i, d in enumerate(details):
        path = f"details[{i}]"
        built.append(ReleaseDetail(
            position=i,
            customer=await resolver.get(d.customer, f"{path}.customer"),
            contract=d.contract,
            equipment=d.equipment,
            grade=d.grade,
            upgrade_type=d.upgrade_type,
            quantity=d.quantity,
            comments=d.comments,
            pre_trip_inspection_required=d.pre_trip_inspection_required,
            desired_temperature=d.desired_temperature,
            ventilation=d.ventilation,
            units=[
                ReleaseUnit(
                    position=j,
                    unit_number=u.unit_number,
                    status=u.status,
                    manufacture_date=u.manufacture_date,
                    comments=u.comments,
                )
                for j, u in enumerate(d.units or [])
            ],
            criteria=[
                ReleaseDetailCriteria(
                    position=j,
                    attribute=c.attribute,
                    operator=c.operator,
                    value=c.value,
                )
                for j, c in enumerate(d.criteria or [])
            ],
        ))
    return built


async def find_release(db: AsyncSession, release_number: str) -> Release | None:
    result = await db.execute(
        select(Release).where(Release.release_number == release_number)
    )
    return result.scalar_one_or_none()


async def get_release(db: AsyncSession, release_number: str) -> Release:
    release = await find_release(db, release_number)
    if not release:
        raise ResourceNotFoundError("Release", release_number)
    return release


async def create_release(db: AsyncSession, body: ReleaseIn) -> Release:
    if await find_release(db, body.release_number):
        logger.warning("Duplicate release %s rejected", body.release_number)
        raise BusinessRuleError(f"Release {body.release_number} already exists")

    resolver = PartyResolver(db)
    release = Release(
        release_number=body.release_number,
        status=body.status,
        type=body.type,
        approval_date=body.approval_date,
        expiration_date=body.expiration_date,
        quantity=body.quantity,
        comments=body.comments,
        depot=await resolver.get(body.depot, "depot"),
        recipient=await resolver.get(body.recipient, "recipient"),
        owner=await resolver.get(body.owner, "owner"),
        details=await _build_details(resolver, body.details),
    )
    resolver.check()

    db.add(release)
    await db.flush()
    logger.info(
        "Release %s created with %d detail(s)",
        release.release_number, len(release.details),
    )
    return release


async def replace_release(db: AsyncSession, release_number: str, body: ReleaseIn) -> Release:
    """PUT semantics: scalar fields and details are replaced.

    Removed details (with their units and criteria) are deleted. Top-level
    `comments` is only touched when the client sent it.
    """
    if body.release_number != release_number:
        raise InvalidRequestError(
            "releaseNumber in body does not match the path",
            details=[f"releaseNumber: expected {release_number}"],
        )
    release = await get_release(db, release_number)

    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    recipient = await resolver.get(body.recipient, "recipient")
    owner = await resolver.get(body.owner, "owner")
    details = await _build_details(resolver, body.details)
    resolver.check()

    release.status = body.status
    release.type = body.type
    release.approval_date = body.approval_date
    release.expiration_date = body.expiration_date
    release.quantity = body.quantity
    if "comments" in body.provided_fields():
        release.comments = body.comments
    release.depot = depot
    release.recipient = recipient
    release.owner = owner
    release.details = details

    await db.flush()
    logger.info("Release %s replaced", release_number)
    return release


async def search_releases(
    db: AsyncSession,
    release_number: str,
    depot: str | None = None,
    unit_number: str | None = None,
    gate_check: bool = False,
) -> list[Release]:
    """Find releases by number, optionally narrowed by depot and unit.

    With `gate_check`, only approved releases that have not expired are
    returned; this is what a depot asks before letting a unit out.
    """
    stmt = select(Release).where(Release.release_number == release_number)
    if depot:
        stmt = stmt.join(Party, Release.depot_id == Party.id).where(
            Party.company_id == depot
        )
    if unit_number:
        stmt = stmt.where(
            Release.details.any(
                ReleaseDetail.units.any(ReleaseUnit.unit_number == unit_number)
            )
        )
    if gate_check:
        stmt = stmt.where(
            Release.status == APPROVED,
            (Release.expiration_date.is_(None)) | (Release.expiration_date > utcnow()),
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())
