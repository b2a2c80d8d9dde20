"""Gate service: record gate-in / gate-out activity and answer the depot.

A gate-in is checked against the redelivery named by its advice number;
a gate-out against the release. The response tells the depot which
inspection criteria and insurance coverage apply to the unit so it can
write a damage estimate.

Rules:
  - A unit cannot gate in (or out) twice in a row at the same depot, and a
    correction may not produce that sequence either.
  - A gate-in must match an approved redelivery for the unit at the gating
    depot; a gate-out an approved release at that depot listing the unit,
    or a blanket release detail for its equipment type.
  - A gate with no matching approved authorization is still recorded but
    answered with advisory code TRI521.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.config import settings
from depotlifecycle.middleware.exceptions import BusinessRuleError, ResourceNotFoundError
from depotlifecycle.models.gate import Gate
from depotlifecycle.schemas.gate import GateCreateRequest, GateResponse, GateUpdateRequest
from depotlifecycle.schemas.insurance import InsuranceCoverageOut
from depotlifecycle.services.parties import PartyResolver
from depotlifecycle.services.redelivery import find_redelivery_unit
from depotlifecycle.services.release import search_releases

logger = logging.getLogger("depotlifecycle.gate")

GATE_IN = "IN"
GATE_OUT = "OUT"

NO_AUTHORIZATION_CODE = "TRI521"


async def _last_gate(
    db: AsyncSession, unit_number: str, depot_id: str | None = None
) -> Gate | None:
    stmt = select(Gate).where(Gate.unit_number == unit_number)
    if depot_id:
        stmt = stmt.where(Gate.depot_id == depot_id)
    stmt = stmt.order_by(Gate.activity_time.desc(), Gate.created_at.desc()).limit(1)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _neighbour_gates(
    db: AsyncSession,
    gate: Gate,
    unit_number: str,
    depot_id: str,
    activity_time: datetime,
) -> list[Gate]:
    """The unit's gates just before and just after `activity_time` at a depot,
    not counting `gate` itself."""
    base = select(Gate).where(
        Gate.unit_number == unit_number,
        Gate.depot_id == depot_id,
        Gate.id != gate.id,
    )
    before = await db.execute(
        base.where(Gate.activity_time <= activity_time)
        .order_by(Gate.activity_time.desc(), Gate.created_at.desc())
        .limit(1)
    )
    after = await db.execute(
        base.where(Gate.activity_time > activity_time)
        .order_by(Gate.activity_time.asc(), Gate.created_at.asc())
        .limit(1)
    )
    return [g for g in (before.scalar_one_or_none(), after.scalar_one_or_none()) if g]


async def _release_covers(db: AsyncSession, gate: Gate) -> bool:
    """True when an approved release at the gate's depot lets this unit out.

    The unit must be listed on a detail, or the detail must be a blanket
    one (no units listed) for the same equipment type.
    """
    releases = await search_releases(db, gate.advice_number, gate_check=True)
    for release in releases:
        if release.depot_id != gate.depot_id:
            continue
        for detail in release.details:
            if detail.units:
                if any(u.unit_number == gate.unit_number for u in detail.units):
                    return True
            elif gate.equipment and detail.equipment == gate.equipment:
                return True
    return False


async def _build_response(db: AsyncSession, gate: Gate) -> GateResponse:
    criteria = settings.default_inspection_criteria
    coverage = None
    authorized = False

    if gate.type == GATE_IN:
        found = await find_redelivery_unit(
            db, gate.unit_number, gate.advice_number, depot_id=gate.depot_id
        )
        if found:
            detail, unit = found
            authorized = True
            criteria = unit.inspection_criteria or criteria
            if detail.insurance_coverage is not None:
                coverage = InsuranceCoverageOut.model_validate(detail.insurance_coverage)
    else:
        authorized = await _release_covers(db, gate)

    response = GateResponse(
        advice_number=gate.advice_number,
        customer_reference=gate.customer_reference,
        transaction_reference=gate.transaction_reference,
        insurance_coverage=coverage,
        current_inspection_criteria=criteria,
    )
    if not authorized:
        kind = "redelivery" if gate.type == GATE_IN else "release"
        response.code = NO_AUTHORIZATION_CODE
        response.message = (
            f"No approved {kind} {gate.advice_number} found for unit {gate.unit_number}"
        )
        logger.warning(
            "Gate %s for %s has no approved %s %s",
            gate.type, gate.unit_number, kind, gate.advice_number,
        )
    return response


async def create_gate(db: AsyncSession, body: GateCreateRequest) -> GateResponse:
    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    lessee = await resolver.get(body.lessee, "lessee")
    owner = await resolver.get(body.owner, "owner")
    resolver.check()

    if body.external_id:
        existing = await db.execute(select(Gate).where(Gate.external_id == body.external_id))
        if existing.scalar_one_or_none():
            raise BusinessRuleError(f"Gate {body.external_id} already recorded")

    last = await _last_gate(db, body.unit_number, depot.id)
    if last and last.type == body.type:
        direction = "in" if body.type == GATE_IN else "out"
        logger.warning(
            "Unit %s already gated %s at %s", body.unit_number, direction, depot.company_id
        )
        raise BusinessRuleError(
            f"Unit {body.unit_number} is already gated {direction} at {depot.company_id}",
            error_code="GAT405",
        )

    gate = Gate(
        external_id=body.external_id,
        advice_number=body.advice_number,
        unit_number=body.unit_number,
        type=body.type,
        status=body.status,
        activity_time=body.activity_time,
        equipment=body.equipment,
        customer_reference=body.customer_reference,
        transaction_reference=body.transaction_reference,
        comments=body.comments,
        depot=depot,
        lessee=lessee,
        owner=owner,
    )
    db.add(gate)
    await db.flush()
    logger.info("Gate %s recorded for %s (%s)", gate.type, gate.unit_number, gate.advice_number)

    return await _build_response(db, gate)


async def update_gate(
    db: AsyncSession, external_id: str, body: GateUpdateRequest
) -> GateResponse:
    """Correct a previously recorded gate; fields the client omits are kept."""
    result = await db.execute(select(Gate).where(Gate.external_id == external_id))
    gate = result.scalar_one_or_none()
    if not gate:
        raise ResourceNotFoundError("Gate", external_id)

    provided = body.provided_fields()
    resolver = PartyResolver(db)
    parties = {}
    for name in ("depot", "lessee", "owner"):
        if name in provided:
            parties[name] = await resolver.get(getattr(body, name), name)
    resolver.check()

    depot = parties.get("depot") or gate.depot
    activity_time = gate.activity_time
    if "activity_time" in provided and body.activity_time is not None:
        activity_time = body.activity_time
    if (
        body.type != gate.type
        or body.unit_number != gate.unit_number
        or depot.id != gate.depot_id
        or activity_time != gate.activity_time
    ):
        for neighbour in await _neighbour_gates(
            db, gate, body.unit_number, depot.id, activity_time
        ):
            if neighbour.type == body.type:
                direction = "in" if body.type == GATE_IN else "out"
                logger.warning(
                    "Gate %s update would gate %s %s twice at %s",
                    external_id, body.unit_number, direction, depot.company_id,
                )
                raise BusinessRuleError(
                    f"Unit {body.unit_number} would be gated {direction} twice "
                    f"in a row at {depot.company_id}",
                    error_code="GAT405",
                )

    gate.advice_number = body.advice_number
    gate.unit_number = body.unit_number
    gate.type = body.type
    for name, party in parties.items():
        if name == "depot" and party is None:
            continue
        setattr(gate, name, party)
    for field in (
        "activity_time", "status", "customer_reference",
        "transaction_reference", "equipment", "comments",
    ):
        if field in provided:
            value = getattr(body, field)
            if value is None and field in ("activity_time", "status"):
                continue
            setattr(gate, field, value)

    await db.flush()
    logger.info("Gate %s updated", external_id)
    return await _build_response(db, gate)


async def get_gate_status(db: AsyncSession, unit_number: str) -> Gate:
    gate = await _last_gate(db, unit_number)
    if not gate:
        raise ResourceNotFoundError("Gate for unit", unit_number)
    return gate
