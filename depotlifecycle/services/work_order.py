"""Work order service: authorize repairs and record their completion."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.middleware.exceptions import BusinessRuleError, ResourceNotFoundError
from depotlifecycle.models.work_order import WorkOrder, WorkOrderUnit
from depotlifecycle.schemas.work_order import RepairCompleteIn, WorkOrderIn
from depotlifecycle.services.estimate import find_estimate
from depotlifecycle.services.parties import PartyResolver

logger = logging.getLogger("depotlifecycle.work_order")

AUTHORIZED = "AUTHORIZED"
REPAIRED = "REPAIRED"


async def find_work_order(db: AsyncSession, work_order_number: str) -> WorkOrder | None:
    result = await db.execute(
        select(WorkOrder).where(WorkOrder.work_order_number == work_order_number)
    )
    return result.scalar_one_or_none()


async def create_work_order(db: AsyncSession, body: WorkOrderIn) -> WorkOrder:
    if await find_work_order(db, body.work_order_number):
        raise BusinessRuleError(f"Work order {body.work_order_number} already exists")

    # Every unit must have an estimate written for that same unit
    problems = []
    for i, u in enumerate(body.units):
        estimate = await find_estimate(db, u.estimate_number)
        if estimate is None:
            problems.append(f"units[{i}].estimateNumber: estimate {u.estimate_number} not found")
        elif estimate.unit_number != u.unit_number:
            problems.append(
                f"units[{i}].estimateNumber: estimate {u.estimate_number} "
                f"is for unit {estimate.unit_number}"
            )
    if problems:
        logger.warning("Work order %s rejected: %s", body.work_order_number, problems)
        raise BusinessRuleError(
            "Work order references invalid estimates",
            error_code="WOR405",
            details=problems,
        )

    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    owner = await resolver.get(body.owner, "owner")
    resolver.check()

    work_order = WorkOrder(
        work_order_number=body.work_order_number,
        work_order_date=body.work_order_date,
        comments=body.comments,
        depot=depot,
        owner=owner,
        units=[
            WorkOrderUnit(
                position=i,
                unit_number=u.unit_number,
                estimate_number=u.estimate_number,
                approved_total=u.approved_total,
                currency=u.currency,
                status=u.status or AUTHORIZED,
                comments=u.comments,
            )
            for i, u in enumerate(body.units)
        ],
    )
    db.add(work_order)
    await db.flush()
    logger.info(
        "Work order %s created for %d unit(s)",
        work_order.work_order_number, len(work_order.units),
    )
    return work_order


async def complete_repair(db: AsyncSession, body: RepairCompleteIn) -> WorkOrderUnit:
    work_order = await find_work_order(db, body.work_order_number)
    if not work_order:
        raise ResourceNotFoundError("Work order", body.work_order_number)

    resolver = PartyResolver(db)
    depot = await resolver.get(body.depot, "depot")
    resolver.check()
    if depot.id != work_order.depot_id:
        raise BusinessRuleError(
            f"Work order {body.work_order_number} was not issued to {depot.company_id}",
            error_code="WOR405",
        )

    unit = next(
        (u for u in work_order.units if u.unit_number == body.unit_number), None
    )
    if unit is None:
        raise BusinessRuleError(
            f"Unit {body.unit_number} is not on work order {body.work_order_number}",
            error_code="WOR405",
        )
    if unit.repair_complete_time is not None:
        logger.warning(
            "Repair of %s on %s already completed", body.unit_number, body.work_order_number
        )
        raise BusinessRuleError(
            f"Repair of unit {body.unit_number} is already complete",
            error_code="WOR405",
        )

    unit.repair_complete_time = body.repair_time
    unit.status = REPAIRED
    if body.comments:
        unit.comments = list(unit.comments or []) + body.comments

    await db.flush()
    logger.info("Repair complete for %s on %s", body.unit_number, body.work_order_number)
    return unit
