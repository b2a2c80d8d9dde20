"""Redelivery router.

Endpoints:
    POST  /api/v2/redelivery                       Create a redelivery
    GET   /api/v2/redelivery?redeliveryNumber=     Search (depot, unitNumber, gateCheck)
    GET   /api/v2/redelivery/{redeliveryNumber}    Fetch one redelivery
    PUT   /api/v2/redelivery/{redeliveryNumber}    Replace a redelivery
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth import roles
from depotlifecycle.auth.deps import Principal, require_role
from depotlifecycle.database import get_db
from depotlifecycle.schemas.redelivery import RedeliveryIn, RedeliveryOut
from depotlifecycle.services import redelivery as redelivery_service

router = APIRouter()


@router.post("", response_model=RedeliveryOut, status_code=201)
async def create_redelivery(
    body: RedeliveryIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.REDELIVERY_CREATE)),
):
    redelivery = await redelivery_service.create_redelivery(db, body)
    return RedeliveryOut.model_validate(redelivery)


@router.get("", response_model=list[RedeliveryOut])
async def search_redeliveries(
    redelivery_number: str = Query(..., alias="redeliveryNumber", max_length=16),
    depot: str | None = Query(None, description="companyId of the depot"),
    unit_number: str | None = Query(None, alias="unitNumber"),
    gate_check: bool = Query(False, alias="gateCheck"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.REDELIVERY_READ)),
):
    redeliveries = await redelivery_service.search_redeliveries(
        db, redelivery_number, depot=depot, unit_number=unit_number, gate_check=gate_check
    )
    return [RedeliveryOut.model_validate(r) for r in redeliveries]


@router.get("/{redelivery_number}", response_model=RedeliveryOut)
async def get_redelivery(
    redelivery_number: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.REDELIVERY_READ)),
):
    redelivery = await redelivery_service.get_redelivery(db, redelivery_number)
    return RedeliveryOut.model_validate(redelivery)


@router.put("/{redelivery_number}", response_model=RedeliveryOut)
async def replace_redelivery(
    redelivery_number: str,
    body: RedeliveryIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.REDELIVERY_CREATE)),
):
    redelivery = await redelivery_service.replace_redelivery(db, redelivery_number, body)
    return RedeliveryOut.model_validate(redelivery)
