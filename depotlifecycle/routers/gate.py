"""Gate router.

Endpoints:
    POST  /api/v2/gate                 Record a gate-in or gate-out
    PUT   /api/v2/gate/{externalId}    Correct a recorded gate
    GET   /api/v2/gate/{unitNumber}    Latest gate of a unit
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth import roles
from depotlifecycle.auth.deps import Principal, require_role
from depotlifecycle.database import get_db
from depotlifecycle.schemas.gate import (
    GateCreateRequest,
    GateResponse,
    GateStatus,
    GateUpdateRequest,
)
from depotlifecycle.services import gate as gate_service

router = APIRouter()


# ── POST /api/v2/gate ───────────────────────────────────────

@router.post("", response_model=GateResponse, status_code=201)
async def create_gate(
    body: GateCreateRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.GATE_CREATE)),
):
    """Record a unit entering or leaving a depot.

    The answer carries the inspection criteria and insurance coverage the
    depot should use when estimating damage on the unit.
    """
    return await gate_service.create_gate(db, body)


# ── PUT /api/v2/gate/{externalId} ───────────────────────────

@router.put("/{external_id}", response_model=GateResponse)
async def update_gate(
    external_id: str,
    body: GateUpdateRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.GATE_UPDATE)),
):
    return await gate_service.update_gate(db, external_id, body)


# ── GET /api/v2/gate/{unitNumber} ───────────────────────────

@router.get("/{unit_number}", response_model=GateStatus)
async def get_gate_status(
    unit_number: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.GATE_READ)),
):
    gate = await gate_service.get_gate_status(db, unit_number)
    return GateStatus.model_validate(gate)
