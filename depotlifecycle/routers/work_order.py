"""Work order router.

Endpoints:
    POST  /api/v2/workOrder                 Authorize repairs
    PUT   /api/v2/workOrder/repairComplete  Report a unit repaired (204)
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth import roles
from depotlifecycle.auth.deps import Principal, require_role
from depotlifecycle.database import get_db
from depotlifecycle.schemas.work_order import RepairCompleteIn, WorkOrderIn, WorkOrderOut
from depotlifecycle.services import work_order as work_order_service

router = APIRouter()


@router.post("", response_model=WorkOrderOut, status_code=201)
async def create_work_order(
    body: WorkOrderIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.WORKORDER_CREATE)),
):
    work_order = await work_order_service.create_work_order(db, body)
    return WorkOrderOut.model_validate(work_order)


@router.put("/repairComplete", status_code=204)
async def repair_complete(
    body: RepairCompleteIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.WORKORDER_UPDATE)),
):
    await work_order_service.complete_repair(db, body)
    return Response(status_code=204)
