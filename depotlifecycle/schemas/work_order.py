from datetime import datetime

from pydantic import Field

from depotlifecycle.schemas.common import ApiModel, CurrencyCode, Money, StrList, UnitNumber
from depotlifecycle.schemas.party import PartyOut, PartyRef


# ── Request ─────────────────────────────────────────────────

class WorkOrderUnitIn(ApiModel):
    unit_number: UnitNumber
    estimate_number: str = Field(..., max_length=20)
    approved_total: Money | None = None
    currency: CurrencyCode | None = None
    status: str | None = Field(None, max_length=20)
    comments: list[str] | None = None


class WorkOrderIn(ApiModel):
    """Payload for POST /api/v2/workOrder."""
    work_order_number: str = Field(..., max_length=20)
    depot: PartyRef
    owner: PartyRef | None = None
    work_order_date: datetime
    units: list[WorkOrderUnitIn] = Field(..., min_length=1)
    comments: list[str] | None = None


class RepairCompleteIn(ApiModel):
    """Payload for PUT /api/v2/workOrder/repairComplete."""
    work_order_number: str = Field(..., max_length=20)
    unit_number: UnitNumber
    depot: PartyRef
    repair_time: datetime
    comments: list[str] | None = None


# ── Response ────────────────────────────────────────────────

class WorkOrderUnitOut(ApiModel):
    unit_number: str
    estimate_number: str
    approved_total: Money | None = None
    currency: str | None = None
    status: str | None = None
    repair_complete_time: datetime | None = None
    comments: StrList = []


class WorkOrderOut(ApiModel):
    work_order_number: str
    depot: PartyOut
    owner: PartyOut | None = None
    work_order_date: datetime
    units: list[WorkOrderUnitOut] = []
    comments: StrList = []
