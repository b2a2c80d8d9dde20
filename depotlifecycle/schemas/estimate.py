"""Pydantic schemas for damage estimates, approvals and photos."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import Field

from depotlifecycle.schemas.common import (
    ApiModel,
    CurrencyCode,
    Money,
    StrList,
    UnitNumber,
)
from depotlifecycle.schemas.party import PartyOut, PartyRef

Responsibility = Literal["O", "U", "I", "D", "S"]
Recommendation = Literal["REPAIR", "SELL", "HOLD"]
PhotoStatus = Literal["BEFORE", "AFTER"]
Dimension = Annotated[Decimal, Field(ge=0)]


# ── Request ─────────────────────────────────────────────────

class EstimateLineItemPartIn(ApiModel):
    description: str | None = Field(None, max_length=500)
    number: str = Field(..., max_length=50)
    quantity: int = Field(..., ge=1)
    price: Money


class EstimateLineItemIn(ApiModel):
    line_number: int = Field(..., ge=1)
    damage_location_code: str = Field(..., min_length=4, max_length=4)
    component_code: str = Field(..., min_length=3, max_length=3)
    damage_code: str = Field(..., min_length=2, max_length=2)
    repair_code: str = Field(..., min_length=2, max_length=2)
    material_code: str | None = Field(None, max_length=3)
    length: Dimension | None = None
    width: Dimension | None = None
    quantity: int = Field(1, ge=1)
    hours: Dimension = Decimal("0")
    material_cost: Money = Decimal("0")
    responsibility: Responsibility
    parts: list[EstimateLineItemPartIn] | None = None
    comments: list[str] | None = None


class EstimateIn(ApiModel):
    """Payload for POST /api/v2/estimate (new estimate or a higher revision)."""
    estimate_number: str = Field(..., max_length=20)
    revision: int = Field(0, ge=0)
    unit_number: UnitNumber
    depot: PartyRef
    owner: PartyRef | None = None
    customer: PartyRef | None = None
    estimate_time: datetime
    currency: CurrencyCode
    labor_rate: Money | None = None
    ctl: bool = False
    comments: list[str] | None = None
    line_items: list[EstimateLineItemIn] | None = None


class EstimateCustomerApprovalIn(ApiModel):
    """Payload for POST /api/v2/estimate/{estimateNumber}/customerApproval."""
    approval_number: str = Field(..., max_length=30)
    approval_time: datetime
    approval_total: Money | None = None
    currency: CurrencyCode | None = None
    comments: list[str] | None = None


# ── Response ────────────────────────────────────────────────

class EstimateLineItemPartOut(ApiModel):
    description: str | None = None
    number: str
    quantity: int
    price: Money


class EstimateLineItemOut(ApiModel):
    line_number: int
    damage_location_code: str
    component_code: str
    damage_code: str
    repair_code: str
    material_code: str | None = None
    length: Money | None = None
    width: Money | None = None
    quantity: int
    hours: Money
    material_cost: Money
    responsibility: str
    parts: list[EstimateLineItemPartOut] = []
    comments: StrList = []


class EstimateAllocationOut(ApiModel):
    id: str
    currency: str
    labor_total: Money
    material_total: Money
    parts_total: Money
    owner_total: Money
    customer_total: Money
    insurance_total: Money
    depot_total: Money
    special_total: Money
    total: Money


class PreliminaryDecision(ApiModel):
    recommendation: Recommendation
    reason: str | None = None


class EstimateCustomerApprovalOut(ApiModel):
    approval_number: str
    approval_time: datetime
    approval_total: Money | None = None


class EstimateOut(ApiModel):
    estimate_number: str
    revision: int
    unit_number: str
    depot: PartyOut
    owner: PartyOut | None = None
    customer: PartyOut | None = None
    estimate_time: datetime
    currency: str
    labor_rate: Money | None = None
    ctl: bool
    status: str | None = None
    comments: StrList = []
    line_items: list[EstimateLineItemOut] = []
    allocation: EstimateAllocationOut | None = None
    preliminary_decision: PreliminaryDecision | None = None
    customer_approval: EstimateCustomerApprovalOut | None = None


class EstimatePhotoOut(ApiModel):
    id: str
    line_number: int | None = None
    status: str
    filename: str | None = None
    content_type: str | None = None
    size: int
