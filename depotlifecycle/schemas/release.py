"""Pydantic schemas for releases (lease-out authorizations)."""

from datetime import date, datetime

from pydantic import Field

from depotlifecycle.schemas.common import (
    ApiModel,
    CriteriaOperator,
    Quantity,
    StrList,
    UnitNumber,
    UpgradeType,
)
from depotlifecycle.schemas.party import PartyOut, PartyRef


# ── Request ─────────────────────────────────────────────────

class ReleaseUnitIn(ApiModel):
    unit_number: UnitNumber
    status: str | None = Field(None, max_length=20)
    manufacture_date: date | None = None
    comments: list[str] | None = None


class ReleaseDetailCriteriaIn(ApiModel):
    attribute: str = Field(..., max_length=30)
    operator: CriteriaOperator
    value: str = Field(..., max_length=50)


class ReleaseDetailIn(ApiModel):
    customer: PartyRef
    contract: str = Field(..., max_length=16)
    equipment: str = Field(..., max_length=10)
    grade: str = Field(..., max_length=10)
    upgrade_type: UpgradeType | None = None
    quantity: Quantity
    units: list[ReleaseUnitIn] | None = None
    criteria: list[ReleaseDetailCriteriaIn] | None = None
    comments: list[str] | None = None
    pre_trip_inspection_required: bool | None = None
    desired_temperature: int | None = None
    ventilation: str | None = Field(None, max_length=10)


class ReleaseIn(ApiModel):
    """Payload for POST /api/v2/release and PUT /api/v2/release/{releaseNumber}."""
    status: str | None = Field(None, max_length=20)
    release_number: str = Field(..., max_length=16)
    type: str = Field(..., max_length=10)
    approval_date: datetime
    expiration_date: datetime | None = None
    quantity: Quantity
    comments: list[str] | None = None
    depot: PartyRef
    recipient: PartyRef
    owner: PartyRef
    details: list[ReleaseDetailIn] = Field(..., min_length=1)


# ── Response ────────────────────────────────────────────────

class ReleaseUnitOut(ApiModel):
    unit_number: str
    status: str | None = None
    manufacture_date: date | None = None
    comments: StrList = []


class ReleaseDetailCriteriaOut(ApiModel):
    attribute: str
    operator: str
    value: str


class ReleaseDetailOut(ApiModel):
    customer: PartyOut
    contract: str
    equipment: str
    grade: str
    upgrade_type: str | None = None
    quantity: int
    units: list[ReleaseUnitOut] = []
    criteria: list[ReleaseDetailCriteriaOut] = []
    comments: StrList = []
    pre_trip_inspection_required: bool | None = None
    desired_temperature: int | None = None
    ventilation: str | None = None


class ReleaseOut(ApiModel):
    status: str | None = None
    release_number: str
    type: str
    approval_date: datetime
    expiration_date: datetime | None = None
    quantity: int
    comments: StrList = []
    depot: PartyOut
    recipient: PartyOut
    owner: PartyOut
    details: list[ReleaseDetailOut] = []
