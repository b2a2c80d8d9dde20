"""Pydantic schemas for gate-in / gate-out activity."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from depotlifecycle.schemas.common import ApiModel, Money, StrList, UnitNumber
from depotlifecycle.schemas.insurance import InsuranceCoverageOut
from depotlifecycle.schemas.party import PartyOut, PartyRef

GateType = Literal["IN", "OUT"]
GateStatusCode = Literal["AV", "DM"]


# ── Request ─────────────────────────────────────────────────

class GateCreateRequest(ApiModel):
    """Payload for POST /api/v2/gate."""
    advice_number: str = Field(..., max_length=16)
    depot: PartyRef
    lessee: PartyRef | None = None
    owner: PartyRef | None = None
    unit_number: UnitNumber
    activity_time: datetime
    type: GateType
    status: GateStatusCode
    external_id: str | None = Field(None, max_length=36)
    customer_reference: str | None = Field(None, max_length=35)
    transaction_reference: str | None = Field(None, max_length=35)
    equipment: str | None = Field(None, max_length=10)
    comments: list[str] | None = None


class GateUpdateRequest(ApiModel):
    """Payload for PUT /api/v2/gate/{externalId}; omitted fields are kept."""
    advice_number: str = Field(..., max_length=16)
    depot: PartyRef | None = None
    lessee: PartyRef | None = None
    owner: PartyRef | None = None
    unit_number: UnitNumber
    activity_time: datetime | None = None
    type: GateType
    status: GateStatusCode | None = None
    customer_reference: str | None = Field(None, max_length=35)
    transaction_reference: str | None = Field(None, max_length=35)
    equipment: str | None = Field(None, max_length=10)
    comments: list[str] | None = None


# ── Response ────────────────────────────────────────────────

class GateResponse(ApiModel):
    """What a depot needs after a gate: advisories and the terms for estimating."""
    code: str | None = Field(None, max_length=6, pattern=r"^[A-Z0-9]{3}[0-9]{3}$")
    message: str | None = None
    advice_number: str = Field(..., max_length=16)
    customer_reference: str | None = Field(None, max_length=35)
    transaction_reference: str | None = Field(None, max_length=35)
    insurance_coverage: InsuranceCoverageOut | None = None
    current_exchange_rate: Money | None = None
    comments: StrList = []
    current_inspection_criteria: str = Field(..., max_length=10)


class GateStatus(ApiModel):
    """The latest gate recorded for a unit."""
    unit_number: str
    advice_number: str
    type: str
    status: str
    activity_time: datetime
    external_id: str | None = None
    depot: PartyOut
