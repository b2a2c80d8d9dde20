"""Pydantic schemas for redeliveries (turn-in authorizations)."""

from datetime import date, datetime

from pydantic import EmailStr, Field

from depotlifecycle.schemas.common import ApiModel, Quantity, StrList, UnitNumber
from depotlifecycle.schemas.insurance import InsuranceCoverageIn, InsuranceCoverageOut
from depotlifecycle.schemas.party import PartyOut, PartyRef


class MachineryInfoIn(ApiModel):
    manufacturer: str | None = Field(None, max_length=50)
    model_name: str | None = Field(None, max_length=50)
    model_number: str | None = Field(None, max_length=50)


class MachineryInfoOut(ApiModel):
    manufacturer: str | None = None
    model_name: str | None = None
    model_number: str | None = None


# ── Request ─────────────────────────────────────────────────

class RedeliveryUnitIn(ApiModel):
    unit_number: UnitNumber
    manufacture_date: date | None = None
    last_on_hire_date: date | None = None
    last_on_hire_location: PartyRef | None = None
    billing_party: PartyRef | None = None
    inspection_criteria: str | None = Field(None, max_length=10)
    status: str | None = Field(None, max_length=20)
    cargo_number: str | None = Field(None, max_length=20)
    technical_bulletins: list[str] | None = None
    machinery: MachineryInfoIn | None = None
    comments: list[str] | None = None


class RedeliveryDetailIn(ApiModel):
    customer: PartyRef
    contract: str = Field(..., max_length=16)
    equipment: str = Field(..., max_length=10)
    grade: str | None = Field(None, max_length=10)
    insurance_coverage: InsuranceCoverageIn | None = None
    units: list[RedeliveryUnitIn] | None = None
    comments: list[str] | None = None
    quantity: Quantity


class RedeliveryIn(ApiModel):
    """Payload for POST /api/v2/redelivery and PUT /api/v2/redelivery/{redeliveryNumber}."""
    status: str | None = Field(None, max_length=20)
    redelivery_number: str = Field(..., max_length=16)
    approval_date: datetime
    expiration_date: datetime | None = None
    quantity: Quantity
    comments: list[str] | None = None
    estimate_recipient_emails: list[EmailStr] | None = None
    depot: PartyRef
    recipient: PartyRef
    owner: PartyRef
    details: list[RedeliveryDetailIn] = Field(..., min_length=1)


# ── Response ────────────────────────────────────────────────

class RedeliveryUnitOut(ApiModel):
    unit_number: str
    manufacture_date: date | None = None
    last_on_hire_date: date | None = None
    last_on_hire_location: PartyOut | None = None
    billing_party: PartyOut | None = None
    inspection_criteria: str | None = None
    status: str | None = None
    cargo_number: str | None = None
    technical_bulletins: StrList = []
    machinery: MachineryInfoOut | None = None
    comments: StrList = []


class RedeliveryDetailOut(ApiModel):
    customer: PartyOut
    contract: str
    equipment: str
    grade: str | None = None
    insurance_coverage: InsuranceCoverageOut | None = None
    units: list[RedeliveryUnitOut] = []
    comments: StrList = []
    quantity: int


class RedeliveryOut(ApiModel):
    status: str | None = None
    redelivery_number: str
    approval_date: datetime
    expiration_date: datetime | None = None
    quantity: int
    comments: StrList = []
    estimate_recipient_emails: StrList = []
    depot: PartyOut
    recipient: PartyOut
    owner: PartyOut
    details: list[RedeliveryDetailOut] = []
