from pydantic import Field

from depotlifecycle.schemas.common import ApiModel, CurrencyCode, Money, StrList


class InsuranceCoverageIn(ApiModel):
    amount_covered: Money | None = None
    amount_currency: CurrencyCode | None = None
    applies_to_ctl: bool | None = Field(None, alias="appliesToCTL")
    all_or_nothing: bool | None = None
    exceptions: list[str] | None = None
    exclusions: list[str] | None = None
    inclusions: list[str] | None = None


class InsuranceCoverageOut(ApiModel):
    amount_covered: Money | None = None
    amount_currency: str | None = None
    applies_to_ctl: bool | None = Field(None, alias="appliesToCTL")
    all_or_nothing: bool | None = None
    exceptions: StrList = []
    exclusions: StrList = []
    inclusions: StrList = []
