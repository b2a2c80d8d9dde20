"""Common schemas and field types used across the API.

JSON property names are camelCase; Python attributes stay snake_case.

Array convention:
  - An array sent as `null` is treated exactly like an omitted array.
  - Responses render an array that was never provided as `[]`.
  - On updates, an omitted array leaves the stored value alone while `[]`
    clears it (see `ApiModel.provided_fields`).
"""

import types
from decimal import Decimal
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    StringConstraints,
    model_validator,
)
from pydantic.alias_generators import to_camel


# ── Shared constraints ──────────────────────────────────────

UNIT_NUMBER_PATTERN = r"^[A-Z]{4}[0-9]{7}$"
COMPANY_ID_PATTERN = r"^[A-Z]{2}[A-Z0-9]{7}$"
CURRENCY_PATTERN = r"^[A-Z]{3}$"

UnitNumber = Annotated[str, StringConstraints(pattern=UNIT_NUMBER_PATTERN)]
CompanyId = Annotated[str, StringConstraints(pattern=COMPANY_ID_PATTERN)]
CurrencyCode = Annotated[str, StringConstraints(pattern=CURRENCY_PATTERN)]
Quantity = Annotated[int, Field(ge=0)]

# Decimals are accepted as numbers or strings and written back as JSON numbers
Money = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Response-side list: a stored NULL (never provided) renders as []
StrList = Annotated[list[str], BeforeValidator(lambda v: [] if v is None else v)]

UpgradeType = Literal[
    "FG", "ML", "DB", "EV", "WH", "SU", "CF", "TB", "MC", "MP", "AM", "CH", "TE", "FT",
]
CriteriaOperator = Literal["=", "!=", "<", "<=", ">", ">="]


def _is_list_annotation(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is list:
        return True
    if origin is Annotated:
        return _is_list_annotation(get_args(annotation)[0])
    if origin in (Union, types.UnionType):
        return any(_is_list_annotation(a) for a in get_args(annotation))
    return False


class ApiModel(BaseModel):
    """Base for every request and response body."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def _drop_null_arrays(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        list_keys = set()
        for name, field in cls.model_fields.items():
            if _is_list_annotation(field.annotation):
                list_keys.add(name)
                if field.alias:
                    list_keys.add(field.alias)
        return {k: v for k, v in data.items() if not (v is None and k in list_keys)}

    def provided_fields(self) -> set[str]:
        """Attribute names the client actually sent."""
        return set(self.model_fields_set)


# ── Errors ──────────────────────────────────────────────────

class ErrorResponse(ApiModel):
    """Body of every 4xx/5xx response.

    Example:
        {
            "code": "VAL400",
            "message": "Request validation failed",
            "details": ["details[0].quantity: Input should be greater than or equal to 0"]
        }
    """
    code: str | None = Field(None, max_length=6, pattern=r"^[A-Z0-9]{3}[0-9]{3}$")
    message: str
    details: list[str] | None = None
