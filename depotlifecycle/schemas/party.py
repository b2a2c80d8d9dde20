from pydantic import EmailStr, Field

from depotlifecycle.schemas.common import ApiModel, CompanyId


class PartyRef(ApiModel):
    """A party named in a payload; matched to a stored party by companyId.

    Any other party fields a client sends are accepted and ignored.
    """
    company_id: CompanyId


class PartyOut(ApiModel):
    company_id: str
    code: str | None = None
    name: str | None = None
    user_code: str | None = None
    user_name: str | None = None
    contact_email: str | None = None
    phone: str | None = None
    fax: str | None = None
    street_address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class PartyCreate(ApiModel):
    """Full party definition, used by the example data and the CLI."""
    company_id: CompanyId
    code: str | None = Field(None, max_length=10)
    name: str | None = Field(None, max_length=35)
    user_code: str | None = Field(None, max_length=10)
    user_name: str | None = Field(None, max_length=35)
    contact_email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    fax: str | None = Field(None, max_length=20)
    street_address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country_code: str | None = Field(None, pattern=r"^[A-Z]{2}$")
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
