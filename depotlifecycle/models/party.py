"""Party: a depot, lessor (owner), or customer.

Identified by its BIC facility code (`company_id`). Other entities hold
non-owning references to parties; deleting an aggregate never deletes a
party.
"""

from datetime import datetime

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class Party(Base):
    __tablename__ = "parties"

    id: Mapped[str] = uuid_pk()
    company_id: Mapped[str] = mapped_column(
        String(9), unique=True, nullable=False, index=True
    )
    code: Mapped[str | None] = mapped_column(String(10))
    name: Mapped[str | None] = mapped_column(String(35))
    user_code: Mapped[str | None] = mapped_column(String(10))
    user_name: Mapped[str | None] = mapped_column(String(35))

    # ── Contact ──────────────────────────────────────────────
    contact_email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    fax: Mapped[str | None] = mapped_column(String(20))

    # ── Address ──────────────────────────────────────────────
    street_address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(20))
    country_code: Mapped[str | None] = mapped_column(String(2))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
