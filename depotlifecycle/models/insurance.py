"""InsuranceCoverage: damage coverage terms on a redelivery detail.

Owned by exactly one RedeliveryDetail and deleted with it.
"""

from decimal import Decimal

from sqlalchemy import Boolean, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from depotlifecycle.database import Base
from depotlifecycle.models.types import uuid_pk


class InsuranceCoverage(Base):
    __tablename__ = "insurance_coverages"

    id: Mapped[str] = uuid_pk()
    amount_covered: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    amount_currency: Mapped[str | None] = mapped_column(String(3))
    applies_to_ctl: Mapped[bool | None] = mapped_column(Boolean)
    all_or_nothing: Mapped[bool | None] = mapped_column(Boolean)

    # Ordered string lists; NULL = not provided, [] = explicitly none
    exceptions: Mapped[list | None] = mapped_column(JSON)
    exclusions: Mapped[list | None] = mapped_column(JSON)
    inclusions: Mapped[list | None] = mapped_column(JSON)
