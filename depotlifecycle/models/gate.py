"""Gate: a container arriving at (IN) or leaving (OUT) a depot.

The advice number ties the movement to a redelivery (IN) or a release (OUT).
`external_id` is the depot system's own identifier, used for corrections.
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class Gate(Base):
    __tablename__ = "gates"

    id: Mapped[str] = uuid_pk()
    external_id: Mapped[str | None] = mapped_column(String(36), unique=True, index=True)
    advice_number: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    unit_number: Mapped[str] = mapped_column(String(11), nullable=False)

    # IN | OUT
    type: Mapped[str] = mapped_column(String(3), nullable=False)
    # AV (available) | DM (damaged)
    status: Mapped[str] = mapped_column(String(2), nullable=False)
    activity_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    equipment: Mapped[str | None] = mapped_column(String(10))
    customer_reference: Mapped[str | None] = mapped_column(String(35))
    transaction_reference: Mapped[str | None] = mapped_column(String(35))
    comments: Mapped[list | None] = mapped_column(JSON)

    # ── Parties ──────────────────────────────────────────────
    depot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    lessee_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("parties.id"))
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("parties.id"))

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ────────────────────────────────────────
    depot = relationship("Party", foreign_keys=[depot_id], lazy="selectin")
    lessee = relationship("Party", foreign_keys=[lessee_id], lazy="selectin")
    owner = relationship("Party", foreign_keys=[owner_id], lazy="selectin")

    __table_args__ = (
        Index("ix_gates_unit_activity", "unit_number", "activity_time"),
    )
