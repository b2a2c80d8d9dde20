"""WorkOrder: estimates approved for repair at a depot.

Aggregate:  WorkOrder → WorkOrderUnit

A unit is repaired once; `repair_complete_time` is set by the
repair-complete call.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id: Mapped[str] = uuid_pk()
    work_order_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    work_order_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    depot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("parties.id"))

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    # ── Relationships ────────────────────────────────────────
    depot = relationship("Party", foreign_keys=[depot_id], lazy="selectin")
    owner = relationship("Party", foreign_keys=[owner_id], lazy="selectin")
    units = relationship(
        "WorkOrderUnit",
        cascade="all, delete-orphan",
        order_by="WorkOrderUnit.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class WorkOrderUnit(Base):
    __tablename__ = "work_order_units"

    id: Mapped[str] = uuid_pk()
    work_order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    unit_number: Mapped[str] = mapped_column(String(11), nullable=False, index=True)
    estimate_number: Mapped[str] = mapped_column(String(20), nullable=False)
    approved_total: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    currency: Mapped[str | None] = mapped_column(String(3))
    # free-form; the service sets REPAIRED on repair complete
    status: Mapped[str | None] = mapped_column(String(20))
    repair_complete_time: Mapped[datetime | None] = mapped_column(UTCDateTime)
    comments: Mapped[list | None] = mapped_column(JSON)
