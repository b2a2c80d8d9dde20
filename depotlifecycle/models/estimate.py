"""Estimate: a damage or upgrade repair estimate for a container.

Aggregate:  Estimate → EstimateLineItem → EstimateLineItemPart
            Estimate → EstimateAllocation (computed totals)
            Estimate → EstimatePhoto

Each revision is its own row; (estimate_number, revision) is unique and the
highest revision is the current one.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean, ForeignKey, Integer, JSON, LargeBinary, Numeric, String,
    UniqueConstraint,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class Estimate(Base):
    __tablename__ = "estimates"

    id: Mapped[str] = uuid_pk()
    estimate_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_number: Mapped[str] = mapped_column(String(11), nullable=False, index=True)
    estimate_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    labor_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    ctl: Mapped[bool] = mapped_column(Boolean, default=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    # ── Workflow ─────────────────────────────────────────────
    # free-form; the service sets PENDING and CUSTOMER_APPROVED
    status: Mapped[str | None] = mapped_column(String(20))
    recommendation: Mapped[str | None] = mapped_column(String(10))
    recommendation_reason: Mapped[str | None] = mapped_column(String(255))

    # ── Customer approval ────────────────────────────────────
    approval_number: Mapped[str | None] = mapped_column(String(30))
    approval_time: Mapped[datetime | None] = mapped_column(UTCDateTime)
    approval_total: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    # ── Parties ──────────────────────────────────────────────
    depot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("parties.id"))
    customer_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("parties.id"))

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ────────────────────────────────────────
    depot = relationship("Party", foreign_keys=[depot_id], lazy="selectin")
    owner = relationship("Party", foreign_keys=[owner_id], lazy="selectin")
    customer = relationship("Party", foreign_keys=[customer_id], lazy="selectin")
    line_items = relationship(
        "EstimateLineItem",
        cascade="all, delete-orphan",
        order_by="EstimateLineItem.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )
    allocation = relationship(
        "EstimateAllocation",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    photos = relationship(
        "EstimatePhoto",
        cascade="all, delete-orphan",
        lazy="raise",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("estimate_number", "revision", name="uq_estimate_revision"),
    )


class EstimateLineItem(Base):
    __tablename__ = "estimate_line_items"

    id: Mapped[str] = uuid_pk()
    estimate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("estimates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    damage_location_code: Mapped[str] = mapped_column(String(4), nullable=False)
    component_code: Mapped[str] = mapped_column(String(3), nullable=False)
    damage_code: Mapped[str] = mapped_column(String(2), nullable=False)
    repair_code: Mapped[str] = mapped_column(String(2), nullable=False)
    material_code: Mapped[str | None] = mapped_column(String(3))
    length: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    width: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    material_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    # O owner | U user (customer) | I insurance | D depot | S special handling
    responsibility: Mapped[str] = mapped_column(String(1), nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    parts = relationship(
        "EstimateLineItemPart",
        cascade="all, delete-orphan",
        order_by="EstimateLineItemPart.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class EstimateLineItemPart(Base):
    """A part used for the repair of a line item."""
    __tablename__ = "estimate_line_item_parts"

    id: Mapped[str] = uuid_pk()
    line_item_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("estimate_line_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    description: Mapped[str | None] = mapped_column(String(500))
    number: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class EstimateAllocation(Base):
    """Totals of an estimate split by the party responsible for paying."""
    __tablename__ = "estimate_allocations"

    id: Mapped[str] = uuid_pk()
    estimate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("estimates.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    labor_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    material_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    parts_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    owner_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    customer_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    insurance_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    depot_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    special_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)


class EstimatePhoto(Base):
    __tablename__ = "estimate_photos"

    id: Mapped[str] = uuid_pk()
    estimate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("estimates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    line_number: Mapped[int | None] = mapped_column(Integer)
    # BEFORE | AFTER
    status: Mapped[str] = mapped_column(String(6), default="BEFORE")
    filename: Mapped[str | None] = mapped_column(String(255))
    content_type: Mapped[str | None] = mapped_column(String(100))
    size: Mapped[int] = mapped_column(Integer, default=0)
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
