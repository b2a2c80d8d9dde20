"""Release: authorization to lease containers out to a customer.

Aggregate:  Release → ReleaseDetail → (ReleaseUnit, ReleaseDetailCriteria)

Details, units and criteria are owned by their parent: they are saved with
it, deleted with it, and deleted when removed from the parent's list.
Parties (depot, recipient, owner, customer) are shared references.

Status is a free-form string (e.g. APPROVED) set by the caller.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, ForeignKey, Integer, JSON, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class Release(Base):
    __tablename__ = "releases"

    id: Mapped[str] = uuid_pk()
    release_number: Mapped[str] = mapped_column(
        String(16), unique=True, nullable=False, index=True
    )
    status: Mapped[str | None] = mapped_column(String(20), index=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    approval_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expiration_date: Mapped[datetime | None] = mapped_column(UTCDateTime)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    # ── Parties ──────────────────────────────────────────────
    depot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False, index=True
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ────────────────────────────────────────
    depot = relationship("Party", foreign_keys=[depot_id], lazy="selectin")
    recipient = relationship("Party", foreign_keys=[recipient_id], lazy="selectin")
    owner = relationship("Party", foreign_keys=[owner_id], lazy="selectin")
    details = relationship(
        "ReleaseDetail",
        back_populates="release",
        cascade="all, delete-orphan",
        order_by="ReleaseDetail.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class ReleaseDetail(Base):
    """Groups similar units on a release."""
    __tablename__ = "release_details"

    id: Mapped[str] = uuid_pk()
    release_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("releases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    contract: Mapped[str] = mapped_column(String(16), nullable=False)
    equipment: Mapped[str] = mapped_column(String(10), nullable=False)
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    upgrade_type: Mapped[str | None] = mapped_column(String(2))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    # ── Reefer handling ──────────────────────────────────────
    pre_trip_inspection_required: Mapped[bool | None] = mapped_column(Boolean)
    desired_temperature: Mapped[int | None] = mapped_column(Integer)
    ventilation: Mapped[str | None] = mapped_column(String(10))

    # ── Relationships ────────────────────────────────────────
    release = relationship("Release", back_populates="details")
    customer = relationship("Party", lazy="selectin")
    units = relationship(
        "ReleaseUnit",
        cascade="all, delete-orphan",
        order_by="ReleaseUnit.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )
    criteria = relationship(
        "ReleaseDetailCriteria",
        cascade="all, delete-orphan",
        order_by="ReleaseDetailCriteria.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class ReleaseUnit(Base):
    """A specific container tied to a release detail."""
    __tablename__ = "release_units"

    id: Mapped[str] = uuid_pk()
    detail_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("release_details.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    unit_number: Mapped[str] = mapped_column(String(11), nullable=False, index=True)
    status: Mapped[str | None] = mapped_column(String(20))
    manufacture_date: Mapped[date | None] = mapped_column(Date)
    comments: Mapped[list | None] = mapped_column(JSON)


class ReleaseDetailCriteria(Base):
    """Extra restriction on which units qualify, e.g. MANUFACTURE_YEAR <= 2003."""
    __tablename__ = "release_detail_criteria"

    id: Mapped[str] = uuid_pk()
    detail_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("release_details.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    attribute: Mapped[str] = mapped_column(String(30), nullable=False)
    operator: Mapped[str] = mapped_column(String(2), nullable=False)
    value: Mapped[str] = mapped_column(String(50), nullable=False)
