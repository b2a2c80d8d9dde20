"""Redelivery: authorization for a customer to turn containers in.

Aggregate:  Redelivery → RedeliveryDetail → (RedeliveryUnit → MachineryInfo,
            InsuranceCoverage)

Structurally parallel to Release. A detail may carry its own insurance
coverage; units carry the inspection criteria used for damage estimates.
"""

from datetime import date, datetime

from sqlalchemy import Date, ForeignKey, Integer, JSON, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from depotlifecycle.database import Base
from depotlifecycle.models.types import UTCDateTime, utcnow, uuid_pk


class Redelivery(Base):
    __tablename__ = "redeliveries"

    id: Mapped[str] = uuid_pk()
    redelivery_number: Mapped[str] = mapped_column(
        String(16), unique=True, nullable=False, index=True
    )
    status: Mapped[str | None] = mapped_column(String(20), index=True)
    approval_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expiration_date: Mapped[datetime | None] = mapped_column(UTCDateTime)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)
    estimate_recipient_emails: Mapped[list | None] = mapped_column(JSON)

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
        "RedeliveryDetail",
        back_populates="redelivery",
        cascade="all, delete-orphan",
        order_by="RedeliveryDetail.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class RedeliveryDetail(Base):
    __tablename__ = "redelivery_details"

    id: Mapped[str] = uuid_pk()
    redelivery_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("redeliveries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id"), nullable=False
    )
    contract: Mapped[str] = mapped_column(String(16), nullable=False)
    equipment: Mapped[str] = mapped_column(String(10), nullable=False)
    grade: Mapped[str | None] = mapped_column(String(10))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[list | None] = mapped_column(JSON)

    insurance_coverage_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("insurance_coverages.id", ondelete="SET NULL")
    )

    # ── Relationships ────────────────────────────────────────
    redelivery = relationship("Redelivery", back_populates="details")
    customer = relationship("Party", lazy="selectin")
    insurance_coverage = relationship(
        "InsuranceCoverage",
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="selectin",
    )
    units = relationship(
        "RedeliveryUnit",
        cascade="all, delete-orphan",
        order_by="RedeliveryUnit.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class RedeliveryUnit(Base):
    __tablename__ = "redelivery_units"

    id: Mapped[str] = uuid_pk()
    detail_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("redelivery_details.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    unit_number: Mapped[str] = mapped_column(String(11), nullable=False, index=True)
    manufacture_date: Mapped[date | None] = mapped_column(Date)
    last_on_hire_date: Mapped[date | None] = mapped_column(Date)
    inspection_criteria: Mapped[str | None] = mapped_column(String(10))
    status: Mapped[str | None] = mapped_column(String(20))
    cargo_number: Mapped[str | None] = mapped_column(String(20))
    technical_bulletins: Mapped[list | None] = mapped_column(JSON)
    comments: Mapped[list | None] = mapped_column(JSON)

    last_on_hire_location_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("parties.id")
    )
    billing_party_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("parties.id")
    )
    machinery_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("machinery_info.id", ondelete="SET NULL")
    )

    # ── Relationships ────────────────────────────────────────
    last_on_hire_location = relationship(
        "Party", foreign_keys=[last_on_hire_location_id], lazy="selectin"
    )
    billing_party = relationship(
        "Party", foreign_keys=[billing_party_id], lazy="selectin"
    )
    machinery = relationship(
        "MachineryInfo",
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="selectin",
    )


class MachineryInfo(Base):
    """Cooling machinery attached to a reefer container."""
    __tablename__ = "machinery_info"

    id: Mapped[str] = uuid_pk()
    manufacturer: Mapped[str | None] = mapped_column(String(50))
    model_name: Mapped[str | None] = mapped_column(String(50))
    model_number: Mapped[str | None] = mapped_column(String(50))
