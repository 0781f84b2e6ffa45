"""
Order table - single source of truth for saddle orders
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.behaviors import timestampable, blameable, soft_deletable, versionable
from app.core.database import Base
from app.models.mixins import TimestampMixin, BlameMixin, SoftDeleteMixin, VersionMixin


@timestampable()
@blameable()
@soft_deletable()
@versionable()
class Order(TimestampMixin, BlameMixin, SoftDeleteMixin, VersionMixin, Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(100), nullable=False, unique=True, index=True)

    # Relations
    customer_id = Column(Integer, ForeignKey("customers.id"), index=True)
    customer_name = Column(String(255))
    fitter_id = Column(Integer, ForeignKey("fitters.id"), index=True)
    factory_id = Column(Integer, ForeignKey("factories.id"), index=True)
    saddle_id = Column(Integer)
    leather_id = Column(Integer, ForeignKey("leather_types.id"))

    # Workflow
    status = Column(String(30), nullable=False, server_default="pending", index=True)
    priority = Column(String(20), nullable=False, server_default="normal")
    is_urgent = Column(Boolean, nullable=False, server_default="false", index=True)

    # Saddle data
    saddle_specifications = Column(JSONB)
    measurements = Column(JSONB)
    seat_sizes = Column(JSONB)
    special_instructions = Column(Text)

    # Amounts
    total_amount = Column(DECIMAL(12, 2), nullable=False, server_default="0")
    deposit_paid = Column(DECIMAL(12, 2), nullable=False, server_default="0")
    balance_owing = Column(DECIMAL(12, 2), nullable=False, server_default="0")

    # Dates
    estimated_delivery_date = Column(DateTime(timezone=True), index=True)
    actual_delivery_date = Column(DateTime(timezone=True))

    # Flags from the order form
    fitter_stock = Column(Boolean, nullable=False, server_default="false")
    custom_order = Column(Boolean, nullable=False, server_default="false")
    repair = Column(Boolean, nullable=False, server_default="false")
    demo = Column(Boolean, nullable=False, server_default="false")
    sponsored = Column(Boolean, nullable=False, server_default="false")
    rushed = Column(Boolean, nullable=False, server_default="false")

    # Legacy free-text fields the seat size backfill reads from
    special_notes = Column(Text)
    option_items = Column(JSONB)

    customer = relationship("Customer", back_populates="orders")
    fitter = relationship("Fitter", back_populates="orders")
    factory = relationship("Factory", back_populates="orders")
    comments = relationship("Comment", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_orders_created_at", "created_at"),
        Index("ix_orders_status_created_at", "status", "created_at"),
        Index("ix_orders_seat_sizes", "seat_sizes", postgresql_using="gin"),
    )
