from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid4())


def _enum(enum_cls: type[enum.Enum], length: int = 16) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
    )


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class OrderType(str, enum.Enum):
    TAKEAWAY = "Takeaway"
    DINE_IN = "DineIn"
    DELIVERY = "Delivery"


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    SERVED = "Served"
    COMPLETED = "Completed"


class PaymentType(str, enum.Enum):
    CASH = "Cash"
    CARD = "Card"
    ONLINE = "Online"


class Base(DeclarativeBase):
    pass


class DiningTable(Base):
    __tablename__ = "dining_tables"
    __table_args__ = (CheckConstraint("capacity > 0", name="ck_dining_tables_capacity_positive"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    # Informational only; availability is always computed from reservations.
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    availability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_table_day_status", "table_id", "reservation_date", "booking_status"),
        CheckConstraint("duration BETWEEN 30 AND 480", name="ck_reservations_duration_range"),
        CheckConstraint("number_of_guests > 0", name="ck_reservations_guests_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    table_id: Mapped[str] = mapped_column(String(36), ForeignKey("dining_tables.id"), nullable=False)
    reservation_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    reservation_time: Mapped[str] = mapped_column(String(5), nullable=False)  # zero-padded HH:MM
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    booking_status: Mapped[BookingStatus] = mapped_column(
        _enum(BookingStatus), nullable=False, default=BookingStatus.PENDING
    )
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_staff_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    order_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    staff_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    order_type: Mapped[OrderType] = mapped_column(_enum(OrderType), nullable=False)
    reservation_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True
    )
    table_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("dining_tables.id"), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_type: Mapped[PaymentType | None] = mapped_column(_enum(PaymentType), nullable=True)
    payment_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    delivery_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[OrderStatus] = mapped_column(_enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )

    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )


class OrderItem(Base):
    """Line of an order; price is a snapshot of the catalog at order time."""

    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    menu_item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sub_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="items")
