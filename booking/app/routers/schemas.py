from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from booking.app.core.timemath import MINUTES_PER_DAY, time_to_minutes
from booking.app.db.models import BookingStatus, OrderStatus, OrderType, PaymentType

HHMM_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


def _check_same_day(reservation_time: str, duration: int) -> None:
    if time_to_minutes(reservation_time) + duration > MINUTES_PER_DAY:
        raise ValueError("slot must end by midnight")


# ---------- Tables ----------

class TableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    capacity: int
    location: str
    status: str


# ---------- Reservations ----------

class ReservationCreateIn(BaseModel):
    table_id: str
    reservation_date: date
    reservation_time: str = Field(pattern=HHMM_PATTERN)
    duration: int = Field(default=60, ge=30, le=480)
    number_of_guests: int = Field(ge=1)
    special_requests: str | None = Field(default=None, max_length=1024)


class ReservationUpdateIn(BaseModel):
    table_id: str | None = None
    reservation_date: date | None = None
    reservation_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    duration: int | None = Field(default=None, ge=30, le=480)
    number_of_guests: int | None = Field(default=None, ge=1)


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    table_id: str
    reservation_date: datetime
    reservation_time: str
    duration: int
    number_of_guests: int
    booking_status: BookingStatus
    special_requests: str | None = None
    assigned_staff_id: str | None = None
    order_id: str | None = None


# ---------- Availability ----------

class AvailabilityCheckIn(BaseModel):
    table_id: str
    reservation_date: date
    reservation_time: str = Field(pattern=HHMM_PATTERN)
    duration: int = Field(default=60, ge=30, le=480)
    exclude_reservation_id: str | None = None

    @model_validator(mode="after")
    def _ends_same_day(self):
        _check_same_day(self.reservation_time, self.duration)
        return self


class AvailabilityCheckOut(BaseModel):
    table_id: str
    reservation_date: date
    reservation_time: str
    duration: int
    available: bool


class AvailableTablesIn(BaseModel):
    reservation_date: date
    reservation_time: str = Field(pattern=HHMM_PATTERN)
    duration: int = Field(default=60, ge=30, le=480)
    min_capacity: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _ends_same_day(self):
        _check_same_day(self.reservation_time, self.duration)
        return self


# ---------- Orders ----------

class OrderItemIn(BaseModel):
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    special_instructions: str | None = Field(default=None, max_length=512)


class OrderCreateIn(BaseModel):
    items: list[OrderItemIn] = Field(min_length=1)
    order_type: OrderType = OrderType.TAKEAWAY
    payment_type: PaymentType
    reservation_id: str | None = None
    table_id: str | None = None
    delivery_address: str | None = Field(default=None, max_length=512)

    @model_validator(mode="after")
    def _delivery_needs_address(self):
        if self.order_type == OrderType.DELIVERY and not self.delivery_address:
            raise ValueError("delivery_address is required for Delivery orders")
        return self


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    menu_item_id: str
    name: str
    quantity: int
    price: Decimal
    sub_total: Decimal
    special_instructions: str | None = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    staff_id: str | None = None
    order_type: OrderType
    reservation_id: str | None = None
    table_id: str | None = None
    items: list[OrderItemOut]
    total_amount: Decimal
    payment_type: PaymentType | None = None
    payment_id: str | None = None
    delivery_address: str | None = None
    status: OrderStatus
    created_at: datetime


class OrderStatusIn(BaseModel):
    status: OrderStatus


class LinkPaymentIn(BaseModel):
    payment_id: str = Field(min_length=1)
