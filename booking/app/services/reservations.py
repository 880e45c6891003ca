from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.core.errors import (
    CapacityExceeded,
    InvalidDuration,
    InvalidGuestCount,
    InvalidTransition,
    SlotUnavailable,
    TableNotFound,
)
from booking.app.core.timemath import day_bounds, ensure_same_day, normalize_time, start_of_day
from booking.app.db.models import ACTIVE_STATUSES, BookingStatus, DiningTable, Reservation
from booking.app.services.availability import is_available, suggest_alternate_times
from booking.app.services.slot_guard import table_day_hold

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 60
MIN_DURATION = 30
MAX_DURATION = 480


@dataclass
class ReservationPatch:
    """Fields a customer may change on their own reservation; None means untouched."""

    table_id: str | None = None
    reservation_date: date | datetime | None = None
    reservation_time: str | None = None
    duration: int | None = None
    number_of_guests: int | None = None


def _validate_duration(duration: int) -> None:
    if not MIN_DURATION <= duration <= MAX_DURATION:
        raise InvalidDuration()


def _validate_guests(number_of_guests: int) -> None:
    if number_of_guests < 1:
        raise InvalidGuestCount()


async def _table_with_capacity(session: AsyncSession, table_id: str, guests: int) -> DiningTable:
    table = await session.get(DiningTable, table_id)
    if table is None:
        raise TableNotFound()
    if guests > table.capacity:
        raise CapacityExceeded(table.capacity, guests)
    return table


async def _slot_unavailable(
    session: AsyncSession,
    *,
    table_id: str,
    reservation_date: datetime,
    reservation_time: str,
    duration: int,
    exclude_reservation_id: str | None = None,
) -> SlotUnavailable:
    alternates = await suggest_alternate_times(
        session,
        table_id=table_id,
        reservation_date=reservation_date,
        reservation_time=reservation_time,
        duration=duration,
        exclude_reservation_id=exclude_reservation_id,
    )
    return SlotUnavailable(
        "Table is not available for the requested time slot. Please choose a different time.",
        alternates=alternates,
    )


async def _owned_reservation(
    session: AsyncSession, reservation_id: str, customer_id: str
) -> Reservation | None:
    # A wrong owner and a missing id are indistinguishable to the caller.
    result = await session.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.customer_id == customer_id,
        )
    )
    return result.scalar_one_or_none()


async def create_reservation(
    session: AsyncSession,
    *,
    customer_id: str,
    table_id: str,
    reservation_date: date | datetime,
    reservation_time: str,
    number_of_guests: int,
    duration: int = DEFAULT_DURATION,
    special_requests: str | None = None,
    assigned_staff_id: str | None = None,
) -> Reservation:
    """Book a table slot for a customer; the new reservation starts as Pending."""
    _validate_duration(duration)
    _validate_guests(number_of_guests)
    reservation_time = normalize_time(reservation_time)
    ensure_same_day(reservation_time, duration)
    day = start_of_day(reservation_date)

    await _table_with_capacity(session, table_id, number_of_guests)

    async with table_day_hold(table_id, day):
        available = await is_available(
            session,
            table_id=table_id,
            reservation_date=day,
            reservation_time=reservation_time,
            duration=duration,
        )
        if not available:
            logger.warning("Slot %s %s+%d on table %s is taken", day.date(), reservation_time, duration, table_id)
            raise await _slot_unavailable(
                session,
                table_id=table_id,
                reservation_date=day,
                reservation_time=reservation_time,
                duration=duration,
            )

        reservation = Reservation(
            customer_id=customer_id,
            table_id=table_id,
            reservation_date=day,
            reservation_time=reservation_time,
            duration=duration,
            number_of_guests=number_of_guests,
            booking_status=BookingStatus.PENDING,
            special_requests=special_requests,
            assigned_staff_id=assigned_staff_id,
        )
        session.add(reservation)
        await session.commit()

    logger.info("Reservation %s created for table %s on %s at %s", reservation.id, table_id, day.date(), reservation_time)
    return reservation


async def update_reservation(
    session: AsyncSession,
    *,
    reservation_id: str,
    customer_id: str,
    patch: ReservationPatch,
) -> Reservation | None:
    """Apply a partial change to a customer's own reservation.

    Returns None when the reservation does not exist or belongs to someone
    else. Capacity is always re-checked; availability only when the slot
    itself moves, and the reservation never conflicts with its own slot.
    """
    reservation = await _owned_reservation(session, reservation_id, customer_id)
    if reservation is None:
        return None

    if patch.duration is not None:
        _validate_duration(patch.duration)
    if patch.number_of_guests is not None:
        _validate_guests(patch.number_of_guests)
    new_time = normalize_time(patch.reservation_time) if patch.reservation_time is not None else None
    new_day = start_of_day(patch.reservation_date) if patch.reservation_date is not None else None

    table_id = patch.table_id if patch.table_id is not None else reservation.table_id
    guests = patch.number_of_guests if patch.number_of_guests is not None else reservation.number_of_guests
    day = new_day if new_day is not None else reservation.reservation_date
    reservation_time = new_time if new_time is not None else reservation.reservation_time
    duration = patch.duration if patch.duration is not None else reservation.duration

    await _table_with_capacity(session, table_id, guests)

    slot_changed = (
        table_id != reservation.table_id
        or day != reservation.reservation_date
        or reservation_time != reservation.reservation_time
        or duration != reservation.duration
    )

    def apply() -> None:
        reservation.table_id = table_id
        reservation.reservation_date = day
        reservation.reservation_time = reservation_time
        reservation.duration = duration
        reservation.number_of_guests = guests

    if not slot_changed:
        apply()
        await session.commit()
        logger.info("Reservation %s updated", reservation.id)
        return reservation

    ensure_same_day(reservation_time, duration)
    async with table_day_hold(table_id, day):
        available = await is_available(
            session,
            table_id=table_id,
            reservation_date=day,
            reservation_time=reservation_time,
            duration=duration,
            exclude_reservation_id=reservation.id,
        )
        if not available:
            logger.warning("Reservation %s cannot move to %s %s+%d", reservation.id, day.date(), reservation_time, duration)
            raise await _slot_unavailable(
                session,
                table_id=table_id,
                reservation_date=day,
                reservation_time=reservation_time,
                duration=duration,
                exclude_reservation_id=reservation.id,
            )
        apply()
        await session.commit()

    logger.info("Reservation %s moved to table %s on %s at %s", reservation.id, table_id, day.date(), reservation_time)
    return reservation


async def _set_status(session: AsyncSession, reservation: Reservation, status: BookingStatus) -> Reservation:
    reservation.booking_status = status
    await session.commit()
    logger.info("Reservation %s is now %s", reservation.id, status.value)
    return reservation


async def cancel_by_customer(
    session: AsyncSession, *, reservation_id: str, customer_id: str
) -> Reservation | None:
    reservation = await _owned_reservation(session, reservation_id, customer_id)
    if reservation is None:
        return None
    return await _set_status(session, reservation, BookingStatus.CANCELLED)


async def cancel_by_admin(session: AsyncSession, *, reservation_id: str) -> Reservation | None:
    reservation = await session.get(Reservation, reservation_id)
    if reservation is None:
        return None
    return await _set_status(session, reservation, BookingStatus.CANCELLED)


async def confirm_reservation(session: AsyncSession, *, reservation_id: str) -> Reservation | None:
    reservation = await session.get(Reservation, reservation_id)
    if reservation is None:
        return None
    if reservation.booking_status == BookingStatus.CANCELLED:
        raise InvalidTransition()
    return await _set_status(session, reservation, BookingStatus.CONFIRMED)


async def delete_reservation(session: AsyncSession, *, reservation_id: str) -> Reservation | None:
    """Hard delete; callers restrict this to admins."""
    reservation = await session.get(Reservation, reservation_id)
    if reservation is None:
        return None
    await session.delete(reservation)
    await session.commit()
    logger.info("Reservation %s deleted", reservation_id)
    return reservation


def link_order(reservation: Reservation, order_id: str | None) -> None:
    """Record (or clear, with None) the order placed against a reservation; the caller commits."""
    reservation.order_id = order_id


async def get_reservation(session: AsyncSession, reservation_id: str) -> Reservation | None:
    return await session.get(Reservation, reservation_id)


async def list_reservations(session: AsyncSession) -> list[Reservation]:
    result = await session.execute(
        select(Reservation).order_by(Reservation.reservation_date, Reservation.reservation_time)
    )
    return list(result.scalars().all())


async def list_for_customer(session: AsyncSession, customer_id: str) -> list[Reservation]:
    result = await session.execute(
        select(Reservation)
        .where(Reservation.customer_id == customer_id)
        .order_by(Reservation.reservation_date.desc(), Reservation.reservation_time.desc())
    )
    return list(result.scalars().all())


async def list_for_table_on_date(
    session: AsyncSession, *, table_id: str, reservation_date: date | datetime
) -> list[Reservation]:
    """Active reservations of a table on one day, earliest first."""
    start, end = day_bounds(reservation_date)
    result = await session.execute(
        select(Reservation)
        .where(
            Reservation.table_id == table_id,
            Reservation.reservation_date >= start,
            Reservation.reservation_date <= end,
            Reservation.booking_status.in_(ACTIVE_STATUSES),
        )
        .order_by(Reservation.reservation_time)
    )
    return list(result.scalars().all())
