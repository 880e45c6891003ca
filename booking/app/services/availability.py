from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.core.timemath import (
    MINUTES_PER_DAY,
    day_bounds,
    ensure_same_day,
    minutes_to_time,
    overlaps,
    time_to_minutes,
)
from booking.app.db.models import ACTIVE_STATUSES, DiningTable, Reservation

ALT_STEP_MINUTES = 15
MAX_ALT_SEARCH = 32
ALT_LOOKAHEAD = 4


async def _active_reservations(
    session: AsyncSession,
    day: date | datetime,
    *,
    table_id: str | None = None,
    exclude_reservation_id: str | None = None,
) -> list[Reservation]:
    start, end = day_bounds(day)
    query = select(Reservation).where(
        Reservation.reservation_date >= start,
        Reservation.reservation_date <= end,
        Reservation.booking_status.in_(ACTIVE_STATUSES),
    )
    if table_id is not None:
        query = query.where(Reservation.table_id == table_id)
    if exclude_reservation_id is not None:
        query = query.where(Reservation.id != exclude_reservation_id)
    result = await session.execute(query)
    return list(result.scalars().all())


def _conflicts(reservation: Reservation, requested_start: int, requested_end: int) -> bool:
    existing_start = time_to_minutes(reservation.reservation_time)
    existing_end = existing_start + reservation.duration
    return overlaps(requested_start, requested_end, existing_start, existing_end)


async def is_available(
    session: AsyncSession,
    *,
    table_id: str,
    reservation_date: date | datetime,
    reservation_time: str,
    duration: int,
    exclude_reservation_id: str | None = None,
) -> bool:
    """Return True when no active reservation on the table overlaps the slot."""
    ensure_same_day(reservation_time, duration)
    requested_start = time_to_minutes(reservation_time)
    requested_end = requested_start + duration

    existing = await _active_reservations(
        session,
        reservation_date,
        table_id=table_id,
        exclude_reservation_id=exclude_reservation_id,
    )
    for reservation in existing:
        if _conflicts(reservation, requested_start, requested_end):
            return False
    return True


async def list_available_tables(
    session: AsyncSession,
    *,
    reservation_date: date | datetime,
    reservation_time: str,
    duration: int = 60,
    min_capacity: int | None = None,
) -> list[DiningTable]:
    """Return every table with no active reservation overlapping the slot."""
    ensure_same_day(reservation_time, duration)
    requested_start = time_to_minutes(reservation_time)
    requested_end = requested_start + duration

    conflicting_ids = {
        reservation.table_id
        for reservation in await _active_reservations(session, reservation_date)
        if _conflicts(reservation, requested_start, requested_end)
    }

    query = select(DiningTable).order_by(DiningTable.capacity, DiningTable.id)
    if conflicting_ids:
        query = query.where(DiningTable.id.not_in(conflicting_ids))
    if min_capacity is not None:
        query = query.where(DiningTable.capacity >= min_capacity)
    result = await session.execute(query)
    return list(result.scalars().all())


async def suggest_alternate_times(
    session: AsyncSession,
    *,
    table_id: str,
    reservation_date: date | datetime,
    reservation_time: str,
    duration: int,
    exclude_reservation_id: str | None = None,
) -> list[str]:
    """Walk forward from the requested start and collect free start times."""
    existing = await _active_reservations(
        session,
        reservation_date,
        table_id=table_id,
        exclude_reservation_id=exclude_reservation_id,
    )

    alts: list[str] = []
    cursor = time_to_minutes(reservation_time)
    checked = 0
    while len(alts) < ALT_LOOKAHEAD and checked < MAX_ALT_SEARCH:
        cursor += ALT_STEP_MINUTES
        checked += 1
        if cursor + duration > MINUTES_PER_DAY:
            break
        if not any(_conflicts(r, cursor, cursor + duration) for r in existing):
            alts.append(minutes_to_time(cursor))
    return alts
