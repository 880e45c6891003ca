from datetime import date, datetime

import pytest

from booking.app.core.errors import (
    CapacityExceeded,
    InvalidDuration,
    InvalidGuestCount,
    InvalidTimeFormat,
    InvalidTransition,
    SlotCrossesMidnight,
    SlotGuardUnavailable,
    SlotUnavailable,
    TableNotFound,
)
from booking.app.core import redis_client as redis_module
from booking.app.db.models import BookingStatus
from booking.app.services import reservations as svc
from booking.app.services.reservations import ReservationPatch
from booking.app.services.slot_guard import _slot_key


pytestmark = pytest.mark.asyncio

DAY = date(2025, 12, 15)


async def _create(session, table_id, time, duration=60, guests=2, customer_id="cust-1", day=DAY):
    return await svc.create_reservation(
        session,
        customer_id=customer_id,
        table_id=table_id,
        reservation_date=day,
        reservation_time=time,
        number_of_guests=guests,
        duration=duration,
    )


async def test_booking_scenario(session, redis, make_table):
    table = await make_table(capacity=4)

    first = await _create(session, table.id, "18:00", guests=4)
    assert first.booking_status == BookingStatus.PENDING
    assert first.reservation_date == datetime(2025, 12, 15)

    with pytest.raises(SlotUnavailable):
        await _create(session, table.id, "18:30")

    third = await _create(session, table.id, "19:00")
    assert third.booking_status == BookingStatus.PENDING

    confirmed = await svc.confirm_reservation(session, reservation_id=first.id)
    assert confirmed.booking_status == BookingStatus.CONFIRMED

    cancelled = await svc.cancel_by_admin(session, reservation_id=first.id)
    assert cancelled.booking_status == BookingStatus.CANCELLED

    with pytest.raises(InvalidTransition):
        await svc.confirm_reservation(session, reservation_id=first.id)


async def test_no_double_booking_then_cancellation_frees_slot(session, redis, make_table):
    table = await make_table(capacity=6)

    r1 = await _create(session, table.id, "19:00", duration=90)
    with pytest.raises(SlotUnavailable) as excinfo:
        await _create(session, table.id, "19:30", duration=60, customer_id="cust-2")
    assert excinfo.value.alternates[0] == "20:30"

    await _create(session, table.id, "21:00", duration=60, customer_id="cust-3")

    await svc.cancel_by_customer(session, reservation_id=r1.id, customer_id="cust-1")
    again = await _create(session, table.id, "19:00", duration=90, customer_id="cust-2")
    assert again.booking_status == BookingStatus.PENDING


@pytest.mark.parametrize("capacity, guests", [(1, 2), (2, 3), (4, 5), (4, 12)])
async def test_create_rejects_guests_over_capacity(session, redis, make_table, capacity, guests):
    table = await make_table(capacity=capacity)
    with pytest.raises(CapacityExceeded):
        await _create(session, table.id, "12:00", guests=guests)


@pytest.mark.parametrize("capacity, guests", [(1, 1), (4, 3), (4, 4)])
async def test_create_accepts_guests_within_capacity(session, redis, make_table, capacity, guests):
    table = await make_table(capacity=capacity)
    reservation = await _create(session, table.id, "12:00", guests=guests)
    assert reservation.number_of_guests == guests


async def test_create_validates_input(session, redis, make_table):
    table = await make_table()
    with pytest.raises(InvalidDuration):
        await _create(session, table.id, "12:00", duration=29)
    with pytest.raises(InvalidDuration):
        await _create(session, table.id, "12:00", duration=481)
    with pytest.raises(InvalidGuestCount):
        await _create(session, table.id, "12:00", guests=0)
    with pytest.raises(InvalidTimeFormat):
        await _create(session, table.id, "25:00")
    with pytest.raises(TableNotFound):
        await _create(session, "missing-table", "12:00")


async def test_create_normalizes_time(session, redis, make_table):
    table = await make_table()
    reservation = await _create(session, table.id, "9:30")
    assert reservation.reservation_time == "09:30"


async def test_midnight_boundary(session, redis, make_table):
    table = await make_table()
    late = await _create(session, table.id, "23:00", duration=60)
    assert late.reservation_time == "23:00"

    with pytest.raises(SlotCrossesMidnight):
        await _create(session, table.id, "23:30", duration=120, day=date(2025, 12, 16))

    early = await _create(session, table.id, "00:00", duration=60, day=date(2025, 12, 16))
    assert early.reservation_date == datetime(2025, 12, 16)


async def test_create_fails_while_hold_is_taken(session, redis, make_table):
    table = await make_table()
    await redis.set(_slot_key(table.id, DAY), "someone-else")

    with pytest.raises(SlotUnavailable) as excinfo:
        await _create(session, table.id, "12:00")
    assert excinfo.value.message == "Slot temporarily held by another request"

    assert await svc.list_for_table_on_date(session, table_id=table.id, reservation_date=DAY) == []
    assert await redis.get(_slot_key(table.id, DAY)) == "someone-else"


async def test_hold_is_released_after_success_and_failure(session, redis, make_table):
    table = await make_table()
    await _create(session, table.id, "12:00")
    assert await redis.get(_slot_key(table.id, DAY)) is None

    with pytest.raises(SlotUnavailable):
        await _create(session, table.id, "12:30")
    assert await redis.get(_slot_key(table.id, DAY)) is None


async def test_create_requires_slot_guard(session, make_table):
    table = await make_table()
    assert redis_module.redis_client is None
    with pytest.raises(SlotGuardUnavailable):
        await _create(session, table.id, "12:00")


async def test_update_moves_reservation_within_own_slot(session, redis, make_table):
    table = await make_table()
    reservation = await _create(session, table.id, "19:00", duration=60)

    updated = await svc.update_reservation(
        session,
        reservation_id=reservation.id,
        customer_id="cust-1",
        patch=ReservationPatch(reservation_time="19:30"),
    )
    assert updated.reservation_time == "19:30"
    assert updated.duration == 60
    assert updated.number_of_guests == 2


async def test_update_rejects_conflicting_slot(session, redis, make_table):
    table = await make_table()
    await _create(session, table.id, "19:00", customer_id="cust-2")
    reservation = await _create(session, table.id, "17:00")

    with pytest.raises(SlotUnavailable):
        await svc.update_reservation(
            session,
            reservation_id=reservation.id,
            customer_id="cust-1",
            patch=ReservationPatch(reservation_time="18:30"),
        )

    unchanged = await svc.get_reservation(session, reservation.id)
    assert unchanged.reservation_time == "17:00"


async def test_update_to_another_table_checks_that_table(session, redis, make_table):
    table = await make_table(capacity=4)
    other = await make_table(capacity=2)
    await _create(session, other.id, "19:00", customer_id="cust-2")
    reservation = await _create(session, table.id, "19:00", guests=2)

    with pytest.raises(SlotUnavailable):
        await svc.update_reservation(
            session,
            reservation_id=reservation.id,
            customer_id="cust-1",
            patch=ReservationPatch(table_id=other.id),
        )

    moved = await svc.update_reservation(
        session,
        reservation_id=reservation.id,
        customer_id="cust-1",
        patch=ReservationPatch(table_id=other.id, reservation_time="20:00"),
    )
    assert moved.table_id == other.id
    assert moved.reservation_time == "20:00"


async def test_update_rechecks_capacity(session, redis, make_table):
    table = await make_table(capacity=4)
    small = await make_table(capacity=2)
    reservation = await _create(session, table.id, "19:00", guests=3)

    with pytest.raises(CapacityExceeded):
        await svc.update_reservation(
            session,
            reservation_id=reservation.id,
            customer_id="cust-1",
            patch=ReservationPatch(number_of_guests=5),
        )
    with pytest.raises(CapacityExceeded):
        await svc.update_reservation(
            session,
            reservation_id=reservation.id,
            customer_id="cust-1",
            patch=ReservationPatch(table_id=small.id),
        )

    grown = await svc.update_reservation(
        session,
        reservation_id=reservation.id,
        customer_id="cust-1",
        patch=ReservationPatch(number_of_guests=4),
    )
    assert grown.number_of_guests == 4


async def test_update_and_cancel_filter_by_owner(session, redis, make_table):
    table = await make_table()
    reservation = await _create(session, table.id, "19:00")

    assert await svc.update_reservation(
        session,
        reservation_id=reservation.id,
        customer_id="intruder",
        patch=ReservationPatch(number_of_guests=1),
    ) is None
    assert await svc.update_reservation(
        session,
        reservation_id="missing",
        customer_id="cust-1",
        patch=ReservationPatch(number_of_guests=1),
    ) is None
    assert await svc.cancel_by_customer(session, reservation_id=reservation.id, customer_id="intruder") is None

    still_pending = await svc.get_reservation(session, reservation.id)
    assert still_pending.booking_status == BookingStatus.PENDING
    assert still_pending.number_of_guests == 2


async def test_admin_operations_on_missing_reservation(session):
    assert await svc.cancel_by_admin(session, reservation_id="missing") is None
    assert await svc.confirm_reservation(session, reservation_id="missing") is None
    assert await svc.delete_reservation(session, reservation_id="missing") is None


async def test_delete_frees_slot(session, redis, make_table):
    table = await make_table()
    reservation = await _create(session, table.id, "19:00")

    deleted = await svc.delete_reservation(session, reservation_id=reservation.id)
    assert deleted.id == reservation.id
    assert await svc.get_reservation(session, reservation.id) is None

    await _create(session, table.id, "19:00", customer_id="cust-2")


async def test_list_for_table_on_date_returns_active_in_time_order(session, redis, make_table):
    table = await make_table()
    late = await _create(session, table.id, "20:00")
    early = await _create(session, table.id, "9:00")
    cancelled = await _create(session, table.id, "12:00")
    await svc.cancel_by_admin(session, reservation_id=cancelled.id)
    await _create(session, table.id, "12:00", day=date(2025, 12, 16))

    listed = await svc.list_for_table_on_date(session, table_id=table.id, reservation_date=DAY)
    assert [r.id for r in listed] == [early.id, late.id]


async def test_list_for_customer(session, redis, make_table):
    table = await make_table()
    older = await _create(session, table.id, "19:00", day=date(2025, 12, 14))
    newer = await _create(session, table.id, "19:00")
    await _create(session, table.id, "12:00", customer_id="cust-2")

    listed = await svc.list_for_customer(session, "cust-1")
    assert [r.id for r in listed] == [newer.id, older.id]
    assert len(await svc.list_reservations(session)) == 3
