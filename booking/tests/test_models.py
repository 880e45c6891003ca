from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from booking.app.core.timemath import start_of_day
from booking.app.db.models import DiningTable, Reservation


pytestmark = pytest.mark.asyncio


async def test_table_capacity_must_be_positive(session):
    session.add(DiningTable(capacity=0, location="Patio"))
    with pytest.raises(IntegrityError):
        await session.commit()


@pytest.mark.parametrize("duration, guests", [(20, 2), (500, 2), (60, 0)])
async def test_reservation_row_constraints(session, make_table, duration, guests):
    table = await make_table()
    session.add(
        Reservation(
            customer_id="cust-1",
            table_id=table.id,
            reservation_date=start_of_day(date(2025, 12, 15)),
            reservation_time="19:00",
            duration=duration,
            number_of_guests=guests,
        )
    )
    with pytest.raises(IntegrityError):
        await session.commit()
