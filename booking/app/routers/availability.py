from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.db.session import get_session
from booking.app.routers.schemas import (
    AvailabilityCheckIn,
    AvailabilityCheckOut,
    AvailableTablesIn,
    TableOut,
)
from booking.app.services.availability import is_available, list_available_tables

router = APIRouter()


@router.post("/availability/check", response_model=AvailabilityCheckOut)
async def check_availability(
    payload: AvailabilityCheckIn,
    session: AsyncSession = Depends(get_session),
) -> AvailabilityCheckOut:
    available = await is_available(
        session,
        table_id=payload.table_id,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        duration=payload.duration,
        exclude_reservation_id=payload.exclude_reservation_id,
    )
    return AvailabilityCheckOut(
        table_id=payload.table_id,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        duration=payload.duration,
        available=available,
    )


@router.post("/availability/tables", response_model=list[TableOut])
async def available_tables(
    payload: AvailableTablesIn,
    session: AsyncSession = Depends(get_session),
):
    return await list_available_tables(
        session,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        duration=payload.duration,
        min_capacity=payload.min_capacity,
    )
