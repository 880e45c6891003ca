from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.db.session import get_session
from booking.app.routers.deps import current_customer
from booking.app.routers.schemas import ReservationCreateIn, ReservationOut, ReservationUpdateIn
from booking.app.services import reservations as reservation_service
from booking.app.services.reservations import ReservationPatch


router = APIRouter()


def _found(reservation):
    if reservation is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return reservation


@router.post("/reservations", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreateIn,
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.create_reservation(
        session,
        customer_id=customer_id,
        table_id=payload.table_id,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        number_of_guests=payload.number_of_guests,
        duration=payload.duration,
        special_requests=payload.special_requests,
    )


@router.get("/reservations", response_model=list[ReservationOut])
async def list_reservations(session: AsyncSession = Depends(get_session)):
    return await reservation_service.list_reservations(session)


@router.get("/customers/me/reservations", response_model=list[ReservationOut])
async def my_reservations(
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.list_for_customer(session, customer_id)


@router.get("/reservations/{reservation_id}", response_model=ReservationOut)
async def get_reservation(reservation_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await reservation_service.get_reservation(session, reservation_id))


@router.patch("/reservations/{reservation_id}", response_model=ReservationOut)
async def update_reservation(
    reservation_id: str,
    payload: ReservationUpdateIn,
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    patch = ReservationPatch(**payload.model_dump())
    return _found(
        await reservation_service.update_reservation(
            session,
            reservation_id=reservation_id,
            customer_id=customer_id,
            patch=patch,
        )
    )


@router.post("/reservations/{reservation_id}/cancel", response_model=ReservationOut)
async def cancel_reservation(
    reservation_id: str,
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    return _found(
        await reservation_service.cancel_by_customer(
            session, reservation_id=reservation_id, customer_id=customer_id
        )
    )


@router.post("/admin/reservations/{reservation_id}/cancel", response_model=ReservationOut)
async def admin_cancel_reservation(reservation_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await reservation_service.cancel_by_admin(session, reservation_id=reservation_id))


@router.post("/admin/reservations/{reservation_id}/confirm", response_model=ReservationOut)
async def confirm_reservation(reservation_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await reservation_service.confirm_reservation(session, reservation_id=reservation_id))


@router.delete("/admin/reservations/{reservation_id}", response_model=ReservationOut)
async def delete_reservation(reservation_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await reservation_service.delete_reservation(session, reservation_id=reservation_id))


@router.get("/tables/{table_id}/reservations", response_model=list[ReservationOut])
async def table_reservations(
    table_id: str,
    day: date = Query(alias="date"),
    session: AsyncSession = Depends(get_session),
):
    return await reservation_service.list_for_table_on_date(
        session, table_id=table_id, reservation_date=day
    )
