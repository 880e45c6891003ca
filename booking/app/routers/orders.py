from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.db.session import get_session
from booking.app.routers.deps import current_customer
from booking.app.routers.schemas import LinkPaymentIn, OrderCreateIn, OrderOut, OrderStatusIn
from booking.app.services import orders as order_service
from booking.app.services.orders import RequestedItem


router = APIRouter()


def _found(order):
    if order is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.post("/orders", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: OrderCreateIn,
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    return await order_service.create_order(
        session,
        customer_id=customer_id,
        items=[RequestedItem(**item.model_dump()) for item in payload.items],
        order_type=payload.order_type,
        payment_type=payload.payment_type,
        reservation_id=payload.reservation_id,
        table_id=payload.table_id,
        delivery_address=payload.delivery_address,
    )


@router.get("/admin/orders", response_model=list[OrderOut])
async def list_orders(session: AsyncSession = Depends(get_session)):
    return await order_service.list_orders(session)


@router.get("/customers/me/orders", response_model=list[OrderOut])
async def my_orders(
    customer_id: str = Depends(current_customer),
    session: AsyncSession = Depends(get_session),
):
    return await order_service.list_orders_for_customer(session, customer_id)


@router.get("/orders/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await order_service.get_order(session, order_id))


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
async def update_status(
    order_id: str,
    payload: OrderStatusIn,
    session: AsyncSession = Depends(get_session),
):
    return _found(await order_service.update_order_status(session, order_id=order_id, status=payload.status))


@router.post("/orders/{order_id}/payment", response_model=OrderOut)
async def link_payment(
    order_id: str,
    payload: LinkPaymentIn,
    session: AsyncSession = Depends(get_session),
):
    return _found(await order_service.link_payment(session, order_id=order_id, payment_id=payload.payment_id))


@router.delete("/admin/orders/{order_id}", response_model=OrderOut)
async def delete_order(order_id: str, session: AsyncSession = Depends(get_session)):
    return _found(await order_service.delete_order(session, order_id=order_id))
