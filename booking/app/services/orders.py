from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking.app.core.errors import (
    EmptyOrder,
    InvalidQuantity,
    MenuItemNotFound,
    MenuItemUnavailable,
    MissingDeliveryAddress,
    MissingDineInTarget,
    ReservationNotFound,
    TableNotFound,
)
from booking.app.db.models import (
    DiningTable,
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentType,
    Reservation,
)
from booking.app.services.reservations import link_order

logger = logging.getLogger(__name__)


@dataclass
class RequestedItem:
    menu_item_id: str
    quantity: int = 1
    special_instructions: str | None = None


async def _price_items(session: AsyncSession, items: Sequence[RequestedItem]) -> tuple[list[OrderItem], Decimal]:
    """Snapshot current catalog prices into order lines and total them."""
    lines: list[OrderItem] = []
    total = Decimal("0")
    for position, item in enumerate(items):
        if item.quantity < 1:
            raise InvalidQuantity()
        menu_item = await session.get(MenuItem, item.menu_item_id)
        if menu_item is None:
            raise MenuItemNotFound(f"Menu item {item.menu_item_id} not found")
        if not menu_item.availability:
            raise MenuItemUnavailable(menu_item.name)

        price = Decimal(menu_item.price)
        sub_total = price * item.quantity
        total += sub_total
        lines.append(
            OrderItem(
                position=position,
                menu_item_id=menu_item.id,
                name=menu_item.name,
                quantity=item.quantity,
                price=price,
                sub_total=sub_total,
                special_instructions=item.special_instructions,
            )
        )
    return lines, total


async def create_order(
    session: AsyncSession,
    *,
    customer_id: str,
    items: Sequence[RequestedItem],
    order_type: OrderType = OrderType.TAKEAWAY,
    payment_type: PaymentType | None = None,
    reservation_id: str | None = None,
    table_id: str | None = None,
    delivery_address: str | None = None,
    staff_id: str | None = None,
    payment_id: str | None = None,
) -> Order:
    """Build and persist a Pending order from catalog items.

    Dine-in orders are attached to a table, taken from the reservation when
    one is given. Ownership of the table or reservation and the timing of
    the reservation window are not checked here.
    """
    if order_type == OrderType.DINE_IN and not (reservation_id or table_id):
        raise MissingDineInTarget()
    if order_type == OrderType.DELIVERY and not delivery_address:
        raise MissingDeliveryAddress()
    if not items:
        raise EmptyOrder()

    lines, total = await _price_items(session, items)

    reservation: Reservation | None = None
    resolved_table_id: str | None = None
    if order_type == OrderType.DINE_IN:
        if reservation_id:
            reservation = await session.get(Reservation, reservation_id)
            if reservation is None:
                raise ReservationNotFound()
            resolved_table_id = reservation.table_id
        else:
            table = await session.get(DiningTable, table_id)
            if table is None:
                raise TableNotFound()
            resolved_table_id = table.id

    order = Order(
        customer_id=customer_id,
        staff_id=staff_id,
        order_type=order_type,
        reservation_id=reservation.id if reservation is not None else None,
        table_id=resolved_table_id,
        items=lines,
        total_amount=total,
        payment_type=payment_type,
        payment_id=payment_id,
        delivery_address=delivery_address if order_type == OrderType.DELIVERY else None,
        status=OrderStatus.PENDING,
    )
    session.add(order)
    await session.flush()
    if reservation is not None:
        link_order(reservation, order.id)
    await session.commit()

    logger.info("Order %s created (%s, %d items, total %s)", order.id, order_type.value, len(lines), total)
    return order


async def get_order(session: AsyncSession, order_id: str) -> Order | None:
    return await session.get(Order, order_id)


async def list_orders(session: AsyncSession) -> list[Order]:
    result = await session.execute(select(Order).order_by(Order.created_at.desc()))
    return list(result.scalars().all())


async def list_orders_for_customer(session: AsyncSession, customer_id: str) -> list[Order]:
    result = await session.execute(
        select(Order).where(Order.customer_id == customer_id).order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


async def update_order_status(
    session: AsyncSession, *, order_id: str, status: OrderStatus
) -> Order | None:
    order = await session.get(Order, order_id)
    if order is None:
        return None
    order.status = status
    await session.commit()
    logger.info("Order %s is now %s", order.id, status.value)
    return order


async def link_payment(session: AsyncSession, *, order_id: str, payment_id: str) -> Order | None:
    order = await session.get(Order, order_id)
    if order is None:
        return None
    order.payment_id = payment_id
    await session.commit()
    return order


async def delete_order(session: AsyncSession, *, order_id: str) -> Order | None:
    order = await session.get(Order, order_id)
    if order is None:
        return None
    if order.reservation_id is not None:
        reservation = await session.get(Reservation, order.reservation_id)
        if reservation is not None and reservation.order_id == order.id:
            link_order(reservation, None)
    await session.delete(order)
    await session.commit()
    logger.info("Order %s deleted", order_id)
    return order
