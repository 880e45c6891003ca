import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from uuid import uuid4

from booking.app.core import redis_client as redis_module
from booking.app.core.config import settings
from booking.app.core.errors import SlotGuardUnavailable, SlotUnavailable
from booking.app.core.timemath import start_of_day

logger = logging.getLogger(__name__)


def _slot_key(table_id: str, day: date | datetime) -> str:
    return f"hold:{table_id}:{start_of_day(day).strftime('%Y%m%d')}"


@asynccontextmanager
async def table_day_hold(table_id: str, day: date | datetime) -> AsyncIterator[str]:
    """Serialise reservation writes for one table on one day.

    The availability read and the reservation write both happen while the
    hold is owned, so two writers can never both observe a free slot. A
    second writer fails immediately instead of waiting.
    """
    if redis_module.redis_client is None:
        raise SlotGuardUnavailable()

    hold_key = _slot_key(table_id, day)
    token = str(uuid4())
    acquired = await redis_module.redis_client.set(
        hold_key,
        token,
        nx=True,
        px=settings.SLOT_HOLD_TTL_MS,
    )
    if not acquired:
        logger.warning("Hold %s already taken", hold_key)
        raise SlotUnavailable("Slot temporarily held by another request")

    try:
        yield hold_key
    finally:
        # Only the owner releases; an expired hold may belong to someone else now.
        if await redis_module.redis_client.get(hold_key) == token:
            await redis_module.redis_client.delete(hold_key)
