from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from booking.app.core.config import settings
from booking.app.core.errors import BookingError, SlotUnavailable
from booking.app.core.logging_config import configure_logging
from booking.app.core.redis_client import close_redis, init_redis
import booking.app.routers.availability as availability
import booking.app.routers.health as health
import booking.app.routers.orders as orders
import booking.app.routers.reservations as reservations


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    await init_redis()
    try:
        yield
    finally:
        await close_redis()


app = FastAPI(
    title="Restaurant Booking API",
    lifespan=lifespan,
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    detail: dict | str = exc.message
    if isinstance(exc, SlotUnavailable):
        detail = {"message": exc.message, "alternates": exc.alternates}
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(availability.router, prefix=settings.API_PREFIX)
app.include_router(reservations.router, prefix=settings.API_PREFIX)
app.include_router(orders.router, prefix=settings.API_PREFIX)
