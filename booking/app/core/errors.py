"""Typed failures raised by the booking core.

Every error belongs to one of four kinds which the HTTP layer maps to a
status code: not found (404), validation (400), conflict (409) and the slot
guard being unreachable (503). Errors are raised before any write happens.
"""

from fastapi import status


class BookingError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Booking request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailed(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Request conflicts with current state"


class SlotGuardUnavailable(BookingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Redis unavailable"


# Not found

class TableNotFound(NotFoundError):
    default_message = "Table not found"


class ReservationNotFound(NotFoundError):
    default_message = "Reservation not found"


class MenuItemNotFound(NotFoundError):
    default_message = "Menu item not found"


class OrderNotFound(NotFoundError):
    default_message = "Order not found"


# Validation

class InvalidTimeFormat(ValidationFailed):
    default_message = "Time must be in HH:MM format"


class InvalidDuration(ValidationFailed):
    default_message = "Duration must be between 30 and 480 minutes"


class InvalidGuestCount(ValidationFailed):
    default_message = "Number of guests must be at least 1"


class InvalidQuantity(ValidationFailed):
    default_message = "Item quantity must be at least 1"


class EmptyOrder(ValidationFailed):
    default_message = "Order must contain at least one item"


class MissingDeliveryAddress(ValidationFailed):
    default_message = "Delivery orders require a delivery address"


class SlotCrossesMidnight(ValidationFailed):
    default_message = "Reservation must end by midnight of the reservation date"


# Conflict

class CapacityExceeded(ConflictError):
    def __init__(self, capacity: int, guests: int) -> None:
        self.capacity = capacity
        self.guests = guests
        super().__init__(
            f"Table capacity is {capacity}, but {guests} guests were requested. "
            "Please choose a larger table."
        )


class SlotUnavailable(ConflictError):
    default_message = "Table is not available for the requested time slot"

    def __init__(self, message: str | None = None, alternates: list[str] | None = None) -> None:
        self.alternates = alternates or []
        super().__init__(message)


class InvalidTransition(ConflictError):
    default_message = "Cannot confirm a cancelled reservation"


class MissingDineInTarget(ConflictError):
    default_message = "Dine-in orders require a reservation or table"


class MenuItemUnavailable(ConflictError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Menu item '{name}' is currently unavailable")
