from __future__ import annotations


class BookingValidationError(ValueError):
    """A booking submission failed validation.

    Recoverable by correcting the input; ``message`` is shown to the submitter as is.
    """

    code = "invalid_booking"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        # Every failure for the same form, when the caller collected them
        self.errors: list[BookingValidationError] = [self]

    def as_dict(self) -> dict:
        return {"code": self.code, "field": self.field, "message": self.message}


class UnknownSlot(BookingValidationError):
    code = "unknown_slot"

    def __init__(self, slot: str) -> None:
        super().__init__(f"Invalid slot: {slot}", field="slot")
        self.slot = slot


class MissingField(BookingValidationError):
    code = "missing_field"


class InvalidDateFormat(BookingValidationError):
    code = "invalid_date_format"


class PastDate(BookingValidationError):
    code = "past_date"


class InvalidTimeFormat(BookingValidationError):
    code = "invalid_time_format"


class StartNotBeforeEnd(BookingValidationError):
    code = "start_not_before_end"


class InvalidGuestCount(BookingValidationError):
    code = "invalid_guest_count"


class InvalidPackageReference(BookingValidationError):
    code = "invalid_package_reference"


class InvalidEmail(BookingValidationError):
    code = "invalid_email"
