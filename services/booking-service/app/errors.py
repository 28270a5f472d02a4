class BookingServiceError(Exception):
    """
    Base for every failure the booking core reports to its callers.

    `code` is the stable identifier clients switch on; `status_code` is the
    HTTP status the API layer answers with.
    """

    status_code = 400
    code = "booking_error"
    default_message = "Booking operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(BookingServiceError):
    code = "validation_failed"
    default_message = "Invalid request data"


class NotFound(BookingServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class ProfileNotFound(NotFound):
    code = "profile_not_found"
    default_message = "No profile found for this user"


class InvalidState(BookingServiceError):
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class InvalidTransition(InvalidState):
    code = "invalid_transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move booking from {current} to {target}")


class NotAcceptingApplications(BookingServiceError):
    code = "not_accepting_applications"
    default_message = "This booking is not accepting applications"


class AlreadyAssigned(BookingServiceError):
    status_code = 409
    code = "already_assigned"
    default_message = "This booking already has an assigned worker"


class AlreadyClaimed(BookingServiceError):
    status_code = 409
    code = "already_claimed"
    default_message = "This booking has already been claimed"


class DuplicateApplication(BookingServiceError):
    status_code = 409
    code = "duplicate_application"
    default_message = "You have already applied to this booking"
