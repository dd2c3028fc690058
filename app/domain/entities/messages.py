from app.domain.entities.session_state import ErrorKind


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.invalid_link: "Booking link expired or invalid. Please request a new link from the chat.",
    ErrorKind.hold_expired: "Your hold has expired. Please request a new booking link.",
    ErrorKind.availability_fetch_failed: "Unable to fetch available times. Try again.",
    ErrorKind.submission_conflict: "Selected time is no longer available. Suggested alternatives provided.",
    ErrorKind.submission_failed: "Booking failed. Please try again.",
    ErrorKind.network_error: "Network error while booking. Try again.",
    ErrorKind.form_invalid: "Please complete all required fields correctly.",
}

# 410 at submit reads differently from the countdown running out
HOLD_TOKEN_EXPIRED = "Your hold token expired. Please request a new booking link from the chat."

STATUS_VALIDATING_LINK = "Validating booking link…"
STATUS_OPEN_BOOKING = "Open booking — no hold token. Use the chat link for a faster experience."
STATUS_CHECKING = "Checking availability…"
STATUS_SLOTS_UPDATED = "Slots updated"
STATUS_BOOKING = "Attempting to book — please wait"

CLOSED_DAY_ALERT = "We are closed on Mondays. Please choose another date."
SOFT_HOLD_CONFIRM = (
    "You do not have a reservation hold. Submitting may fail if another customer "
    "books the same time. Proceed?"
)

SUBMIT_LABEL = "Confirm booking"
SUBMIT_LABEL_BUSY = "Securing your booking…"

PLACEHOLDER_CHOOSE = "Choose a time"
PLACEHOLDER_NONE = "No available times"
TIMER_EXPIRED = "expired"
