from enum import Enum


class TimerState(str, Enum):
    idle = "idle"
    running = "running"
    expired = "expired"


class SubmissionState(str, Enum):
    idle = "idle"
    submitting = "submitting"
    succeeded = "succeeded"
    conflict = "conflict"
    expired = "expired"
    failed = "failed"


class SubmissionOutcome(str, Enum):
    succeeded = "succeeded"
    conflict = "conflict"
    expired = "expired"
    failed = "failed"
    network_error = "network_error"
    invalid_form = "invalid_form"
    closed_day = "closed_day"
    cancelled = "cancelled"
    ignored = "ignored"


class ErrorKind(str, Enum):
    invalid_link = "invalid_link"
    hold_expired = "hold_expired"
    availability_fetch_failed = "availability_fetch_failed"
    submission_conflict = "submission_conflict"
    submission_failed = "submission_failed"
    network_error = "network_error"
    form_invalid = "form_invalid"
