from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.application.ports.booking_backend import BookingBackendPort
from app.application.ports.clock import ClockPort
from app.application.ports.draft_storage import DraftStoragePort
from app.application.ports.form_view import FormViewPort
from app.application.use_cases.booking_form_session import BookingFormSession
from app.infrastructure.backend.http_backend import HttpBookingBackend
from app.infrastructure.backend.mock_backend import MockBookingBackend
from app.infrastructure.clock.system_clock import SystemClock
from app.infrastructure.store.json_draft_storage import JsonDraftStorage
from app.infrastructure.store.memory_draft_storage import MemoryDraftStorage


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_clock() -> ClockPort:
    return SystemClock()


@lru_cache
def get_mock_backend() -> MockBookingBackend:
    return MockBookingBackend(
        timezone=get_timezone(),
        clock=get_clock(),
        hold_ttl_seconds=settings.MOCK_HOLD_TTL_SECONDS,
        closed_weekdays=tuple(settings.CLOSED_WEEKDAYS),
    )


def uses_mock_backend() -> bool:
    return not settings.BOOKING_API_BASE_URL and settings.ENV.lower() in {"dev", "local"}


def get_backend() -> BookingBackendPort:
    """
    Shared mock in dev/local without a base URL, otherwise a new HTTP backend.
    The caller owns an HTTP backend and must aclose() it.
    """
    logger = logging.getLogger(__name__)
    if not settings.BOOKING_API_BASE_URL:
        if uses_mock_backend():
            logger.info("Using MockBookingBackend (BOOKING_API_BASE_URL missing, ENV=dev/local)")
            return get_mock_backend()
        raise ValueError("BOOKING_API_BASE_URL is required outside dev/local.")
    logger.info("Using HttpBookingBackend base_url=%s", settings.BOOKING_API_BASE_URL)
    return HttpBookingBackend()


def get_draft_storage() -> DraftStoragePort:
    if settings.DRAFT_STORE_PROVIDER.lower() == "memory":
        return MemoryDraftStorage()
    return JsonDraftStorage(data_dir=settings.DRAFT_DIR)


def get_booking_form_session(
    view: FormViewPort,
    backend: BookingBackendPort | None = None,
    storage: DraftStoragePort | None = None,
    clock: ClockPort | None = None,
) -> BookingFormSession:
    return BookingFormSession(
        backend=backend or get_backend(),
        view=view,
        clock=clock or get_clock(),
        storage=storage or get_draft_storage(),
        timezone=get_timezone(),
        draft_key_prefix=settings.DRAFT_KEY_PREFIX,
        confirmation_base_url=settings.CONFIRMATION_URL,
        closed_weekdays=settings.CLOSED_WEEKDAYS,
        tick_seconds=settings.COUNTDOWN_TICK_SECONDS,
        discard_stale=settings.AVAILABILITY_DISCARD_STALE,
    )
