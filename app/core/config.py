from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_API_BASE_URL: str | None = None
    HOLD_PATH: str = "/api/hold"
    AVAILABILITY_PATH: str = "/api/availability"
    BOOK_PATH: str = "/api/book"
    CONFIRMATION_URL: str = "thanks.html"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    BUSINESS_TIMEZONE: str = "Europe/Prague"
    CLOSED_WEEKDAYS: list[int] = [0]  # date.weekday(), 0 = Monday

    DRAFT_STORE_PROVIDER: str = "json"
    DRAFT_DIR: str = "./data/drafts"
    DRAFT_KEY_PREFIX: str = "booking_draft_"

    COUNTDOWN_TICK_SECONDS: float = 1.0
    AVAILABILITY_DISCARD_STALE: bool = True

    MOCK_HOLD_TTL_SECONDS: int = 600


settings = Settings()
