from fastapi import FastAPI

from app.api.booking_stub import router as booking_stub_router
from app.core.logging_setup import configure_logging

configure_logging()

app = FastAPI(title="Booking Backend Stub", version="1.0.0")

app.include_router(booking_stub_router, tags=["booking"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
