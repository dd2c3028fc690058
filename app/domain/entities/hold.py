from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Prefill:
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    service: str | None = None


@dataclass(frozen=True)
class Hold:
    token: str
    expires_at: datetime  # timezone-aware
    prefill: Prefill = field(default_factory=Prefill)
