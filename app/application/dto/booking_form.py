from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class BookingFormInput(BaseModel):
    """Required-field constraints of the booking form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: EmailStr
    service: str = Field(min_length=1)
    stylist: str = ""
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(min_length=1)
    notes: str = ""
