from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.booking_draft import FormValues
from app.domain.entities.slot_set import TimeOption


class FormViewPort(ABC):
    """Rendering surface of the booking form."""

    @abstractmethod
    def read_values(self) -> FormValues:
        raise NotImplementedError

    @abstractmethod
    def set_field(self, name: str, value: str) -> None:
        """Set one form field by FormValues attribute name."""
        raise NotImplementedError

    @abstractmethod
    def set_time_options(self, options: list[TimeOption]) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_status(self, message: str) -> None:
        """Write to the live (screen reader announced) status region."""
        raise NotImplementedError

    @abstractmethod
    def show_error(self, message: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_error(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_submit_enabled(self, enabled: bool) -> None:
        """Toggle the submit control; disabled also shows the busy indicator."""
        raise NotImplementedError

    @abstractmethod
    def set_submit_label(self, label: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_timer_text(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def confirm(self, message: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def alert(self, message: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def navigate(self, url: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def replace_url(self, url: str) -> None:
        """Replace the visible URL without adding a history entry."""
        raise NotImplementedError
