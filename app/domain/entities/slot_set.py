from __future__ import annotations

from dataclasses import dataclass


NO_SELECTION = ""


@dataclass(frozen=True)
class SlotSet:
    slots: tuple[str, ...] = ()  # ISO instants, server order
    seq: int = 0  # sequence number of the request that produced it

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def is_empty(self) -> bool:
        return not self.slots


@dataclass(frozen=True)
class TimeOption:
    value: str
    label: str
