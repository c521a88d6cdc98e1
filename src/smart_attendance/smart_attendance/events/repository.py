from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def save(self, event: Event) -> None:
        """Insert or replace the event row keyed by ``event_id``."""

        raise NotImplementedError

    def set_active(self, event_id: str, is_active: bool) -> bool:
        raise NotImplementedError

    def list_active(self) -> Sequence[Event]:
        raise NotImplementedError
