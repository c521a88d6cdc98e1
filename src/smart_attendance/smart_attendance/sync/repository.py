from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol


class WatermarkRepository(Protocol):
    def get(self, name: str) -> Optional[datetime]:
        raise NotImplementedError

    def set(self, name: str, value: datetime) -> None:
        raise NotImplementedError
