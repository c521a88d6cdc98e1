from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    def get_by_id(self, member_id: str) -> Optional[Member]:
        raise NotImplementedError

    def list_active_ids(self) -> Sequence[str]:
        raise NotImplementedError

    def save(self, member: Member) -> None:
        """Insert or update by ``member_id``."""
        raise NotImplementedError
