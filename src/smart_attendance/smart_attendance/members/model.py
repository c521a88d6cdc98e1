from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Member:
    """Thực thể miền (domain): Thành viên tham dự sự kiện."""

    member_id: str
    name: str
    is_active: bool = True
