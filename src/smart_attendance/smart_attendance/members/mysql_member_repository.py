from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Member
from .repository import MemberRepository


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, member_id: str) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id, name, is_active FROM members WHERE member_id=%s", (member_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Member(member_id=str(r["member_id"]), name=r["name"], is_active=bool(r["is_active"]))

    def list_active_ids(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id FROM members WHERE is_active=1 ORDER BY member_id")
            return [str(r["member_id"]) for r in fetchall(cur)]

    def save(self, member: Member) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO members (member_id, name, is_active) VALUES (%s, %s, %s) "
                "ON DUPLICATE KEY UPDATE name=VALUES(name), is_active=VALUES(is_active)",
                (member.member_id, member.name, 1 if member.is_active else 0),
            )
