from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, role, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_active_employees(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, role, is_active
                FROM users
                WHERE role=%s AND is_active=1
                ORDER BY user_id
                """,
                (Role.EMPLOYEE.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_admins(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, role, is_active FROM users WHERE role=%s AND is_active=1 ORDER BY user_id",
                (Role.ADMIN.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def get_first_admin(self) -> Optional[User]:
        admins = self.list_admins()
        return admins[0] if admins else None
