from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an employee or administrator.

    Note: This is a plain data object (no DB access code). Employee CRUD lives
    outside the engine; only the fields the jobs need are mapped.
    """

    user_id: int
    full_name: str
    role: Role
    is_active: bool = True
