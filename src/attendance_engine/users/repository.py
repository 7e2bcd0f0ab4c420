from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list_active_employees(self) -> Sequence[User]:
        raise NotImplementedError

    def list_admins(self) -> Sequence[User]:
        raise NotImplementedError

    def get_first_admin(self) -> Optional[User]:
        """Admin account that system-created rows are attributed to."""

        raise NotImplementedError
