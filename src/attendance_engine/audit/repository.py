from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol

from .model import AuditEntry


class AuditRepository(Protocol):
    def last(self) -> Optional[AuditEntry]:
        raise NotImplementedError

    def append(self, entry: AuditEntry) -> int:
        raise NotImplementedError

    def iter_in_order(self) -> Iterable[AuditEntry]:
        """All entries by ascending id."""

        raise NotImplementedError

    def delete_older_than(self, cutoff: datetime) -> int:
        raise NotImplementedError
