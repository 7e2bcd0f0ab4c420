from __future__ import annotations

from typing import Optional, Protocol

from .model import Schedule


class ScheduleRepository(Protocol):
    def get_active(self) -> Optional[Schedule]:
        """The operative schedule driving automatic daily sessions (lowest id wins)."""

        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError
