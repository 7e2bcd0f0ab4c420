from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import minutes_between
from ..core.enums import OvertimeStatus
from ..core.exceptions import ConfigurationError
from ..settings.service import SettingsService


@dataclass(frozen=True)
class OvertimeDecision:
    minutes: int = 0
    status: OvertimeStatus = OvertimeStatus.NONE


@dataclass(frozen=True)
class OvertimePolicy:
    enabled: bool = False
    min_minutes: int = 60
    rounding: str = "none"
    require_approval: bool = True

    @classmethod
    def from_settings(cls, settings: SettingsService) -> "OvertimePolicy":
        return cls(
            enabled=settings.get_bool("allow_overtime"),
            min_minutes=settings.get_int("min_overtime_minutes"),
            rounding=settings.get_str("ot_rounding") or "none",
            require_approval=settings.get_bool("require_ot_approval"),
        )

    def _round(self, minutes: int) -> int:
        if self.rounding == "none":
            return minutes
        if not self.rounding.startswith("down_"):
            raise ConfigurationError(f"Unsupported overtime rounding rule: {self.rounding!r}")
        try:
            interval = int(self.rounding.split("_", 1)[1])
        except ValueError as exc:
            raise ConfigurationError(f"Unsupported overtime rounding rule: {self.rounding!r}") from exc
        if interval <= 0:
            return minutes
        return (minutes // interval) * interval

    def evaluate(self, *, time_out: datetime, shift_end: datetime) -> OvertimeDecision:
        if not self.enabled or time_out <= shift_end:
            return OvertimeDecision()
        raw = minutes_between(shift_end, time_out)
        if raw < self.min_minutes:
            return OvertimeDecision()
        status = OvertimeStatus.PENDING if self.require_approval else OvertimeStatus.APPROVED
        return OvertimeDecision(minutes=self._round(raw), status=status)
