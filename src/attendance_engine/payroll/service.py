from __future__ import annotations

import logging
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditLogger
from ..breaks.repository import BreakRepository
from ..core.constants import HOURS_EPSILON
from ..core.results import JobResult
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator, resolve_break_minutes

logger = logging.getLogger(__name__)


class HoursService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        breaks: BreakRepository,
        audit: AuditLogger,
        *,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._attendance = attendance
        self._breaks = breaks
        self._audit = audit
        self._calculator = calculator or StandardHoursCalculator()

    def hours_for(self, record: AttendanceRecord) -> float:
        if record.time_in is None or record.time_out is None:
            return 0.0
        break_minutes = resolve_break_minutes(
            self._breaks.sum_minutes_for_record(record.record_id),
            record.break_start,
            record.break_end,
        )
        return self._calculator.hours_worked(
            time_in=record.time_in,
            time_out=record.time_out,
            break_minutes=break_minutes,
        )

    def recalculate_hours(self) -> JobResult:
        result = JobResult(name="recalculate-hours")
        for record in self._attendance.list_completed():
            try:
                hours = self.hours_for(record)
                if abs(hours - float(record.hours_worked)) <= HOURS_EPSILON:
                    result.skipped += 1
                    continue
                self._attendance.update_hours(record.record_id, hours)
                logger.info("Record %s hours %.2f -> %.2f", record.record_id, record.hours_worked, hours)
                result.affected += 1
                self._audit.log(
                    "recalculate_hours",
                    f"System recalculated hours for employee (User ID: {record.user_id})",
                    subject_type="AttendanceRecord",
                    subject_id=record.record_id,
                    before={"hours_worked": round(float(record.hours_worked), 2)},
                    after={"hours_worked": hours},
                )
            except Exception:
                logger.exception("Failed to recalculate hours for record %s", record.record_id)
                result.failed += 1
        return result.finish(f"Hours updated on {result.affected} record(s), {result.failed} failed.")
