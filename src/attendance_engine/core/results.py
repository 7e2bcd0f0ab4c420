from __future__ import annotations

from dataclasses import dataclass


@dataclass
class JobResult:
    """Outcome of one engine job run.

    ``affected`` counts rows the job actually changed; race-lost and
    already-done rows go to ``skipped``; caught per-record errors to ``failed``.
    """

    name: str
    affected: int = 0
    skipped: int = 0
    failed: int = 0
    exit_code: int = 0
    summary: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def finish(self, summary: str) -> "JobResult":
        self.summary = summary
        return self

    @classmethod
    def fatal(cls, name: str, message: str) -> "JobResult":
        return cls(name=name, exit_code=1, summary=message)
