from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

import click
from flask import current_app
from flask.cli import AppGroup

from .common.datetime_utils import FixedClock, parse_moment
from .container import Container
from .core.exceptions import ConfigurationError, PreconditionError
from .core.results import JobResult
from .database.bootstrap import apply_schema, list_tables, seed_default_settings

logger = logging.getLogger(__name__)

EXTENSION_KEY = "attendance_engine"

attendance_cli = AppGroup("attendance", help="Attendance time-engine jobs.")


def _parse_at(ctx, param, value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_moment(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected 'YYYY-MM-DD HH:MM', got {value!r}") from exc


at_option = click.option(
    "--at",
    "at",
    default=None,
    callback=_parse_at,
    help="Run as if the current time were this instant (YYYY-MM-DD HH:MM).",
)


def get_container(at: Optional[datetime] = None) -> Container:
    container: Container = current_app.extensions[EXTENSION_KEY]
    if at is not None:
        return container.with_clock(FixedClock(at))
    return container


def _run(name: str, at: Optional[datetime], job: Callable[[Container], JobResult]) -> None:
    try:
        result = job(get_container(at))
    except (PreconditionError, ConfigurationError) as exc:
        logger.error("%s aborted: %s", name, exc)
        result = JobResult.fatal(name, str(exc))

    line = f"[{result.name}] {result.summary}"
    if result.ok:
        line += f" (affected={result.affected}, skipped={result.skipped}, failed={result.failed})"
        click.echo(line)
    else:
        click.echo(f"Error: {line}", err=True)
    click.get_current_context().exit(result.exit_code)


@attendance_cli.command("reset-daily-session")
@at_option
def reset_daily_session(at):
    """Open today's session, lock stale ones and seed pending records."""
    _run("reset-daily-session", at, lambda c: c.session_service.reset_daily_session())


@attendance_cli.command("mark-absent")
@at_option
def mark_absent(at):
    """Mark pending records absent once the cutoff has passed."""
    _run("mark-absent", at, lambda c: c.status_engine.mark_absent())


@attendance_cli.command("auto-checkout")
@at_option
def auto_checkout(at):
    """Force-close records one hour after shift end."""
    _run("auto-checkout", at, lambda c: c.checkout_engine.auto_checkout())


@attendance_cli.command("end-expired-breaks")
@at_option
def end_expired_breaks(at):
    """Auto-end breaks that ran past their limit."""
    _run("end-expired-breaks", at, lambda c: c.break_enforcer.end_expired_breaks())


@attendance_cli.command("recalculate-status")
@at_option
def recalculate_status(at):
    """Re-derive present/late and minutes late from time_in."""
    _run("recalculate-status", at, lambda c: c.status_engine.recalculate_status())


@attendance_cli.command("recalculate-hours")
@at_option
def recalculate_hours(at):
    """Re-derive hours worked for completed records."""
    _run("recalculate-hours", at, lambda c: c.hours_service.recalculate_hours())


@attendance_cli.command("cleanup-data")
@at_option
def cleanup_data(at):
    """Delete history older than the retention policy."""
    _run("cleanup-data", at, lambda c: c.retention_service.cleanup_data())


@attendance_cli.command("verify-audit")
@at_option
def verify_audit(at):
    """Check the audit log hash chain."""

    def job(container: Container) -> JobResult:
        report = container.audit_logger.verify_chain()
        if report.ok:
            return JobResult(name="verify-audit", affected=report.checked).finish(
                f"Audit chain intact ({report.checked} entries)."
            )
        return JobResult.fatal(
            "verify-audit",
            f"Audit chain broken at entry {report.broken_at}: {report.reason} ({report.checked} checked).",
        )

    _run("verify-audit", at, job)


@attendance_cli.command("init-db")
def init_db():
    """Apply schema.sql and seed default settings."""

    def job(container: Container) -> JobResult:
        if container.conn is None:
            raise PreconditionError("No database connection configured.")
        statements = apply_schema(container.conn)
        seeded = seed_default_settings(container.conn)
        tables = list_tables(container.conn)
        cfg = container.conn.config
        return JobResult(name="init-db", affected=seeded).finish(
            f"Applied {statements} statement(s) to {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} "
            f"(tables={len(tables)}, settings seeded={seeded})."
        )

    _run("init-db", None, job)
