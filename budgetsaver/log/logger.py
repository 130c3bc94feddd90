"""
Ledger Logger

Structured local logging for everything the session layer does:
session start, each schedule materialized or skipped, entity creation
and deletion (with cascade counts).

The logger:
- Writes through structlog, as JSON by default
- Keeps no persistent trail; these are operational logs only
"""

import logging
import sys
from typing import Optional

import structlog

from budgetsaver.config import AppSettings, get_settings
from budgetsaver.ledger.state import DeletionReport
from budgetsaver.models.entities import LedgerRecord, RecurringTransaction
from budgetsaver.models.results import ScheduleIssue


_configured = False


def configure_logging(settings: Optional[AppSettings] = None, force: bool = False) -> None:
    """
    Configure structlog and the stdlib root handler.
    
    Safe to call repeatedly; only the first call (or a forced one) applies.
    """
    global _configured
    if _configured and not force:
        return
    
    settings = settings or get_settings().app
    level = logging.DEBUG if settings.debug_mode else getattr(logging, settings.log_level)
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=force,
    )
    
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


class LedgerLogger:
    """One method per domain event, all bound to a session id."""
    
    def __init__(self, session_id: Optional[str] = None):
        self._logger = structlog.get_logger("budgetsaver")
        if session_id:
            self._logger = self._logger.bind(session_id=session_id)
    
    def _emit(self, level: str, event: str, **fields) -> None:
        getattr(self._logger, level)(event, **fields)
    
    def session_started(self, now: str, schedule_count: int, transaction_count: int) -> None:
        self._emit(
            "info",
            "session_started",
            now=now,
            schedules=schedule_count,
            transactions=transaction_count,
        )
    
    def collection_absent(self, collection: str) -> None:
        self._emit("debug", "collection_absent", collection=collection)
    
    def schedule_materialized(
        self,
        schedule: RecurringTransaction,
        generated: int,
    ) -> None:
        self._emit(
            "info",
            "schedule_materialized",
            schedule_id=schedule.id,
            frequency=schedule.frequency,
            generated=generated,
            checkpoint=(
                schedule.last_generated_date.isoformat()
                if schedule.last_generated_date else None
            ),
        )
    
    def schedule_skipped(self, issue: ScheduleIssue) -> None:
        self._emit(
            "warning",
            "schedule_skipped",
            schedule_id=issue.schedule_id,
            kind=issue.kind.value,
            reason=issue.message,
        )
    
    def session_persisted(self, new_transactions: int, updated_schedules: int) -> None:
        self._emit(
            "info",
            "session_persisted",
            new_transactions=new_transactions,
            updated_schedules=updated_schedules,
        )
    
    def entity_created(self, entity_type: str, entity: LedgerRecord) -> None:
        self._emit("info", "entity_created", entity_type=entity_type, entity_id=entity.id)
    
    def entity_rejected(self, entity_type: str, error_count: int) -> None:
        self._emit(
            "warning",
            "entity_rejected",
            entity_type=entity_type,
            errors=error_count,
        )
    
    def entity_deleted(self, report: DeletionReport) -> None:
        self._emit(
            "info" if report.found else "warning",
            "entity_deleted" if report.found else "entity_delete_missing",
            entity_type=report.entity_type,
            entity_id=report.entity_id,
            cascaded_transactions=report.cascaded_transactions,
            orphaned_schedules=report.orphaned_schedules,
        )
