"""
Audit Logger

DESIGN DECISION: Every account lifecycle step is logged with the affected
user ID. This provides:
1. Operator diagnosis of failed deletions
2. A record of what each sweep cycle did
3. The only failure signal for the unattended sweep (there is no caller)

The audit logger:
- Writes structured JSON through structlog (picked up by Cloud Logging)
- Never raises; a logging failure must not turn into a lifecycle failure
- Supports correlation IDs to tie together the events of one sweep cycle
"""

import logging
import sys
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stdout at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs lifecycle events as structured log lines. Events are never
    persisted to the document store.
    """

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize audit logger.

        Args:
            logger: structlog-compatible logger. Defaults to the
                    package logger.
        """
        self._logger = logger or structlog.get_logger("pocket_ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    # -- on-demand deletion -------------------------------------------------

    def log_deletion_requested(self, uid: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.deletion_requested(uid, correlation_id))

    def log_deletion_rejected(self, reason: str) -> None:
        self.log(AuditEventBuilder.deletion_rejected(reason))

    def log_account_marked_for_deletion(
        self,
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.account_marked_for_deletion(uid, transactions_deleted, correlation_id)
        )

    def log_account_purged(
        self,
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.account_purged(uid, transactions_deleted, correlation_id))

    def log_identity_deleted(self, uid: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.identity_deleted(uid, correlation_id))

    def log_account_deleted(
        self,
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.account_deleted(uid, transactions_deleted, correlation_id))

    def log_deletion_failed(
        self,
        uid: str,
        error: BaseException,
        code: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed deletion with the user ID for operator diagnosis."""
        self.log(AuditEventBuilder.deletion_failed(uid, error, code, correlation_id))

    # -- activity -----------------------------------------------------------

    def log_activity_recorded(self, uid: str, last_active: datetime) -> None:
        self.log(AuditEventBuilder.activity_recorded(uid, last_active))

    def log_new_user_detected(self, uid: str) -> None:
        self.log(AuditEventBuilder.new_user_detected(uid))

    # -- inactivity sweep ---------------------------------------------------

    def log_sweep_started(self, run_id: UUID, cutoff: datetime) -> None:
        self.log(AuditEventBuilder.sweep_started(run_id, cutoff))

    def log_sweep_no_stale_accounts(self, run_id: UUID, cutoff: datetime) -> None:
        self.log(AuditEventBuilder.sweep_no_stale_accounts(run_id, cutoff))

    def log_sweep_account_refreshed(self, uid: str, run_id: UUID) -> None:
        self.log(AuditEventBuilder.sweep_account_refreshed(uid, run_id))

    def log_sweep_account_skipped(self, uid: str, error: BaseException, run_id: UUID) -> None:
        self.log(AuditEventBuilder.sweep_account_skipped(uid, error, run_id))

    def log_sweep_account_deleted(
        self,
        uid: str,
        transactions_deleted: int,
        orphaned: bool,
        run_id: UUID,
    ) -> None:
        self.log(
            AuditEventBuilder.sweep_account_deleted(uid, transactions_deleted, orphaned, run_id)
        )

    def log_sweep_account_failed(self, uid: str, error: BaseException, run_id: UUID) -> None:
        self.log(AuditEventBuilder.sweep_account_failed(uid, error, run_id))

    def log_sweep_completed(self, summary: dict[str, Any], run_id: UUID) -> None:
        self.log(AuditEventBuilder.sweep_completed(summary, run_id))

    def log_sweep_failed(self, error: BaseException, run_id: UUID) -> None:
        self.log(AuditEventBuilder.sweep_failed(error, run_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(
            AuditEventBuilder.system_error(
                error_type=error_type,
                error_message=error_message,
                details=details,
                correlation_id=correlation_id,
            )
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of an invocation (a deletion request or a
    sweep cycle) and pass it through all subsequent operations.
    """
    return uuid4()
