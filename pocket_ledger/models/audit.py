"""
Audit Models for Pocket Ledger

Every account lifecycle step emits an audit event. This provides:
1. Traceability of every deletion and refresh by user ID
2. Debugging information when a sweep cycle partially fails
3. Operator visibility into what the scheduled job actually did

DESIGN DECISION: Audit events go to the structured log only.
Deleting an account must not leave a record of that account behind
in the document store.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pocket_ledger.models.account import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # On-demand deletion
    DELETION_REQUESTED = "deletion_requested"
    DELETION_REJECTED = "deletion_rejected"
    ACCOUNT_MARKED_FOR_DELETION = "account_marked_for_deletion"
    ACCOUNT_PURGED = "account_purged"
    IDENTITY_DELETED = "identity_deleted"
    ACCOUNT_DELETED = "account_deleted"
    DELETION_FAILED = "deletion_failed"

    # Activity
    ACTIVITY_RECORDED = "activity_recorded"
    NEW_USER_DETECTED = "new_user_detected"

    # Inactivity sweep
    SWEEP_STARTED = "sweep_started"
    SWEEP_NO_STALE_ACCOUNTS = "sweep_no_stale_accounts"
    SWEEP_ACCOUNT_REFRESHED = "sweep_account_refreshed"
    SWEEP_ACCOUNT_SKIPPED = "sweep_account_skipped"
    SWEEP_ACCOUNT_DELETED = "sweep_account_deleted"
    SWEEP_ACCOUNT_FAILED = "sweep_account_failed"
    SWEEP_COMPLETED = "sweep_completed"
    SWEEP_FAILED = "sweep_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant lifecycle action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which account is this about?
    uid: Optional[str] = Field(
        default=None,
        description="User identity ID the event relates to"
    )

    # Correlation - e.g. all events of one sweep cycle
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a signed-in user?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "uid": self.uid,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def _error_fields(error: BaseException) -> dict[str, str]:
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_deleted(uid, transactions_deleted=3)
        event = AuditEventBuilder.sweep_account_failed(uid, error, run_id)
    """

    @staticmethod
    def deletion_requested(uid: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETION_REQUESTED,
            uid=uid,
            correlation_id=correlation_id,
            description="Account deletion requested",
            is_user_action=True,
        )

    @staticmethod
    def deletion_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETION_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"Account deletion rejected: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def account_marked_for_deletion(
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_MARKED_FOR_DELETION,
            uid=uid,
            correlation_id=correlation_id,
            description=f"Removed {transactions_deleted} transactions; settings marked for deletion",
            details={"transactions_deleted": transactions_deleted},
        )

    @staticmethod
    def account_purged(
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_PURGED,
            uid=uid,
            correlation_id=correlation_id,
            description=f"Purged settings and {transactions_deleted} transactions",
            details={"transactions_deleted": transactions_deleted},
        )

    @staticmethod
    def identity_deleted(uid: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_DELETED,
            uid=uid,
            correlation_id=correlation_id,
            description="Authentication identity deleted",
        )

    @staticmethod
    def account_deleted(
        uid: str,
        transactions_deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            uid=uid,
            correlation_id=correlation_id,
            description="Account and all associated data deleted",
            details={"transactions_deleted": transactions_deleted},
            is_user_action=True,
        )

    @staticmethod
    def deletion_failed(
        uid: str,
        error: BaseException,
        code: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        severity = AuditSeverity.WARNING if code == "not-found" else AuditSeverity.ERROR
        return AuditEvent(
            event_type=AuditEventType.DELETION_FAILED,
            severity=severity,
            uid=uid,
            correlation_id=correlation_id,
            description=f"Account deletion failed ({code})",
            details={"code": code},
            is_user_action=True,
            **_error_fields(error),
        )

    @staticmethod
    def activity_recorded(uid: str, last_active: datetime) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTIVITY_RECORDED,
            severity=AuditSeverity.DEBUG,
            uid=uid,
            description="Activity timestamp refreshed",
            details={"last_active": last_active.isoformat()},
            is_user_action=True,
        )

    @staticmethod
    def new_user_detected(uid: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NEW_USER_DETECTED,
            uid=uid,
            description="No settings document yet; first-run setup required",
            is_user_action=True,
        )

    @staticmethod
    def sweep_started(run_id: UUID, cutoff: datetime) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_STARTED,
            correlation_id=run_id,
            description="Inactivity sweep started",
            details={"cutoff": cutoff.isoformat()},
        )

    @staticmethod
    def sweep_no_stale_accounts(run_id: UUID, cutoff: datetime) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_NO_STALE_ACCOUNTS,
            correlation_id=run_id,
            description="No inactive accounts found",
            details={"cutoff": cutoff.isoformat()},
        )

    @staticmethod
    def sweep_account_refreshed(uid: str, run_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_ACCOUNT_REFRESHED,
            uid=uid,
            correlation_id=run_id,
            description="Linked account is stale; activity timestamp refreshed",
        )

    @staticmethod
    def sweep_account_skipped(uid: str, error: BaseException, run_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_ACCOUNT_SKIPPED,
            severity=AuditSeverity.WARNING,
            uid=uid,
            correlation_id=run_id,
            description="Account skipped this cycle",
            **_error_fields(error),
        )

    @staticmethod
    def sweep_account_deleted(
        uid: str,
        transactions_deleted: int,
        orphaned: bool,
        run_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_ACCOUNT_DELETED,
            uid=uid,
            correlation_id=run_id,
            description="Orphaned account data removed" if orphaned else "Inactive guest account deleted",
            details={
                "transactions_deleted": transactions_deleted,
                "orphaned": orphaned,
            },
        )

    @staticmethod
    def sweep_account_failed(uid: str, error: BaseException, run_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_ACCOUNT_FAILED,
            severity=AuditSeverity.ERROR,
            uid=uid,
            correlation_id=run_id,
            description="Failed to delete inactive account",
            **_error_fields(error),
        )

    @staticmethod
    def sweep_completed(summary: dict[str, Any], run_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_COMPLETED,
            correlation_id=run_id,
            description=(
                f"Inactivity sweep finished: {summary['deleted']} deleted, "
                f"{summary['refreshed']} refreshed, {summary['failed']} failed"
            ),
            details=summary,
        )

    @staticmethod
    def sweep_failed(error: BaseException, run_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=run_id,
            description="Inactivity sweep could not query stale accounts",
            **_error_fields(error),
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_type=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
