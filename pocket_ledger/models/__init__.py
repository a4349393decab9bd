"""
Data Models Package

This package contains all Pydantic models used by the account lifecycle.
"""

from pocket_ledger.models.account import (
    AccountSettings,
    ActivityResult,
    AuthenticatedCaller,
    DeletionResult,
    Identity,
    SweepDecision,
    SweepReport,
    TransactionRecord,
    TransactionType,
    utc_now,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Account models
    "AccountSettings",
    "ActivityResult",
    "AuthenticatedCaller",
    "DeletionResult",
    "Identity",
    "SweepDecision",
    "SweepReport",
    "TransactionRecord",
    "TransactionType",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
