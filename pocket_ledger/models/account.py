"""
Core Data Models for Pocket Ledger

These models describe the documents the account lifecycle touches and the
results it hands back. They are designed to:
1. Mirror the Firestore documents written by the client (camelCase aliases)
2. Tolerate fields this backend doesn't care about
3. Be serializable for logging and callable responses

DESIGN DECISION: The backend never originates settings or transaction
content. These models exist so documents can be read, counted and
timestamped with type safety - not to create new ones.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Timezone-aware current time; Firestore timestamps are always UTC."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction relative to the budget."""
    EXPENSE = "expense"
    INCOME = "income"


class SweepDecision(str, Enum):
    """
    What the inactivity sweep does with a stale account.

    DELETE  - anonymous identity, or identity already gone (orphan)
    REFRESH - linked identity; bump lastActive and keep the account
    SKIP    - identity lookup failed for another reason; retry next cycle
    """
    DELETE = "delete"
    REFRESH = "refresh"
    SKIP = "skip"


# =============================================================================
# STORED DOCUMENTS
# =============================================================================

class AccountSettings(BaseModel):
    """
    Per-user settings document (userSettings/{uid}).

    The document key is always the owning identity's uid.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    uid: str = Field(
        ...,
        min_length=1,
        description="Owning identity ID (also the document key)"
    )
    budget: Optional[float] = Field(
        default=None,
        gt=0,
        description="Starting budget"
    )
    currency: str = Field(
        default="$",
        max_length=8,
        description="Currency symbol used for display"
    )
    number_format: Optional[str] = Field(
        default=None,
        alias="numberFormat",
        description="Number display preference (comma, dot or none)"
    )
    app_title: Optional[str] = Field(
        default=None,
        alias="appTitle",
        max_length=200,
        description="Human-readable dashboard title"
    )
    last_active: Optional[datetime] = Field(
        default=None,
        alias="lastActive",
        description="Last time the owner was seen (UTC)"
    )
    deletion_pending: bool = Field(
        default=False,
        alias="deletionPending",
        description="Set by the sweep once transactions are gone and the identity delete is outstanding"
    )

    @classmethod
    def from_document(
        cls,
        uid: str,
        data: dict[str, Any],
        last_active_field: str = "lastActive",
        deletion_marker_field: str = "deletionPending",
    ) -> "AccountSettings":
        """Build from a raw document, honouring configured field names."""
        payload = dict(data)
        payload.pop("uid", None)
        if last_active_field != "lastActive":
            payload["lastActive"] = payload.pop(last_active_field, None)
        if deletion_marker_field != "deletionPending":
            payload["deletionPending"] = bool(payload.pop(deletion_marker_field, False))
        return cls(uid=uid, **payload)

    def is_stale(self, cutoff: datetime) -> bool:
        """Strictly older than the cutoff. Records exactly at the cutoff are not stale."""
        return self.last_active is not None and self.last_active < cutoff


class TransactionRecord(BaseModel):
    """
    A single expense or income entry under a settings document.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Document ID within the transactions subcollection"
    )
    description: str = Field(
        default="",
        max_length=500,
    )
    type: TransactionType = Field(
        default=TransactionType.EXPENSE,
        description="Expense or income"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Unsigned amount in the account's currency"
    )
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_float_amount(cls, v: Any) -> Any:
        # Firestore returns JS numbers as floats; go through str to avoid binary noise
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @property
    def signed_amount(self) -> Decimal:
        """Negative for expenses, positive for income."""
        return -self.amount if self.type == TransactionType.EXPENSE else self.amount


# =============================================================================
# IDENTITY (owned by the auth service, referenced here)
# =============================================================================

class Identity(BaseModel):
    """
    Snapshot of an authentication identity.

    An identity with no linked sign-in provider is a guest session.
    """

    uid: str = Field(..., min_length=1)
    provider_ids: list[str] = Field(
        default_factory=list,
        description="Linked sign-in providers (e.g. password, google.com)"
    )
    email: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return not self.provider_ids


class AuthenticatedCaller(BaseModel):
    """
    The verified session behind a callable invocation.

    The uid comes from the verified ID token, never from request data.
    """

    uid: str = Field(..., min_length=1)
    token: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# RESULTS
# =============================================================================

class DeletionResult(BaseModel):
    """Outcome of a successful on-demand account deletion."""

    uid: str
    transactions_deleted: int = Field(default=0, ge=0)
    deleted_at: datetime = Field(default_factory=utc_now)

    @property
    def message(self) -> str:
        return f"Successfully deleted user {self.uid} and all associated data."

    def to_response(self) -> dict[str, str]:
        """Payload returned to the calling client."""
        return {"message": self.message}


class ActivityResult(BaseModel):
    """Outcome of recording a user's activity."""

    uid: str
    is_new_user: bool
    last_active: Optional[datetime] = None

    def to_response(self) -> dict[str, Any]:
        return {
            "isNewUser": self.is_new_user,
            "lastActive": self.last_active.isoformat() if self.last_active else None,
        }


class SweepReport(BaseModel):
    """
    Summary of one sweep cycle.

    Every matched uid ends up in exactly one of deleted, refreshed,
    skipped or failed.
    """

    run_id: UUID = Field(default_factory=uuid4)
    started_at: datetime = Field(default_factory=utc_now)
    cutoff: datetime
    matched: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    refreshed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    error: Optional[str] = Field(
        default=None,
        description="Set when the cycle could not evaluate accounts at all"
    )

    @property
    def is_empty(self) -> bool:
        return not self.matched

    def summary(self) -> dict[str, Any]:
        """Counts suitable for structured logging."""
        return {
            "run_id": str(self.run_id),
            "cutoff": self.cutoff.isoformat(),
            "matched": len(self.matched),
            "deleted": len(self.deleted),
            "refreshed": len(self.refreshed),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "error": self.error,
        }
