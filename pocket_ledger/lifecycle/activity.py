"""
Activity Recording

Keeps lastActive fresh for signed-in users so the inactivity sweep only
ever sees genuinely idle accounts, and tells the client whether the user
still needs first-run setup.

The settings document is only ever updated here, never created: a missing
document is reported as a new user and the client creates it when the
user saves their settings.
"""

from typing import Optional

from pocket_ledger.audit import AuditLogger
from pocket_ledger.lifecycle.errors import AccountLifecycleError, ErrorCode
from pocket_ledger.models.account import ActivityResult, AuthenticatedCaller, utc_now
from pocket_ledger.services.storage import AccountStorageInterface, NotFoundError


class ActivityRecorder:
    """Records that the calling user is active."""

    def __init__(
        self,
        storage: AccountStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()

    async def record_activity(self, caller: Optional[AuthenticatedCaller]) -> ActivityResult:
        """
        Refresh the caller's lastActive timestamp.

        Raises:
            AccountLifecycleError: UNAUTHENTICATED or INTERNAL
        """
        if caller is None:
            raise AccountLifecycleError(
                ErrorCode.UNAUTHENTICATED,
                "You must be logged in to record activity.",
            )

        uid = caller.uid
        now = utc_now()
        try:
            await self._storage.touch_last_active(uid, now)
        except NotFoundError:
            self._audit_logger.log_new_user_detected(uid)
            return ActivityResult(uid=uid, is_new_user=True)
        except Exception as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"uid": uid, "operation": "record_activity"},
            )
            raise AccountLifecycleError(
                ErrorCode.INTERNAL,
                "An error occurred while recording activity.",
            ) from e

        self._audit_logger.log_activity_recorded(uid, now)
        return ActivityResult(uid=uid, is_new_user=False, last_active=now)
