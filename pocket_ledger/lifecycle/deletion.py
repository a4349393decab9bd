"""
On-Demand Account Deletion

Flow:
1. Verify the caller has an authenticated session (reject otherwise)
2. Purge the caller's settings and transactions
3. Delete the caller's authentication identity

The uid always comes from the verified session. Request data is
accepted only so the callable signature matches; it is never read, so
one user can never delete another user's account.
"""

from typing import Any, Optional

from pocket_ledger.audit import AuditLogger, create_correlation_id
from pocket_ledger.lifecycle.errors import AccountLifecycleError, ErrorCode
from pocket_ledger.lifecycle.purge import AccountPurger
from pocket_ledger.models.account import AuthenticatedCaller, DeletionResult
from pocket_ledger.services.identity import IdentityNotFoundError, IdentityServiceInterface
from pocket_ledger.services.storage import AccountStorageInterface


UNAUTHENTICATED_MESSAGE = "You must be logged in to delete an account."
NOT_FOUND_MESSAGE = "This account has already been deleted."
INTERNAL_MESSAGE = "An error occurred while deleting the account."


class AccountDeletionFlow:
    """
    Deletes the calling user's account and all of its data.

    Calling it again for an identity that is already gone yields a
    NOT_FOUND classification, which clients treat as already done.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        identity_service: IdentityServiceInterface,
        purger: Optional[AccountPurger] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._purger = purger or AccountPurger(storage, self._audit_logger)
        self._identity_service = identity_service

    async def delete_account(
        self,
        caller: Optional[AuthenticatedCaller],
        data: Any = None,
    ) -> DeletionResult:
        """
        Delete the caller's account.

        Args:
            caller: The verified session, or None if the request carried none
            data: Request payload (ignored)

        Returns:
            DeletionResult naming the deleted uid

        Raises:
            AccountLifecycleError: UNAUTHENTICATED, NOT_FOUND or INTERNAL
        """
        if caller is None:
            self._audit_logger.log_deletion_rejected("unauthenticated")
            raise AccountLifecycleError(ErrorCode.UNAUTHENTICATED, UNAUTHENTICATED_MESSAGE)

        uid = caller.uid
        correlation_id = create_correlation_id()
        self._audit_logger.log_deletion_requested(uid, correlation_id)

        try:
            transactions_deleted = await self._purger.purge(uid, correlation_id)
            await self._identity_service.delete_identity(uid)
        except IdentityNotFoundError as e:
            self._audit_logger.log_deletion_failed(
                uid, e, ErrorCode.NOT_FOUND.value, correlation_id
            )
            raise AccountLifecycleError(ErrorCode.NOT_FOUND, NOT_FOUND_MESSAGE) from e
        except Exception as e:
            self._audit_logger.log_deletion_failed(
                uid, e, ErrorCode.INTERNAL.value, correlation_id
            )
            raise AccountLifecycleError(ErrorCode.INTERNAL, INTERNAL_MESSAGE) from e

        self._audit_logger.log_identity_deleted(uid, correlation_id)
        self._audit_logger.log_account_deleted(uid, transactions_deleted, correlation_id)

        return DeletionResult(uid=uid, transactions_deleted=transactions_deleted)
