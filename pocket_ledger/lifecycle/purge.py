"""
Account Data Purge

Irreversibly removes a user's settings document and every transaction
beneath it. Shared by the on-demand deletion and the inactivity sweep.
"""

from typing import Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.services.storage import AccountStorageInterface


class AccountPurger:
    """
    Deletes all of one user's documents.

    The transactions and the settings document are removed in a single
    atomic write, so a failure leaves the account fully intact rather
    than half-deleted. Storage errors propagate to the caller unretried.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()

    async def purge(self, uid: str, correlation_id: Optional[UUID] = None) -> int:
        """
        Purge a user's data.

        Args:
            uid: The user's identity ID (also their settings document key)
            correlation_id: Ties the purge to the request or sweep cycle

        Returns:
            Number of transaction records removed

        Raises:
            ValueError: If uid is empty
            StorageError: If listing or deleting fails
        """
        if not uid or not uid.strip():
            raise ValueError("A user ID is required to purge account data")

        transaction_ids = await self._storage.list_transaction_ids(uid)
        await self._storage.delete_account_documents(uid, transaction_ids)

        self._audit_logger.log_account_purged(uid, len(transaction_ids), correlation_id)
        return len(transaction_ids)

    async def mark_for_deletion(self, uid: str, correlation_id: Optional[UUID] = None) -> int:
        """
        Remove a user's transactions and flag their settings document.

        The first half of a two-phase delete: the settings document stays
        behind, marked, until the owning identity is gone and purge()
        finishes the job.

        Returns:
            Number of transaction records removed

        Raises:
            ValueError: If uid is empty
            StorageError: If listing or writing fails
        """
        if not uid or not uid.strip():
            raise ValueError("A user ID is required to purge account data")

        transaction_ids = await self._storage.list_transaction_ids(uid)
        await self._storage.mark_for_deletion(uid, transaction_ids)

        self._audit_logger.log_account_marked_for_deletion(
            uid, len(transaction_ids), correlation_id
        )
        return len(transaction_ids)
