"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the document store.
This allows us to:
1. Keep the lifecycle logic free of Firestore SDK globals
2. Use in-memory storage for testing
3. Swap the backend without touching purge / deletion / sweep code

The interface is intentionally small - only the operations the account
lifecycle needs. The client writes settings and transactions directly;
this backend only reads, timestamps and deletes them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pocket_ledger.models.account import AccountSettings


class AccountStorageInterface(ABC):
    """
    Abstract interface for account document storage.

    Layout: one settings document per user, keyed by uid, with a
    transactions subcollection beneath it.
    """

    @abstractmethod
    async def get_settings(self, uid: str) -> Optional[AccountSettings]:
        """
        Read a user's settings document.

        Returns:
            The settings if the document exists, None otherwise

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def list_transaction_ids(self, uid: str) -> list[str]:
        """
        List the IDs of every transaction under a user.

        Returns:
            Transaction document IDs (empty if there are none)

        Raises:
            StorageError: If the listing fails
        """
        pass

    @abstractmethod
    async def delete_account_documents(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        """
        Delete the given transactions and the settings document in one
        all-or-nothing write.

        Deleting documents that no longer exist is not an error.

        Raises:
            StorageError: If the write fails (nothing was deleted)
        """
        pass

    @abstractmethod
    async def mark_for_deletion(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        """
        Delete the given transactions and set the deletion marker on the
        settings document in one all-or-nothing write.

        The settings document itself is kept, so an account whose identity
        delete fails afterwards can still be found and finished later.

        Raises:
            NotFoundError: If the settings document doesn't exist
            StorageError: If the write fails (nothing was changed)
        """
        pass

    @abstractmethod
    async def touch_last_active(self, uid: str, timestamp: datetime) -> None:
        """
        Set the last-activity timestamp on an existing settings document.

        Never creates the document.

        Raises:
            NotFoundError: If the settings document doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def find_inactive_accounts(self, cutoff: datetime) -> list[str]:
        """
        Find settings documents whose last-activity timestamp is strictly
        older than the cutoff.

        Returns:
            The uids (document keys) of matching accounts, in no particular order

        Raises:
            StorageError: If the query fails
        """
        pass

    @abstractmethod
    async def find_pending_deletions(self) -> list[str]:
        """
        Find settings documents carrying the deletion marker.

        Returns:
            The uids of accounts whose deletion was started but not finished

        Raises:
            StorageError: If the query fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
