"""
In-Memory Storage Implementation

Dict-backed stand-in for Firestore, used by the test suite and for running
the lifecycle locally without a Firebase project. Writes are applied all at
once, matching Firestore's batched-write atomicity.
"""

from datetime import datetime
from typing import Optional

from pocket_ledger.models.account import AccountSettings, TransactionRecord
from pocket_ledger.services.storage.interface import (
    AccountStorageInterface,
    NotFoundError,
    StorageError,
)


class InMemoryAccountStorage(AccountStorageInterface):
    """
    Account storage held in process memory.

    `fail_on` lets tests inject a StorageError for specific operations
    and uids, e.g. {("delete", "bob")}. "delete" also covers marking.
    """

    def __init__(self):
        self._settings: dict[str, AccountSettings] = {}
        self._transactions: dict[str, dict[str, TransactionRecord]] = {}
        self.fail_on: set[tuple[str, str]] = set()
        self.fail_query = False

    # -- seeding helpers (the client's side of the contract) ---------------

    def put_settings(self, settings: AccountSettings) -> None:
        self._settings[settings.uid] = settings

    def put_transaction(self, uid: str, transaction: TransactionRecord) -> None:
        self._transactions.setdefault(uid, {})[transaction.id] = transaction

    def transactions_for(self, uid: str) -> list[TransactionRecord]:
        return list(self._transactions.get(uid, {}).values())

    def _check(self, operation: str, uid: str) -> None:
        if (operation, uid) in self.fail_on:
            raise StorageError(f"Injected {operation} failure for {uid}")

    # -- AccountStorageInterface --------------------------------------------

    async def get_settings(self, uid: str) -> Optional[AccountSettings]:
        self._check("get", uid)
        return self._settings.get(uid)

    async def list_transaction_ids(self, uid: str) -> list[str]:
        self._check("list", uid)
        return list(self._transactions.get(uid, {}))

    async def delete_account_documents(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        self._check("delete", uid)
        remaining = self._transactions.get(uid, {})
        for transaction_id in transaction_ids:
            remaining.pop(transaction_id, None)
        if not remaining:
            self._transactions.pop(uid, None)
        self._settings.pop(uid, None)

    async def mark_for_deletion(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        self._check("delete", uid)
        settings = self._settings.get(uid)
        if settings is None:
            raise NotFoundError(f"Settings not found: {uid}")
        remaining = self._transactions.get(uid, {})
        for transaction_id in transaction_ids:
            remaining.pop(transaction_id, None)
        if not remaining:
            self._transactions.pop(uid, None)
        self._settings[uid] = settings.model_copy(update={"deletion_pending": True})

    async def touch_last_active(self, uid: str, timestamp: datetime) -> None:
        self._check("touch", uid)
        settings = self._settings.get(uid)
        if settings is None:
            raise NotFoundError(f"Settings not found: {uid}")
        self._settings[uid] = settings.model_copy(update={"last_active": timestamp})

    async def find_inactive_accounts(self, cutoff: datetime) -> list[str]:
        if self.fail_query:
            raise StorageError("Injected query failure")
        return [
            uid for uid, settings in self._settings.items()
            if settings.is_stale(cutoff)
        ]

    async def find_pending_deletions(self) -> list[str]:
        if self.fail_query:
            raise StorageError("Injected query failure")
        return [
            uid for uid, settings in self._settings.items()
            if settings.deletion_pending
        ]
