"""
Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the store the client already writes to.
Layout:
    userSettings/{uid}                      settings document
    userSettings/{uid}/transactions/{id}    one document per transaction

Firestore has no cascading deletes, so the purge deletes the transactions
and the settings document explicitly. Both go into a single batched write,
which Firestore commits atomically.

Collection and field names come from FirebaseSettings.
"""

from datetime import datetime
from typing import Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore import AsyncClient, AsyncDocumentReference
from google.cloud.firestore_v1.base_query import FieldFilter

from pocket_ledger.models.account import AccountSettings
from pocket_ledger.services.firebase_app import FirebaseClient
from pocket_ledger.services.storage.interface import (
    AccountStorageInterface,
    NotFoundError,
    StorageError,
)


class FirestoreAccountStorage(AccountStorageInterface):
    """
    Firestore implementation of account storage.

    Uses the async Firestore client so the sweep can fan deletions out
    concurrently on one event loop.
    """

    def __init__(self, client: Optional[FirebaseClient] = None):
        self._client = client or FirebaseClient()
        self._settings = self._client.settings

    @property
    def _db(self) -> AsyncClient:
        return self._client.firestore()

    def _settings_ref(self, uid: str) -> AsyncDocumentReference:
        return self._db.collection(self._settings.settings_collection).document(uid)

    async def get_settings(self, uid: str) -> Optional[AccountSettings]:
        """Read a user's settings document."""
        try:
            snapshot = await self._settings_ref(uid).get()
        except Exception as e:
            raise StorageError(f"Failed to read settings for {uid}: {e}") from e

        if not snapshot.exists:
            return None
        return AccountSettings.from_document(
            uid,
            snapshot.to_dict() or {},
            last_active_field=self._settings.last_active_field,
            deletion_marker_field=self._settings.deletion_marker_field,
        )

    async def list_transaction_ids(self, uid: str) -> list[str]:
        """List transaction document IDs under a user."""
        transactions = self._settings_ref(uid).collection(
            self._settings.transactions_collection
        )
        try:
            return [ref.id async for ref in transactions.list_documents()]
        except Exception as e:
            raise StorageError(f"Failed to list transactions for {uid}: {e}") from e

    async def delete_account_documents(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        """Delete transactions and settings in one atomic batch."""
        settings_ref = self._settings_ref(uid)
        transactions = settings_ref.collection(self._settings.transactions_collection)

        batch = self._db.batch()
        for transaction_id in transaction_ids:
            batch.delete(transactions.document(transaction_id))
        batch.delete(settings_ref)

        try:
            await batch.commit()
        except Exception as e:
            raise StorageError(f"Failed to delete account documents for {uid}: {e}") from e

    async def mark_for_deletion(
        self,
        uid: str,
        transaction_ids: list[str],
    ) -> None:
        """Delete transactions and set the deletion marker in one atomic batch."""
        settings_ref = self._settings_ref(uid)
        transactions = settings_ref.collection(self._settings.transactions_collection)

        batch = self._db.batch()
        for transaction_id in transaction_ids:
            batch.delete(transactions.document(transaction_id))
        batch.update(settings_ref, {self._settings.deletion_marker_field: True})

        try:
            await batch.commit()
        except gcp_exceptions.NotFound as e:
            raise NotFoundError(f"Settings not found: {uid}") from e
        except Exception as e:
            raise StorageError(f"Failed to mark {uid} for deletion: {e}") from e

    async def touch_last_active(self, uid: str, timestamp: datetime) -> None:
        """Update lastActive; update() fails instead of creating a missing document."""
        try:
            await self._settings_ref(uid).update(
                {self._settings.last_active_field: timestamp}
            )
        except gcp_exceptions.NotFound as e:
            raise NotFoundError(f"Settings not found: {uid}") from e
        except Exception as e:
            raise StorageError(f"Failed to update activity for {uid}: {e}") from e

    async def find_inactive_accounts(self, cutoff: datetime) -> list[str]:
        """Query settings with lastActive strictly before the cutoff."""
        query = self._db.collection(self._settings.settings_collection).where(
            filter=FieldFilter(self._settings.last_active_field, "<", cutoff)
        )
        try:
            return [snapshot.id async for snapshot in query.stream()]
        except Exception as e:
            raise StorageError(f"Failed to query inactive accounts: {e}") from e

    async def find_pending_deletions(self) -> list[str]:
        """Query settings carrying the deletion marker."""
        query = self._db.collection(self._settings.settings_collection).where(
            filter=FieldFilter(self._settings.deletion_marker_field, "==", True)
        )
        try:
            return [snapshot.id async for snapshot in query.stream()]
        except Exception as e:
            raise StorageError(f"Failed to query pending deletions: {e}") from e
