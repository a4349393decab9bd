"""
Storage Services Package

Provides the abstract account storage interface and its implementations.
Firestore is the production backend; the in-memory store backs the tests.
"""

from pocket_ledger.services.storage.interface import (
    AccountStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
)
from pocket_ledger.services.storage.memory import InMemoryAccountStorage

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAccountStorage",
]
