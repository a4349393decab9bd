"""Services package."""

from pocket_ledger.services.identity import (
    IdentityNotFoundError,
    IdentityServiceError,
    IdentityServiceInterface,
    InMemoryIdentityService,
)
from pocket_ledger.services.storage import (
    AccountStorageInterface,
    ConnectionError,
    InMemoryAccountStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Identity services
    "IdentityNotFoundError",
    "IdentityServiceError",
    "IdentityServiceInterface",
    "InMemoryIdentityService",
    # Storage services
    "AccountStorageInterface",
    "ConnectionError",
    "InMemoryAccountStorage",
    "NotFoundError",
    "StorageError",
]
