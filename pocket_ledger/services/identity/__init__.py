"""
Identity Services Package

Provides the abstract identity service interface and its implementations.
Firebase Authentication is the production backend.
"""

from pocket_ledger.services.identity.interface import (
    IdentityNotFoundError,
    IdentityServiceError,
    IdentityServiceInterface,
)
from pocket_ledger.services.identity.memory import InMemoryIdentityService

__all__ = [
    # Interfaces
    "IdentityServiceInterface",
    # Exceptions
    "IdentityNotFoundError",
    "IdentityServiceError",
    # Implementations
    "InMemoryIdentityService",
]
