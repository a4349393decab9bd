"""
Abstract Identity Service Interface

The authentication service owns identities; the account lifecycle only
looks them up and deletes them. Keeping this behind an interface lets the
sweep and deletion flows run against an in-memory fake in tests.
"""

from abc import ABC, abstractmethod

from pocket_ledger.models.account import Identity


class IdentityServiceInterface(ABC):
    """
    Abstract interface for the authentication identity authority.
    """

    @abstractmethod
    async def get_identity(self, uid: str) -> Identity:
        """
        Look up an identity.

        Raises:
            IdentityNotFoundError: If no identity has this uid
            IdentityServiceError: If the lookup fails for any other reason
        """
        pass

    @abstractmethod
    async def delete_identity(self, uid: str) -> None:
        """
        Delete an identity.

        Raises:
            IdentityNotFoundError: If no identity has this uid
            IdentityServiceError: If the delete fails for any other reason
        """
        pass


class IdentityServiceError(Exception):
    """Base exception for identity service operations."""
    pass


class IdentityNotFoundError(IdentityServiceError):
    """The identity does not exist (never did, or already deleted)."""

    def __init__(self, uid: str, message: str = ""):
        self.uid = uid
        super().__init__(message or f"Identity not found: {uid}")
