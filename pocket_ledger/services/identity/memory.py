"""
In-Memory Identity Service

Stand-in for Firebase Authentication used by the tests and local runs.
"""

from pocket_ledger.models.account import Identity
from pocket_ledger.services.identity.interface import (
    IdentityNotFoundError,
    IdentityServiceError,
    IdentityServiceInterface,
)


class InMemoryIdentityService(IdentityServiceInterface):
    """
    Identities held in process memory.

    `fail_on` lets tests inject an IdentityServiceError for specific
    operations and uids, e.g. {("get", "carol")}.
    """

    def __init__(self):
        self._identities: dict[str, Identity] = {}
        self.fail_on: set[tuple[str, str]] = set()

    def add(self, uid: str, *provider_ids: str) -> Identity:
        """Register an identity; no providers means an anonymous guest."""
        identity = Identity(uid=uid, provider_ids=list(provider_ids))
        self._identities[uid] = identity
        return identity

    def exists(self, uid: str) -> bool:
        return uid in self._identities

    def _check(self, operation: str, uid: str) -> None:
        if (operation, uid) in self.fail_on:
            raise IdentityServiceError(f"Injected {operation} failure for {uid}")

    async def get_identity(self, uid: str) -> Identity:
        self._check("get", uid)
        try:
            return self._identities[uid]
        except KeyError:
            raise IdentityNotFoundError(uid)

    async def delete_identity(self, uid: str) -> None:
        self._check("delete", uid)
        if self._identities.pop(uid, None) is None:
            raise IdentityNotFoundError(uid)
