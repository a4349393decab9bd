"""
Firebase Authentication Identity Service

Wraps the firebase-admin auth API. The Admin SDK's auth calls are
blocking HTTP requests, so they run in a worker thread to keep the
sweep's concurrent deletions from serialising on the event loop.

An identity is anonymous when it has no linked sign-in provider
(UserRecord.provider_data is empty).
"""

import asyncio
from typing import Optional

from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from pocket_ledger.models.account import Identity
from pocket_ledger.services.firebase_app import FirebaseClient
from pocket_ledger.services.identity.interface import (
    IdentityNotFoundError,
    IdentityServiceError,
    IdentityServiceInterface,
)


class FirebaseIdentityService(IdentityServiceInterface):
    """
    Identity lookups and deletions against Firebase Authentication.
    """

    def __init__(self, client: Optional[FirebaseClient] = None):
        self._client = client or FirebaseClient()

    @staticmethod
    def _to_identity(user: auth.UserRecord) -> Identity:
        return Identity(
            uid=user.uid,
            provider_ids=[info.provider_id for info in user.provider_data],
            email=user.email,
        )

    async def get_identity(self, uid: str) -> Identity:
        """Fetch an identity by uid."""
        app = await asyncio.to_thread(self._client.connect)
        try:
            user = await asyncio.to_thread(auth.get_user, uid, app=app)
        except auth.UserNotFoundError as e:
            raise IdentityNotFoundError(uid) from e
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            raise IdentityServiceError(f"Failed to look up identity {uid}: {e}") from e
        return self._to_identity(user)

    async def delete_identity(self, uid: str) -> None:
        """Delete an identity by uid."""
        app = await asyncio.to_thread(self._client.connect)
        try:
            await asyncio.to_thread(auth.delete_user, uid, app=app)
        except auth.UserNotFoundError as e:
            raise IdentityNotFoundError(uid) from e
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            raise IdentityServiceError(f"Failed to delete identity {uid}: {e}") from e
