"""
Firebase Admin App Wrapper

Handles credentials and initialisation of the firebase-admin app shared by
the Firestore storage and the Firebase Auth identity service. The app is
created lazily on first use and injected into the services, so nothing in
the lifecycle code reaches for a process-wide SDK global.
"""

from typing import Optional

import firebase_admin
from firebase_admin import credentials
from google.cloud.firestore import AsyncClient
from tenacity import retry, stop_after_attempt, wait_exponential

from pocket_ledger.config import FirebaseSettings, get_settings
from pocket_ledger.services.storage.interface import ConnectionError


class FirebaseClient:
    """
    Low-level Firebase client wrapper.

    Handles authentication and provides retry logic for initialisation.
    """

    def __init__(self, settings: Optional[FirebaseSettings] = None):
        self._settings = settings or get_settings().firebase
        self._app: Optional[firebase_admin.App] = None
        self._firestore: Optional[AsyncClient] = None

    @property
    def settings(self) -> FirebaseSettings:
        return self._settings

    def _credentials(self) -> credentials.Base:
        if self._settings.credentials_path:
            return credentials.Certificate(self._settings.credentials_path)
        return credentials.ApplicationDefault()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> firebase_admin.App:
        """
        Get the default firebase-admin app, initialising it if needed.

        Uses a service account file when configured, otherwise
        application default credentials (the Cloud Functions runtime).
        """
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                options = {}
                if self._settings.project_id:
                    options["projectId"] = self._settings.project_id
                try:
                    self._app = firebase_admin.initialize_app(
                        self._credentials(),
                        options or None,
                    )
                except FileNotFoundError:
                    raise ConnectionError(
                        f"Firebase credentials file not found: {self._settings.credentials_path}"
                    )
                except ValueError:
                    # Initialised concurrently by another caller
                    self._app = firebase_admin.get_app()
                except Exception as e:
                    raise ConnectionError(f"Failed to initialise Firebase: {e}")

        return self._app

    def firestore(self) -> AsyncClient:
        """
        Get an async Firestore client using the app's project and credentials.

        Async gRPC channels are bound to the event loop that opened them, so
        each FirebaseClient (one per invocation) owns its own Firestore client
        instead of sharing the SDK's per-app cached one.
        """
        if self._firestore is None:
            app = self.connect()
            self._firestore = AsyncClient(
                project=app.project_id,
                credentials=app.credential.get_credential(),
            )
        return self._firestore
