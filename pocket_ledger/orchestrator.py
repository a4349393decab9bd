"""
Main Orchestrator for Pocket Ledger

Wires the account lifecycle flows to their backends:
1. On-demand deletion (callable → purge → delete identity)
2. Inactivity sweep (schedule → classify → refresh / delete)
3. Activity recording (callable → refresh lastActive)

DESIGN DECISION: The Firebase app is created here, once, and injected
into the storage and identity services. The lifecycle classes never
touch SDK globals, so the same code runs against the in-memory fakes.
"""

from typing import Optional

from pocket_ledger.audit import AuditLogger, configure_logging
from pocket_ledger.config import get_settings
from pocket_ledger.lifecycle import (
    AccountDeletionFlow,
    AccountPurger,
    ActivityRecorder,
    InactivitySweep,
)
from pocket_ledger.services.identity import IdentityServiceInterface, InMemoryIdentityService
from pocket_ledger.services.storage import AccountStorageInterface, InMemoryAccountStorage


def create_app_components(
    use_firebase: bool = True,
    storage: Optional[AccountStorageInterface] = None,
    identity_service: Optional[IdentityServiceInterface] = None,
) -> tuple[AccountDeletionFlow, InactivitySweep, ActivityRecorder]:
    """
    Factory function to create all application components.

    Args:
        use_firebase: Whether to back the flows with Firestore and
                      Firebase Auth. Set to False to use in-memory
                      backends (tests, local runs).
        storage: Explicit storage backend (overrides use_firebase)
        identity_service: Explicit identity backend (overrides use_firebase)

    Returns:
        (deletion_flow, sweep, activity_recorder)
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    if storage is None or identity_service is None:
        if use_firebase:
            from pocket_ledger.services.firebase_app import FirebaseClient
            from pocket_ledger.services.identity.firebase_auth import FirebaseIdentityService
            from pocket_ledger.services.storage.firestore import FirestoreAccountStorage

            firebase_client = FirebaseClient(settings.firebase)
            # Initialise before any event loop runs; connect() retries with blocking sleeps
            firebase_client.connect()
            storage = storage or FirestoreAccountStorage(firebase_client)
            identity_service = identity_service or FirebaseIdentityService(firebase_client)
        else:
            storage = storage or InMemoryAccountStorage()
            identity_service = identity_service or InMemoryIdentityService()

    audit_logger = AuditLogger()
    purger = AccountPurger(storage, audit_logger)

    deletion_flow = AccountDeletionFlow(
        storage=storage,
        identity_service=identity_service,
        purger=purger,
        audit_logger=audit_logger,
    )

    sweep = InactivitySweep(
        storage=storage,
        identity_service=identity_service,
        purger=purger,
        audit_logger=audit_logger,
        inactivity_window=settings.sweep.inactivity_window,
    )

    activity_recorder = ActivityRecorder(
        storage=storage,
        audit_logger=audit_logger,
    )

    return deletion_flow, sweep, activity_recorder
