"""Account lifecycle package: purge, on-demand deletion, inactivity sweep, activity."""

from pocket_ledger.lifecycle.activity import ActivityRecorder
from pocket_ledger.lifecycle.deletion import AccountDeletionFlow
from pocket_ledger.lifecycle.errors import AccountLifecycleError, ErrorCode
from pocket_ledger.lifecycle.purge import AccountPurger
from pocket_ledger.lifecycle.sweep import DEFAULT_INACTIVITY_WINDOW, InactivitySweep

__all__ = [
    "AccountDeletionFlow",
    "AccountLifecycleError",
    "AccountPurger",
    "ActivityRecorder",
    "DEFAULT_INACTIVITY_WINDOW",
    "ErrorCode",
    "InactivitySweep",
]
