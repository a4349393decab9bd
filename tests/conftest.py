"""
Pytest fixtures for Pocket Ledger tests.

All tests run against the in-memory storage and identity services;
no Firebase project is contacted.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from unittest.mock import MagicMock

import pytest

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.account import AccountSettings, TransactionRecord, TransactionType
from pocket_ledger.services.identity import InMemoryIdentityService
from pocket_ledger.services.storage import InMemoryAccountStorage


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
CUTOFF = NOW - timedelta(hours=24)


@pytest.fixture
def storage():
    """Return an empty in-memory account store."""
    return InMemoryAccountStorage()


@pytest.fixture
def identities():
    """Return an empty in-memory identity service."""
    return InMemoryIdentityService()


@pytest.fixture
def log_sink():
    """Logger double that records every structured log call."""
    return MagicMock()


@pytest.fixture
def audit_logger(log_sink):
    """Return an audit logger writing to the log sink."""
    return AuditLogger(logger=log_sink)


@pytest.fixture
def logged_events(log_sink):
    """Factory returning (level, event dict) pairs recorded by the sink."""
    def _logged_events(event_type: Optional[str] = None):
        events = []
        for level in ("debug", "info", "warning", "error"):
            for call in getattr(log_sink, level).call_args_list:
                if event_type is None or call.kwargs.get("event_type") == event_type:
                    events.append((level, call.kwargs))
        return events
    return _logged_events


@pytest.fixture
def seed_account(storage, identities):
    """
    Factory fixture to create an account.

    No providers means an anonymous identity. with_identity=False leaves
    the settings document without an owning identity (orphan).
    """
    def _seed_account(
        uid: str,
        *providers: str,
        transactions: int = 0,
        last_active: Optional[datetime] = NOW,
        with_identity: bool = True,
        budget: float = 500.0,
    ):
        storage.put_settings(
            AccountSettings(
                uid=uid,
                budget=budget,
                currency="$",
                appTitle=f"{uid}'s budget",
                lastActive=last_active,
            )
        )
        for index in range(transactions):
            storage.put_transaction(
                uid,
                TransactionRecord(
                    id=f"{uid}-txn-{index}",
                    description=f"Item {index}",
                    type=TransactionType.EXPENSE if index % 2 == 0 else TransactionType.INCOME,
                    amount=Decimal("12.50"),
                    createdAt=NOW,
                ),
            )
        if with_identity:
            identities.add(uid, *providers)
    return _seed_account
