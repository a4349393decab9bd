"""
Tests for the scheduled inactivity sweep.
"""

import asyncio
from datetime import timedelta

import pytest

from conftest import CUTOFF, NOW
from pocket_ledger.lifecycle import InactivitySweep
from pocket_ledger.models.account import AccountSettings, SweepDecision
from pocket_ledger.services.identity import (
    IdentityNotFoundError,
    IdentityServiceError,
    InMemoryIdentityService,
)
from pocket_ledger.services.storage import InMemoryAccountStorage, StorageError


pytestmark = pytest.mark.asyncio

STALE = NOW - timedelta(days=3)


@pytest.fixture
def sweep(storage, identities, audit_logger):
    """Return a sweep over the in-memory backends."""
    return InactivitySweep(
        storage=storage,
        identity_service=identities,
        audit_logger=audit_logger,
    )


class TestSweepSelection:
    """Which accounts a cycle looks at."""

    async def test_cutoff_boundary_is_strict(self, sweep, seed_account):
        """Test exactly-at-cutoff is kept and one microsecond older is selected."""
        seed_account("at-cutoff", last_active=CUTOFF)
        seed_account("just-older", last_active=CUTOFF - timedelta(microseconds=1))

        report = await sweep.run(now=NOW)

        assert report.cutoff == CUTOFF
        assert report.matched == ["just-older"]
        assert report.deleted == ["just-older"]

    async def test_empty_sweep(self, sweep, storage, seed_account, logged_events):
        """Test a cycle with no stale accounts does nothing and succeeds."""
        seed_account("fresh", last_active=NOW)

        report = await sweep.run(now=NOW)

        assert report.is_empty
        assert report.deleted == report.refreshed == report.failed == []
        assert report.error is None
        assert (await storage.get_settings("fresh")).last_active == NOW
        assert len(logged_events("sweep_no_stale_accounts")) == 1

    async def test_custom_inactivity_window(self, storage, identities, audit_logger, seed_account):
        seed_account("guest", last_active=NOW - timedelta(hours=3))
        sweep = InactivitySweep(
            storage=storage,
            identity_service=identities,
            audit_logger=audit_logger,
            inactivity_window=timedelta(hours=2),
        )

        report = await sweep.run(now=NOW)

        assert report.deleted == ["guest"]


class TestSweepClassification:
    """What happens to each stale account."""

    async def test_anonymous_account_is_deleted(self, sweep, storage, identities, seed_account):
        seed_account("guest", transactions=4, last_active=STALE)

        report = await sweep.run(now=NOW)

        assert report.deleted == ["guest"]
        assert await storage.get_settings("guest") is None
        assert await storage.list_transaction_ids("guest") == []
        assert identities.exists("guest") is False

    async def test_linked_account_is_refreshed(self, sweep, storage, identities, seed_account):
        """Test a stale account with a provider is kept and timestamped."""
        seed_account("bob", "google.com", transactions=2, last_active=STALE)

        report = await sweep.run(now=NOW)

        assert report.refreshed == ["bob"]
        assert report.deleted == []
        settings = await storage.get_settings("bob")
        assert settings.last_active == NOW
        assert len(await storage.list_transaction_ids("bob")) == 2
        assert identities.exists("bob") is True

    async def test_refreshed_account_is_not_reselected(self, sweep, seed_account):
        seed_account("bob", "password", last_active=STALE)
        await sweep.run(now=NOW)

        report = await sweep.run(now=NOW + timedelta(hours=1))

        assert report.is_empty

    async def test_orphaned_settings_are_cleaned_up(self, sweep, storage, seed_account, logged_events):
        """Test data whose identity is gone is still deleted."""
        seed_account("ghost", transactions=1, last_active=STALE, with_identity=False)

        report = await sweep.run(now=NOW)

        assert report.deleted == ["ghost"]
        assert await storage.get_settings("ghost") is None
        [(_, event)] = logged_events("sweep_account_deleted")
        assert event["details"]["orphaned"] is True

    async def test_identity_lookup_failure_skips_account(
        self, sweep, storage, identities, seed_account, logged_events
    ):
        """Test an unexplained lookup failure neither deletes nor refreshes."""
        seed_account("carol", last_active=STALE)
        identities.fail_on.add(("get", "carol"))

        report = await sweep.run(now=NOW)

        assert report.skipped == ["carol"]
        assert report.deleted == report.refreshed == []
        assert (await storage.get_settings("carol")).last_active == STALE
        assert identities.exists("carol") is True
        [(level, event)] = logged_events("sweep_account_skipped")
        assert level == "warning"
        assert event["uid"] == "carol"

    async def test_failed_refresh_is_skipped(self, sweep, storage, seed_account):
        seed_account("bob", "password", last_active=STALE)
        storage.fail_on.add(("touch", "bob"))

        report = await sweep.run(now=NOW)

        assert report.skipped == ["bob"]
        assert report.refreshed == []

    async def test_classify(self, sweep, identities, seed_account):
        seed_account("guest")
        seed_account("bob", "password")
        identities.fail_on.add(("get", "carol"))

        assert await sweep.classify("guest") == (SweepDecision.DELETE, None)
        assert await sweep.classify("bob") == (SweepDecision.REFRESH, None)

        decision, error = await sweep.classify("nobody")
        assert decision == SweepDecision.DELETE
        assert isinstance(error, IdentityNotFoundError)

        decision, error = await sweep.classify("carol")
        assert decision == SweepDecision.SKIP
        assert isinstance(error, IdentityServiceError)


class TestSweepFailureIsolation:
    """One user's failure never affects the others or the trigger."""

    async def test_partial_failure_is_isolated(
        self, sweep, storage, identities, seed_account, logged_events
    ):
        """Test the first and third users are deleted when the second fails."""
        for uid in ("u1", "u2", "u3"):
            seed_account(uid, transactions=1, last_active=STALE)
        storage.fail_on.add(("delete", "u2"))

        report = await sweep.run(now=NOW)

        assert sorted(report.deleted) == ["u1", "u3"]
        assert report.failed == ["u2"]
        assert report.error is None
        for uid in ("u1", "u3"):
            assert await storage.get_settings(uid) is None
            assert identities.exists(uid) is False
        assert await storage.get_settings("u2") is not None
        assert identities.exists("u2") is True

        [(level, event)] = logged_events("sweep_account_failed")
        assert level == "error"
        assert event["uid"] == "u2"

    async def test_query_failure_does_not_raise(self, sweep, storage, logged_events):
        storage.fail_query = True

        report = await sweep.run(now=NOW)

        assert report.error is not None
        assert report.matched == []
        assert len(logged_events("sweep_failed")) == 1

    async def test_deletions_run_concurrently(self, identities, audit_logger):
        """Test every marked deletion is in flight before any completes."""

        class SlowStorage(InMemoryAccountStorage):
            def __init__(self):
                super().__init__()
                self.in_flight = 0
                self.max_in_flight = 0

            async def delete_account_documents(self, uid, transaction_ids):
                self.in_flight += 1
                self.max_in_flight = max(self.max_in_flight, self.in_flight)
                await asyncio.sleep(0.01)
                self.in_flight -= 1
                await super().delete_account_documents(uid, transaction_ids)

        storage = SlowStorage()
        for uid in ("u1", "u2", "u3"):
            storage.put_settings(AccountSettings(uid=uid, lastActive=STALE))
            identities.add(uid)
        sweep = InactivitySweep(storage=storage, identity_service=identities, audit_logger=audit_logger)

        report = await sweep.run(now=NOW)

        assert sorted(report.deleted) == ["u1", "u2", "u3"]
        assert storage.max_in_flight == 3

    async def test_completion_is_logged(self, sweep, seed_account, logged_events):
        seed_account("guest", last_active=STALE)
        seed_account("bob", "password", last_active=STALE)

        report = await sweep.run(now=NOW)

        [(_, started)] = logged_events("sweep_started")
        [(_, completed)] = logged_events("sweep_completed")
        assert started["correlation_id"] == completed["correlation_id"] == str(report.run_id)
        assert completed["details"]["deleted"] == 1
        assert completed["details"]["refreshed"] == 1



class TestSweepRecovery:
    """Deletions interrupted part-way are finished by a later cycle."""

    async def test_failed_identity_delete_is_retried_next_cycle(
        self, sweep, storage, identities, seed_account
    ):
        """Test a guest whose identity delete failed is fully removed later."""
        seed_account("guest", transactions=2, last_active=STALE)
        identities.fail_on.add(("delete", "guest"))

        first = await sweep.run(now=NOW)

        assert first.failed == ["guest"]
        assert await storage.list_transaction_ids("guest") == []
        settings = await storage.get_settings("guest")
        assert settings is not None
        assert settings.deletion_pending is True
        assert identities.exists("guest") is True

        identities.fail_on.clear()
        second = await sweep.run(now=NOW + timedelta(days=2))

        assert second.matched == ["guest"]
        assert second.deleted == ["guest"]
        assert await storage.get_settings("guest") is None
        assert identities.exists("guest") is False

    async def test_pending_deletion_is_selected_when_recently_active(
        self, sweep, storage, identities, seed_account
    ):
        """Test a marked account is finished even after lastActive was refreshed."""
        seed_account("guest", transactions=1, last_active=STALE)
        identities.fail_on.add(("delete", "guest"))
        await sweep.run(now=NOW)
        await storage.touch_last_active("guest", NOW)

        identities.fail_on.clear()
        report = await sweep.run(now=NOW + timedelta(hours=1))

        assert report.deleted == ["guest"]
        assert await storage.get_settings("guest") is None
        assert identities.exists("guest") is False

    async def test_identity_gone_before_delete_counts_as_deleted(
        self, storage, audit_logger, seed_account
    ):
        """Test an anonymous identity removed after classification is not a failure."""

        class VanishingIdentityService(InMemoryIdentityService):
            async def delete_identity(self, uid):
                self._identities.pop(uid, None)
                raise IdentityNotFoundError(uid)

        identities = VanishingIdentityService()
        identities.add("guest")
        seed_account("guest", transactions=3, last_active=STALE, with_identity=False)
        sweep = InactivitySweep(storage=storage, identity_service=identities, audit_logger=audit_logger)

        report = await sweep.run(now=NOW)

        assert report.deleted == ["guest"]
        assert report.failed == []
        assert await storage.get_settings("guest") is None
        assert await storage.list_transaction_ids("guest") == []

    async def test_pending_query_failure_does_not_raise(self, sweep, storage, seed_account):
        seed_account("guest", last_active=STALE)

        async def _fail():
            raise StorageError("query unavailable")
        storage.find_pending_deletions = _fail

        report = await sweep.run(now=NOW)

        assert report.error is not None
        assert await storage.get_settings("guest") is not None
