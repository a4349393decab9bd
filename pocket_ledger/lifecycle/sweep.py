"""
Inactivity Sweep

Scheduled cleanup of abandoned guest accounts.

Flow (one cycle):
1. cutoff = now - inactivity window (24h by default)
2. Find settings documents with lastActive strictly before the cutoff
3. Classify each owner, one at a time:
   - anonymous identity         -> delete
   - linked identity            -> refresh lastActive, keep
   - identity no longer exists  -> delete (orphaned data)
   - lookup failed otherwise    -> skip until next cycle
4. Delete every marked account concurrently and wait for all of them

Accounts with a live identity are deleted in two phases: transactions
go and the settings document is marked, then the identity is deleted,
then the settings document goes. If the identity delete fails the marked
settings document is still there, and the next cycle picks it up again
regardless of its lastActive.

A failure for one user never stops the others, and nothing escapes
run(): the scheduler has no caller to report to, so every failure is
logged and picked up again by the next cycle.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from pocket_ledger.audit import AuditLogger
from pocket_ledger.lifecycle.purge import AccountPurger
from pocket_ledger.models.account import SweepDecision, SweepReport, utc_now
from pocket_ledger.services.identity import IdentityNotFoundError, IdentityServiceInterface
from pocket_ledger.services.storage import AccountStorageInterface


DEFAULT_INACTIVITY_WINDOW = timedelta(hours=24)


class InactivitySweep:
    """
    Deletes stale anonymous accounts and refreshes stale linked ones.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        identity_service: IdentityServiceInterface,
        purger: Optional[AccountPurger] = None,
        audit_logger: Optional[AuditLogger] = None,
        inactivity_window: timedelta = DEFAULT_INACTIVITY_WINDOW,
    ):
        self._storage = storage
        self._identity_service = identity_service
        self._audit_logger = audit_logger or AuditLogger()
        self._purger = purger or AccountPurger(storage, self._audit_logger)
        self._inactivity_window = inactivity_window

    async def run(self, now: Optional[datetime] = None) -> SweepReport:
        """
        Run one sweep cycle.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            SweepReport describing what happened to each matched account.
            Never raises.
        """
        now = now or utc_now()
        report = SweepReport(started_at=now, cutoff=now - self._inactivity_window)
        self._audit_logger.log_sweep_started(report.run_id, report.cutoff)

        try:
            await self._run_cycle(report, now)
        except Exception as e:
            report.error = str(e)
            self._audit_logger.log_sweep_failed(e, report.run_id)
            return report

        self._audit_logger.log_sweep_completed(report.summary(), report.run_id)
        return report

    async def _run_cycle(self, report: SweepReport, now: datetime) -> None:
        stale = await self._storage.find_inactive_accounts(report.cutoff)
        pending = await self._storage.find_pending_deletions()
        report.matched = stale + [uid for uid in pending if uid not in stale]
        if report.is_empty:
            self._audit_logger.log_sweep_no_stale_accounts(report.run_id, report.cutoff)
            return

        marked: list[tuple[str, bool]] = []
        for uid in report.matched:
            if uid in pending:
                # Deletion already under way
                marked.append((uid, False))
                continue

            decision, error = await self.classify(uid)

            if decision == SweepDecision.DELETE:
                marked.append((uid, isinstance(error, IdentityNotFoundError)))
            elif decision == SweepDecision.REFRESH:
                await self._refresh(uid, now, report)
            else:
                report.skipped.append(uid)
                self._audit_logger.log_sweep_account_skipped(uid, error, report.run_id)

        if not marked:
            return

        results = await asyncio.gather(
            *(self._delete_account(uid, orphaned, report) for uid, orphaned in marked),
            return_exceptions=True,
        )
        for (uid, _), result in zip(marked, results):
            if isinstance(result, BaseException):
                report.failed.append(uid)
                self._audit_logger.log_sweep_account_failed(uid, result, report.run_id)
            else:
                report.deleted.append(uid)

    async def classify(self, uid: str) -> tuple[SweepDecision, Optional[Exception]]:
        """
        Decide what to do with a stale account.

        Returns:
            (decision, lookup_error). lookup_error is an IdentityNotFoundError
            for orphaned data and the failure cause when skipping.
        """
        try:
            identity = await self._identity_service.get_identity(uid)
        except IdentityNotFoundError as e:
            return SweepDecision.DELETE, e
        except Exception as e:
            return SweepDecision.SKIP, e

        if identity.is_anonymous:
            return SweepDecision.DELETE, None
        return SweepDecision.REFRESH, None

    async def _refresh(self, uid: str, now: datetime, report: SweepReport) -> None:
        try:
            await self._storage.touch_last_active(uid, now)
        except Exception as e:
            report.skipped.append(uid)
            self._audit_logger.log_sweep_account_skipped(uid, e, report.run_id)
            return

        report.refreshed.append(uid)
        self._audit_logger.log_sweep_account_refreshed(uid, report.run_id)

    async def _delete_account(self, uid: str, orphaned: bool, report: SweepReport) -> int:
        if orphaned:
            transactions_deleted = await self._purger.purge(uid, report.run_id)
        else:
            transactions_deleted = await self._purger.mark_for_deletion(uid, report.run_id)
            try:
                await self._identity_service.delete_identity(uid)
            except IdentityNotFoundError:
                # Removed between classification and deletion
                pass
            transactions_deleted += await self._purger.purge(uid, report.run_id)

        self._audit_logger.log_sweep_account_deleted(
            uid, transactions_deleted, orphaned, report.run_id
        )
        return transactions_deleted
