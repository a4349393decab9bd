"""
Tests for the audit logger.
"""

from unittest.mock import MagicMock
from uuid import uuid4

from pocket_ledger.audit import AuditLogger, create_correlation_id
from pocket_ledger.models.audit import AuditEvent, AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_severity_selects_log_level(self, audit_logger, log_sink):
        """Test each severity goes to the matching logger method."""
        for severity in AuditSeverity:
            audit_logger.log(
                AuditEvent(
                    event_type=AuditEventType.SYSTEM_ERROR,
                    severity=severity,
                    description=severity.value,
                )
            )

        assert log_sink.debug.call_count == 1
        assert log_sink.info.call_count == 1
        assert log_sink.warning.call_count == 1
        assert log_sink.error.call_count == 2  # error + critical

    def test_log_carries_uid_and_correlation(self, audit_logger, log_sink):
        run_id = uuid4()
        audit_logger.log_sweep_account_refreshed("bob", run_id)

        args, kwargs = log_sink.info.call_args
        assert args == ("audit_event",)
        assert kwargs["uid"] == "bob"
        assert kwargs["correlation_id"] == str(run_id)
        assert kwargs["event_type"] == "sweep_account_refreshed"

    def test_logging_failure_is_swallowed(self):
        """Test a broken log sink never breaks a lifecycle operation."""
        sink = MagicMock()
        sink.error.side_effect = RuntimeError("log pipe closed")
        logger = AuditLogger(logger=sink)

        assert logger.log_deletion_failed("alice", ValueError("x"), "internal") is None
        assert logger.log(
            AuditEvent(
                event_type=AuditEventType.SYSTEM_ERROR,
                severity=AuditSeverity.ERROR,
                description="x",
            )
        ) is False

    def test_unserializable_event_is_swallowed(self, log_sink):
        """Test a failure building the log record is reported, not raised."""
        logger = AuditLogger(logger=log_sink)
        event = MagicMock(severity=AuditSeverity.INFO)
        event.to_log_dict.side_effect = TypeError("not serializable")

        assert logger.log(event) is False
        log_sink.info.assert_not_called()

    def test_default_logger_is_structlog(self):
        logger = AuditLogger()
        assert logger.log(
            AuditEvent(event_type=AuditEventType.SWEEP_STARTED, description="started")
        ) is True

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()
