"""Unit tests for logging configuration, PII redaction and audit events."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from patient_intake.logging_audit import (
    PIIRedactingFormatter,
    configure_logging,
    get_logger,
    log_audit_event,
    log_transaction,
)


def format_message(message: str, redact_pii: bool = True) -> str:
    formatter = PIIRedactingFormatter(fmt="%(message)s", redact_pii=redact_pii)
    record = logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)
    return formatter.format(record)


class TestPIIRedactingFormatter:
    """Test suite for PII redaction."""

    def test_phn_is_redacted(self):
        assert format_message("Registered PHN 0123456789") == "Registered PHN [PHN-REDACTED]"

    @pytest.mark.parametrize("nic", ["901234567V", "901234567x", "200012345678"])
    def test_nic_is_redacted(self, nic):
        assert format_message(f"NIC {nic} captured") == "NIC [NIC-REDACTED] captured"

    def test_phone_with_separators_is_redacted(self):
        assert "[PHONE-REDACTED]" in format_message("Mobile +94 77 123 4567")
        assert "[PHONE-REDACTED]" in format_message("Residence 011-2345678")

    def test_name_fragment_is_redacted(self):
        result = format_message('Patient record name="Amal Perera" | status=ok')

        assert "Amal" not in result
        assert "name=[NAME-REDACTED]" in result

    def test_patient_label_is_redacted(self):
        assert format_message("Patient: Amal Perera") == "Patient: [NAME-REDACTED]"

    def test_disabled_redaction_keeps_message(self):
        message = "Patient: Amal Perera PHN 0123456789"

        assert format_message(message, redact_pii=False) == message


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_console_and_rotating_file_handlers(self, tmp_path, restore_root_logger):
        # Arrange
        log_file = tmp_path / "logs" / "app.log"

        # Act
        configure_logging(level="WARNING", log_file=log_file)

        # Assert
        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5
        assert log_file.parent.exists()

    def test_reconfiguration_does_not_stack_handlers(self, tmp_path, restore_root_logger):
        configure_logging(log_file=tmp_path / "a.log")
        configure_logging(log_file=tmp_path / "b.log")

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1

    def test_redaction_applies_to_file_output(self, tmp_path, restore_root_logger):
        # Arrange
        log_file = tmp_path / "redacted.log"
        configure_logging(level="INFO", log_file=log_file, redact_pii=True)

        # Act
        get_logger("patient_intake.test").info("Allocated PHN 0123456789")
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Assert
        content = log_file.read_text(encoding="utf-8")
        assert "[PHN-REDACTED]" in content
        assert "0123456789" not in content

    def test_invalid_level_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD", log_file=tmp_path / "x.log")


class TestAudit:
    """Test suite for audit trail helpers."""

    def test_success_event_logged_at_info(self, caplog):
        with caplog.at_level(logging.INFO):
            log_audit_event("PATIENT_REGISTERED", {"status": "success", "phn": "0123456789"})

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage().startswith(
            "AUDIT [PATIENT_REGISTERED] | status=success | phn=0123456789 | correlation_id="
        )

    def test_failure_event_logged_at_error(self, caplog):
        with caplog.at_level(logging.INFO):
            log_audit_event(
                "REGISTRATION_FAILED",
                {"status": "failure", "error_message": "Name required", "duration": 0.5},
            )

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert "duration=0.50s | error_message=Name required" in record.getMessage()

    def test_extra_fields_follow_known_fields(self, caplog):
        with caplog.at_level(logging.INFO):
            log_audit_event("CARD_PRINTED", {"printer": "browser", "status": "success"})

        message = caplog.records[-1].getMessage()
        assert message.index("status=success") < message.index("printer=browser")

    def test_transaction_bodies_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG):
            log_transaction("PATIENT_CREATE", request='{"a": 1}', response='{"uuid": "x"}')

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("TRANSACTION [PATIENT_CREATE] | status=success") for m in messages)
        assert any('{"a": 1}' in m for m in messages if m.startswith("TRANSACTION REQUEST"))
