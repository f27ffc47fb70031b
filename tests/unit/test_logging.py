"""
Unit tests for logging setup.
"""

import logging

from utils.logging_config import RedactSecretsFilter, setup_logging


def make_record(msg, args=None):
    return logging.LogRecord("test", logging.ERROR, __file__, 1, msg, args, None)


def test_stripe_keys_are_redacted():
    record = make_record("Stripe rejected key sk_live_51Habc123 for %s", ("pi_1",))

    RedactSecretsFilter().filter(record)

    assert record.getMessage() == "Stripe rejected key [REDACTED] for pi_1"


def test_bearer_tokens_are_redacted():
    record = make_record("PayPal call with Bearer A21AA.token-x failed")

    RedactSecretsFilter().filter(record)

    assert "A21AA" not in record.getMessage()


def test_plain_messages_untouched():
    record = make_record("Booking %s paid", ("b-1",))

    RedactSecretsFilter().filter(record)

    assert record.args == ("b-1",)
    assert record.getMessage() == "Booking b-1 paid"


def test_file_handler_in_log_dir(tmp_path):
    logger = setup_logging("tests.logging.file", log_file="test.log", log_dir=str(tmp_path))
    logger.info("hello")

    assert (tmp_path / "test.log").exists()
    assert setup_logging("tests.logging.file") is logger
    assert len(logger.handlers) == 2


def test_empty_log_dir_disables_file_logging(monkeypatch):
    monkeypatch.setenv("LOG_DIR", "")

    logger = setup_logging("tests.logging.console_only", log_file="never.log")

    assert len(logger.handlers) == 1
