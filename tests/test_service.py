"""Tests for DecisionService."""

import io
import logging

import pytest

from webfilter.service import DecisionService


@pytest.fixture
def service(registry):
    registry.add("example.com")
    return DecisionService(registry)


class TestValidate:
    """Tests for validate method."""

    def test_blocked(self, service):
        assert service.validate("mail.example.com") is False

    def test_allowed(self, service):
        assert service.validate("example.org") is True

    def test_bytes_payload(self, service):
        assert service.validate(b"mail.example.com") is False

    def test_invalid_utf8_payload(self, service):
        assert service.validate(b"\xff.example.org") is True

    def test_follows_registry(self, service):
        service.registry.open("example.com", 30)
        assert service.validate("mail.example.com") is True

    def test_logs_decision(self, service, caplog):
        with caplog.at_level(logging.INFO, logger="webfilter.service"):
            service.validate("mail.example.com")
            service.validate("example.org")
        assert "False mail.example.com" in caplog.text
        assert "True example.org" in caplog.text

    def test_broken_log_handler_does_not_fail(self, service):
        stream = io.StringIO()
        stream.close()
        handler = logging.StreamHandler(stream)
        service_logger = logging.getLogger("webfilter.service")
        service_logger.addHandler(handler)
        old_level = service_logger.level
        service_logger.setLevel(logging.INFO)
        old_raise = logging.raiseExceptions
        logging.raiseExceptions = False
        try:
            assert service.validate("mail.example.com") is False
        finally:
            logging.raiseExceptions = old_raise
            service_logger.setLevel(old_level)
            service_logger.removeHandler(handler)
