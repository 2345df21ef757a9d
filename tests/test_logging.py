"""
Tests for structured logging and request correlation.
"""

import json
import logging

from shared.config.logging import DevelopmentFormatter, StructuredFormatter, get_logger
from shared.infrastructure.correlation import CorrelationIdFilter, principal_var, request_id_var


def make_record(msg="Created enclosure", **extra_data) -> logging.LogRecord:
    record = logging.LogRecord("reptile_api.crud", logging.INFO, __file__, 10, msg, (), None)
    record.extra_data = extra_data or None
    return record


class TestCorrelationIdFilter:
    def test_outside_request_uses_placeholder(self):
        record = make_record()
        CorrelationIdFilter().filter(record)

        assert record.request_id == "-"
        assert record.principal == "-"

    def test_stamps_bound_request_context(self):
        request_token = request_id_var.set("req-42")
        principal_token = principal_var.set("alice")
        try:
            record = make_record()
            CorrelationIdFilter().filter(record)
        finally:
            principal_var.reset(principal_token)
            request_id_var.reset(request_token)

        assert record.request_id == "req-42"
        assert record.principal == "alice"


class TestFormatters:
    def test_json_line_carries_context_and_data(self):
        record = make_record(enclosure_id=3)
        record.request_id = "req-42"
        record.principal = "alice"

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Created enclosure"
        assert data["logger"] == "reptile_api.crud"
        assert data["request_id"] == "req-42"
        assert data["principal"] == "alice"
        assert data["data"] == {"enclosure_id": 3}

    def test_json_line_omits_placeholders(self):
        record = make_record()
        record.request_id = "-"
        record.principal = "-"

        data = json.loads(StructuredFormatter().format(record))

        assert "request_id" not in data
        assert "principal" not in data
        assert "data" not in data

    def test_development_line_is_readable(self):
        record = make_record(enclosure_id=3)
        record.request_id = "0123456789abcdef"
        record.principal = "alice"

        line = DevelopmentFormatter().format(record)

        assert "01234567 alice" in line
        assert "reptile_api.crud: Created enclosure" in line
        assert "(enclosure_id=3)" in line


class TestStructuredLogger:
    def test_keywords_become_extra_data(self, caplog):
        logger = get_logger("reptile_api.tests")

        with caplog.at_level(logging.INFO, logger="reptile_api.tests"):
            logger.info("Moved reptile", reptile_id=5, enclosure_id=2)

        record = caplog.records[-1]
        assert record.getMessage() == "Moved reptile"
        assert record.extra_data == {"reptile_id": 5, "enclosure_id": 2}

    def test_exc_info_keeps_standard_meaning(self, caplog):
        logger = get_logger("reptile_api.tests")

        with caplog.at_level(logging.ERROR, logger="reptile_api.tests"):
            try:
                raise RuntimeError("sink down")
            except RuntimeError:
                logger.error("Audit sink failed", exc_info=True, action="reptile.create")

        record = caplog.records[-1]
        assert record.exc_info is not None
        assert record.extra_data == {"action": "reptile.create"}
