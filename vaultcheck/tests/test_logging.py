"""Tests for vaultcheck.core.logging formatters."""

from __future__ import annotations

import json
import logging

from vaultcheck.core.logging import CampaignLogFilter, DevFormatter, JSONFormatter


def _record(msg: str = "check ran", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "vaultcheck.properties.engine", logging.WARNING, __file__, 10, msg, (), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_carries_check_fields(self):
        payload = json.loads(
            JSONFormatter().format(_record(check_id="15", tag="VAULT-15", outcome="failed"))
        )
        assert payload["level"] == "WARNING"
        assert payload["message"] == "check ran"
        assert payload["check_id"] == "15"
        assert payload["outcome"] == "failed"
        assert "sequence_id" not in payload

    def test_dev_prefixes_check_id(self):
        line = DevFormatter().format(_record(check_id="07"))
        assert "[07] check ran" in line

    def test_campaign_filter_stamps_sequence_and_step(self):
        log_filter = CampaignLogFilter("abc123")
        log_filter.step = 4
        record = _record()
        assert log_filter.filter(record)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["sequence_id"] == "abc123"
        assert payload["step"] == 4
        assert "<abc123@4> check ran" in DevFormatter().format(record)

    def test_step_is_none_before_first_call(self):
        record = _record()
        CampaignLogFilter("abc123").filter(record)
        assert record.step is None
        assert "<abc123> check ran" in DevFormatter().format(record)
