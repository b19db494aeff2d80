"""Tests for log redaction and the JSON formatter."""

import json
import logging

from postcorpus.core.logging_config import _JsonFormatter, _RequestIdFilter, redact, request_id_var


def _record(msg, *args, **extra):
    record = logging.LogRecord("postcorpus.test", logging.INFO, __file__, 1, msg, args, None)
    record.__dict__.update(extra)
    return record


class TestRedact:

    def test_bearer_token_masked(self):
        text = redact("Authorization header: Bearer abcdefghijklmnopqrstuvwxyz.123")
        assert "abcdefghijklmnopqrstuvwxyz" not in text
        assert "***REDACTED***" in text

    def test_key_value_secret_masked(self):
        assert "hunter2hunter2" not in redact("jwt_secret_key=hunter2hunter2")

    def test_plain_text_untouched(self):
        assert redact("Created post hello-world") == "Created post hello-world"


class TestJsonFormatter:

    def test_extra_fields_and_request_id(self):
        token = request_id_var.set("req-42")
        try:
            record = _record("Stored %s", "version", post_uuid="abc")
            _RequestIdFilter().filter(record)
            entry = json.loads(_JsonFormatter().format(record))
        finally:
            request_id_var.reset(token)

        assert entry["message"] == "Stored version"
        assert entry["post_uuid"] == "abc"
        assert entry["request_id"] == "req-42"
        assert entry["level"] == "INFO"
