"""Unit tests for JSON logging helpers."""

from __future__ import annotations

import json
import logging

from auth_service.core.logger import JSONFormatter, RequestIdFilter, token_fingerprint


def _record(**extra):
    record = logging.LogRecord("auth", logging.INFO, __file__, 1, "auth.sign_in", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_token_fingerprint_is_stable_and_short():
    assert token_fingerprint("abc") == token_fingerprint("abc")
    assert token_fingerprint("abc") != token_fingerprint("abd")
    assert len(token_fingerprint("abc")) == 12


def test_json_formatter_copies_known_extras_only():
    record = _record(principal="a@b.com", outcome="ok", password="hunter2", request_id="r-1")

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.sign_in"
    assert payload["principal"] == "a@b.com"
    assert payload["outcome"] == "ok"
    assert payload["request_id"] == "r-1"
    assert "password" not in payload


def test_request_id_filter_outside_request_keeps_record():
    record = _record()

    assert RequestIdFilter().filter(record) is True
    assert record.request_id is None


def test_request_id_filter_preserves_explicit_id():
    record = _record(request_id="given")

    RequestIdFilter().filter(record)

    assert record.request_id == "given"


def test_request_id_taken_from_header(app):
    with app.test_request_context(headers={"X-Request-ID": "abc-123"}):
        record = _record()
        RequestIdFilter().filter(record)

    assert record.request_id == "abc-123"
