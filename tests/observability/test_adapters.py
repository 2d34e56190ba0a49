"""Tests for ``faultline.observability.adapters`` and serializers."""

from __future__ import annotations

import json

import pytest

from faultline.core.context import annotate
from faultline.core.details import result_details
from faultline.core.result import Err, Ok
from faultline.core.stacktrace import CallSiteResolver, StackEntry
from faultline.observability.adapters import (
    JsonLogAdapter,
    LogAdapter,
    LogDetails,
    PlainLogAdapter,
    get_log_adapter,
)
from faultline.observability.serializers import JsonSerializer, Serializer
from faultline.observability.sinks import Severity

STACK = (
    StackEntry("faultline.report", "Reporter.log", "/lib/faultline/report.py", 90),
    StackEntry("myapp.users", "load", "/srv/myapp/users.py", 42),
)


def log_details(outcome, stack=STACK):
    return LogDetails(outcome, result_details(outcome), stack)


class TestPlainLogAdapter:
    def test_failure_line(self):
        severity, message, metadata = PlainLogAdapter().render(log_details(Err("x")), CallSiteResolver())
        assert severity is Severity.PROBLEM
        assert message == "[RESULT] /srv/myapp/users.py:42: Err('x')"
        assert metadata == {"result_details": {"kind": "failure", "message": "Err('x')", "reason": "x"}}

    def test_success_is_informational(self):
        severity, message, _ = PlainLogAdapter().render(log_details(Ok(1)), CallSiteResolver())
        assert severity is Severity.INFORMATIONAL
        assert message.endswith(": Ok(1)")

    def test_chain_metadata_promoted(self):
        outcome = annotate(Err("x"), "loading", {"user_id": 5})
        _, _, metadata = PlainLogAdapter().render(log_details(outcome), CallSiteResolver())
        assert metadata["user_id"] == 5
        assert metadata["result_details"]["metadata"] == {"user_id": 5}

    def test_unknown_location(self):
        _, message, _ = PlainLogAdapter().render(log_details(Err("x"), stack=()), CallSiteResolver())
        assert message == "[RESULT] Err('x')"


class TestJsonLogAdapter:
    def test_document(self):
        severity, message, metadata = JsonLogAdapter().render(log_details(Err("x")), CallSiteResolver())
        assert severity is Severity.PROBLEM
        assert metadata == {}
        document = json.loads(message)
        assert document == {
            "source": "faultline",
            "stacktrace_line": "/srv/myapp/users.py:42",
            "result_details": {"kind": "failure", "message": "Err('x')", "reason": "x"},
        }

    def test_key_order(self):
        _, message, _ = JsonLogAdapter().render(log_details(Err("x")), CallSiteResolver())
        assert list(json.loads(message)) == ["source", "stacktrace_line", "result_details"]

    def test_custom_serializer(self):
        class Upper:
            def encode(self, value):
                return "DOC"

        _, message, _ = JsonLogAdapter(Upper()).render(log_details(Err("x")), CallSiteResolver())
        assert message == "DOC"


class TestGetLogAdapter:
    def test_by_name(self):
        assert isinstance(get_log_adapter("plain"), PlainLogAdapter)
        assert isinstance(get_log_adapter("json"), JsonLogAdapter)
        assert isinstance(get_log_adapter("plain"), LogAdapter)

    def test_serializer_passed_to_json(self):
        serializer = JsonSerializer(indent=2)
        assert get_log_adapter("json", serializer=serializer).serializer is serializer

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown log adapter"):
            get_log_adapter("xml")


class TestJsonSerializer:
    def test_insertion_order_and_fallback(self):
        class Opaque:
            def __str__(self):
                return "opaque"

        encoded = JsonSerializer().encode({"b": 1, "a": Opaque()})
        assert encoded == '{"b": 1, "a": "opaque"}'

    def test_protocol(self):
        assert isinstance(JsonSerializer(), Serializer)
