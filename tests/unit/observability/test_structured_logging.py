"""
Narrative Context — Structured Logging Tests
"""

import json
import logging
import sys

import pytest

from narrative_context.observability import JSONFormatter, get_trace_id, set_trace_id, setup_logging, trace
from narrative_context.observability import structured_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="narrative_context.compaction.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Optimized %d segments",
        args=(3,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_core_fields(self) -> None:
        payload = json.loads(JSONFormatter().format(make_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "narrative_context.compaction.engine"
        assert payload["message"] == "Optimized 3 segments"
        assert payload["line"] == 42
        assert payload["timestamp"].endswith("Z")
        assert "trace_id" not in payload

    def test_extras_are_included(self) -> None:
        payload = json.loads(JSONFormatter().format(make_record(tier_used=3, kept={1, 2})))

        assert payload["tier_used"] == 3
        # Non-JSON values are stringified
        assert payload["kept"] == "{1, 2}"
        assert "args" not in payload

    def test_exception_is_formatted(self) -> None:
        try:
            raise ValueError("bad segment")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        payload = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad segment" in payload["exception"]

    def test_trace_id_included_inside_trace(self) -> None:
        with trace("test.span") as trace_id:
            payload = json.loads(JSONFormatter().format(make_record()))
        assert payload["trace_id"] == trace_id


class TestTrace:
    def test_trace_id_scoped_to_block(self) -> None:
        assert get_trace_id() is None
        with trace("outer") as trace_id:
            assert get_trace_id() == trace_id
        assert get_trace_id() is None

    def test_nested_trace_reuses_id(self) -> None:
        with trace("outer") as outer_id:
            with trace("inner") as inner_id:
                assert inner_id == outer_id

    def test_existing_trace_id_is_kept(self) -> None:
        token = structured_logging._trace_id_ctx.set(None)
        try:
            set_trace_id("request-7")
            with trace("span") as trace_id:
                assert trace_id == "request-7"
            assert get_trace_id() == "request-7"
        finally:
            structured_logging._trace_id_ctx.reset(token)

    def test_exceptions_propagate(self) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            with trace("failing"):
                raise RuntimeError("boom")
        assert get_trace_id() is None


class TestSetupLogging:
    def test_idempotent(self) -> None:
        setup_logging("DEBUG")
        logger = setup_logging("warning")

        assert logger.name == "narrative_context"
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_plain_format(self) -> None:
        logger = setup_logging("INFO", json_format=False)
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
