"""Unit tests for structured JSON logging."""

from __future__ import annotations

import io
import json
import logging

from adminflow.core.logging import JsonFormatter, configure_logging


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_records_are_single_line_json_with_extra() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    logging.getLogger("adminflow.test").info(
        "Workflow finished", extra={"workflow_id": "wf-1", "progress": 100.0}
    )

    [record] = _lines(stream)
    assert record["level"] == "INFO"
    assert record["logger"] == "adminflow.test"
    assert record["message"] == "Workflow finished"
    assert record["extra"] == {"workflow_id": "wf-1", "progress": 100.0}
    assert "timestamp" in record


def test_exceptions_are_included() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    try:
        raise RuntimeError("disk full")
    except RuntimeError:
        logging.getLogger("adminflow.test").exception("Save failed")

    [record] = _lines(stream)
    assert "RuntimeError: disk full" in record["exception"]
    assert "extra" not in record


def test_reconfiguring_does_not_duplicate_output() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    configure_logging("INFO", stream=stream)

    logging.getLogger("adminflow.test").warning("once")

    assert len(_lines(stream)) == 1


def test_level_filters_records() -> None:
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)

    logging.getLogger("adminflow.test").info("hidden")
    logging.getLogger("adminflow.test").error("shown")

    assert [r["message"] for r in _lines(stream)] == ["shown"]


def test_non_serializable_extra_is_stringified() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    record.path = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["extra"]["path"].startswith("<object object")
