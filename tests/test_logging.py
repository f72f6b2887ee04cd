from __future__ import annotations

import io
import json
import logging

from tasktracker.core.config import Settings
from tasktracker.core.context import bind_request_id, bind_user_id, reset_request_id, reset_user_id
from tasktracker.core.logging import configure_logging


def _root_stream_handler() -> logging.StreamHandler:
    handler = next(
        (h for h in logging.getLogger().handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    assert handler is not None, "Expected JSON stream handler to be configured"
    return handler


def test_configure_logging_outputs_json_with_request_context() -> None:
    settings = Settings(environment="test", log_level="INFO")
    configure_logging(settings)
    handler = _root_stream_handler()

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    request_token = bind_request_id("req-json-1")
    user_token = bind_user_id("65f000000000000000000001")
    try:
        logger = logging.getLogger("tasktracker.tests.logging")
        logger.info("structured log event", extra={"component": "unit-test"})
    finally:
        handler.flush()
        reset_user_id(user_token)
        reset_request_id(request_token)
        handler.setStream(previous_stream)

    log_lines = buffer.getvalue().strip().splitlines()
    assert log_lines, "Expected structured log line to be captured"
    payload = json.loads(log_lines[-1])

    assert payload["message"] == "structured log event"
    assert payload["request_id"] == "req-json-1"
    assert payload["user_id"] == "65f000000000000000000001"
    assert payload["environment"] == "test"
    assert payload["level"] == "INFO"
    assert payload["component"] == "unit-test"
    assert payload["service"] == settings.project_name


def test_records_outside_a_request_use_placeholders() -> None:
    configure_logging(Settings(environment="test", log_level="INFO"))
    handler = _root_stream_handler()

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)
    try:
        logging.getLogger("tasktracker.tests.logging").warning("background event")
    finally:
        handler.flush()
        handler.setStream(previous_stream)

    payload = json.loads(buffer.getvalue().strip().splitlines()[-1])
    assert payload["request_id"] == "-"
    assert payload["user_id"] == "-"
