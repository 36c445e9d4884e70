"""Tests for JSON structured logging."""
import json
import logging


def _record(name: str, level: int, msg: str, exc_info=None, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_outputs_valid_json() -> None:
    """JSONFormatter should produce valid JSON output."""
    from pixel_shifter.core.logging import JSONFormatter
    output = JSONFormatter().format(_record("test-service", logging.INFO, "test message"))
    parsed = json.loads(output)
    assert isinstance(parsed, dict)


def test_json_formatter_has_required_fields() -> None:
    """Log output must contain timestamp, level, service, message fields."""
    from pixel_shifter.core.logging import JSONFormatter
    output = JSONFormatter().format(_record("my-service", logging.WARNING, "something happened"))
    parsed = json.loads(output)

    assert "timestamp" in parsed
    assert parsed["level"] == "WARNING"
    assert parsed["service"] == "my-service"
    assert parsed["message"] == "something happened"


def test_json_formatter_includes_pose_context() -> None:
    """pose_id / attempt extras should be copied into the entry."""
    from pixel_shifter.core.logging import JSONFormatter
    record = _record("session", logging.INFO, "retrying", pose_id="front", attempt=3)
    parsed = json.loads(JSONFormatter().format(record))

    assert parsed["pose_id"] == "front"
    assert parsed["attempt"] == 3
    assert "status_code" not in parsed


def test_json_formatter_includes_error_type_on_exception() -> None:
    """Log output should include error_type field when an exception is attached."""
    from pixel_shifter.core.logging import JSONFormatter
    try:
        raise ValueError("test error")
    except ValueError:
        import sys
        exc_info = sys.exc_info()

    record = _record("error-service", logging.ERROR, "an error occurred", exc_info=exc_info)
    parsed = json.loads(JSONFormatter().format(record))

    assert parsed["error_type"] == "ValueError"
    assert "test error" in parsed["error_detail"]


def test_setup_logging_returns_logger() -> None:
    """setup_logging() should return a configured Logger instance."""
    from pixel_shifter.core.logging import setup_logging
    logger = setup_logging("test-app")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test-app"
    assert len(logger.handlers) == 1


def test_setup_logging_does_not_duplicate_handlers() -> None:
    from pixel_shifter.core.logging import setup_logging
    setup_logging("dup-app")
    logger = setup_logging("dup-app")
    assert len(logger.handlers) == 1
