"""
Tests for structured logging and per-task log context.
"""

import asyncio
import json
import logging

import pytest

from customs_tracker.utils.logger import (
    ExecutionContextFilter,
    LoggerContext,
    StructuredFormatter,
    get_log_context,
    set_log_context,
    setup_logger
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("customs_tracker.test", logging.INFO, __file__, 10, "Step completed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_emits_json_with_extra():
    record = make_record(execution_id="exec-1")

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["message"] == "Step completed"
    assert entry["extra"] == {"execution_id": "exec-1"}


def test_context_filter_does_not_override_explicit_extra():
    with LoggerContext(execution_id="from-context", user_id="operator-1"):
        record = make_record(execution_id="explicit")
        ExecutionContextFilter().filter(record)

    assert record.execution_id == "explicit"
    assert record.user_id == "operator-1"


def test_logger_context_restores_previous_values():
    set_log_context(component="api")

    with LoggerContext(component="execution_controller", execution_id="exec-1"):
        assert get_log_context() == {"component": "execution_controller", "execution_id": "exec-1"}

    assert get_log_context() == {"component": "api"}


@pytest.mark.asyncio
async def test_context_is_isolated_between_tasks():
    async def worker(execution_id):
        with LoggerContext(execution_id=execution_id):
            await asyncio.sleep(0)
            return get_log_context()["execution_id"]

    results = await asyncio.gather(worker("a"), worker("b"))

    assert results == ["a", "b"]
    assert "execution_id" not in get_log_context()


def test_setup_logger_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "tracker.log"
    logger = setup_logger("customs_tracker.test_file", level="DEBUG", log_file=str(log_file))

    with LoggerContext(user_id="operator-1"):
        logger.info("Session started", extra={"session_id": "s1"})
    for handler in logger.handlers:
        handler.flush()

    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["extra"]["user_id"] == "operator-1"
    assert entry["extra"]["session_id"] == "s1"

    # Reconfiguring replaces handlers instead of stacking them
    setup_logger("customs_tracker.test_file", level="INFO", structured=False)
    assert len(logger.handlers) == 1
