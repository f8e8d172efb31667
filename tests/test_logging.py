"""
Tests for Logging Infrastructure
"""
import json
import logging
from io import StringIO

import pytest

from app.core.exceptions import NotFoundException
from app.core.logging import (
    JSONFormatter,
    generate_correlation_id,
    get_correlation_id,
    get_logger,
    log_async_operation,
    set_correlation_id,
    setup_logging,
)


def _json_logger(name: str) -> tuple[logging.Logger, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger = get_logger(name)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, stream


def _entries(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestCorrelationId:

    @pytest.mark.unit
    def test_generate_correlation_id(self):
        cid = generate_correlation_id()

        assert len(cid) == 8
        assert cid.isalnum()

    @pytest.mark.unit
    def test_set_and_get_correlation_id(self):
        assert set_correlation_id("test1234") == "test1234"
        assert get_correlation_id() == "test1234"

    @pytest.mark.unit
    def test_set_correlation_id_generates_if_none(self):
        result = set_correlation_id(None)

        assert len(result) == 8
        assert get_correlation_id() == result


class TestJSONFormatter:

    @pytest.mark.unit
    def test_basic_fields(self):
        logger, stream = _json_logger("test_json_basic")

        logger.info("Test message")

        entry = _entries(stream)[0]
        assert entry["level"] == "INFO"
        assert entry["message"] == "Test message"
        assert entry["logger"] == "test_json_basic"
        assert entry["timestamp"].endswith("Z")
        assert "app" in entry

    @pytest.mark.unit
    def test_correlation_id_included(self):
        set_correlation_id("corr5678")
        logger, stream = _json_logger("test_json_corr")

        logger.info("Correlated message")

        assert _entries(stream)[0]["correlation_id"] == "corr5678"

    @pytest.mark.unit
    def test_exception_included(self):
        logger, stream = _json_logger("test_json_exc")

        try:
            raise ValueError("Test error")
        except ValueError:
            logger.error("Error occurred", exc_info=True)

        entry = _entries(stream)[0]
        assert "ValueError" in entry["exception"]

    @pytest.mark.unit
    def test_extra_data(self):
        logger, stream = _json_logger("test.extra")

        logger.info("Message with data", extra_data={"spbu_id": "abc", "count": 3})

        entry = _entries(stream)[0]
        assert entry["extra"] == {"spbu_id": "abc", "count": 3}

    @pytest.mark.unit
    def test_app_name_from_setup(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging(level="INFO", json_format=True, app_name="spbu-test")
            logger, stream = _json_logger("test_json_app")
            logger.info("hello")
            assert _entries(stream)[0]["app"] == "spbu-test"
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestAsyncLoggingDecorator:

    @pytest.mark.unit
    async def test_success_logs_completed(self):
        logger, stream = _json_logger(__name__)

        @log_async_operation("test_operation")
        async def success_func():
            return "success"

        assert await success_func() == "success"
        statuses = [e["extra"]["status"] for e in _entries(stream)]
        assert statuses == ["started", "completed"]

    @pytest.mark.unit
    async def test_unexpected_failure_logged_as_error(self):
        logger, stream = _json_logger(__name__)

        @log_async_operation("failing_operation")
        async def failing_func():
            raise ValueError("Test failure")

        with pytest.raises(ValueError):
            await failing_func()

        last = _entries(stream)[-1]
        assert last["level"] == "ERROR"
        assert last["extra"]["status"] == "failed"
        assert "exception" in last

    @pytest.mark.unit
    async def test_domain_error_logged_as_warning(self):
        logger, stream = _json_logger(__name__)

        @log_async_operation("lookup")
        async def missing():
            raise NotFoundException("SPBU", "x")

        with pytest.raises(NotFoundException):
            await missing()

        last = _entries(stream)[-1]
        assert last["level"] == "WARNING"
        assert last["extra"]["status"] == "rejected"
        assert last["extra"]["error_code"] == "ERR_1002"
        assert "exception" not in last
