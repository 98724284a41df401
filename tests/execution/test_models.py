"""Tests for the Execution record."""

import re

from cronswarm.core.errors import ExitCodeError, JobSkippedError
from cronswarm.execution.models import Execution, new_execution_id


class TestExecutionId:
    def test_twelve_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{12}", new_execution_id())

    def test_unique(self):
        assert len({new_execution_id() for _ in range(100)}) == 100


class TestLifecycle:
    def test_initial_state(self):
        e = Execution()
        assert e.is_running is False
        assert e.started_at is None
        assert e.closed is False

    def test_start(self):
        e = Execution()
        e.start()
        assert e.is_running is True
        assert e.started_at is not None
        assert e.closed is False

    def test_stop_success(self):
        e = Execution()
        e.start()
        e.stop(None)
        assert e.closed is True
        assert e.failed is False
        assert e.skipped is False
        assert e.error is None
        assert e.ended_at >= e.started_at
        assert e.duration == e.ended_at - e.started_at

    def test_stop_with_error(self):
        e = Execution()
        e.start()
        err = ExitCodeError(3)
        e.stop(err)
        assert e.failed is True
        assert e.error is err

    def test_stop_skipped_is_not_failure(self):
        e = Execution()
        e.start()
        e.stop(JobSkippedError())
        assert e.skipped is True
        assert e.failed is False
        assert e.error is None

    def test_first_stop_wins(self):
        e = Execution()
        e.start()
        e.stop(None)
        e.stop(ExitCodeError(1))
        assert e.failed is False
        assert e.error is None

    def test_stop_before_start_is_noop(self):
        e = Execution()
        e.stop(ExitCodeError(1))
        assert e.failed is False


class TestToDict:
    def test_serializes_streams_and_error(self):
        e = Execution()
        e.start()
        e.output.write(b"hello\n")
        e.error_output.write(b"oops\n")
        e.stop(ExitCodeError(2))

        d = e.to_dict()
        assert d["id"] == e.id
        assert d["failed"] is True
        assert d["error"] == "exit code: 2"
        assert d["output"] == "hello\n"
        assert d["error_output"] == "oops\n"
        assert d["duration_seconds"] >= 0
