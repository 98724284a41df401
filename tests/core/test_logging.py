"""Tests for cronswarm.core.logging."""

import json

from cronswarm.core.logging import LogContext, configure_logging, get_logger


class TestConfigureLogging:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="cronswarm-test")
        get_logger("cronswarm.test").info("service_created", service_id="svc-1")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "service_created"
        assert record["service_id"] == "svc-1"
        assert record["level"] == "info"
        assert record["service.name"] == "cronswarm-test"
        assert "timestamp" in record

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("cronswarm.test").info("hidden")
        get_logger("cronswarm.test").warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err


class TestLogContext:
    def test_binds_and_unbinds(self, capsys):
        configure_logging(level="DEBUG", json_format=True)
        with LogContext(job="backup"):
            get_logger("cronswarm.test").info("inside")
        get_logger("cronswarm.test").info("outside")

        records = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        inside, outside = records[-2], records[-1]
        assert inside["job"] == "backup"
        assert "job" not in outside
