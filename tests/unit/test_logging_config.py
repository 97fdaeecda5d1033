"""Unit tests for logging formatters."""

import json
import logging
import sys

from pulse.logging_config import DevelopmentFormatter, JSONFormatter, get_logger


def make_record(msg="Scored survey", exc_info=None, **extra):
    record = logging.LogRecord(
        name="pulse.services.scoring",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "pulse.services.scoring"
        assert data["message"] == "Scored survey"
        assert "timestamp" in data

    def test_extra_fields_included(self):
        data = json.loads(JSONFormatter().format(make_record(user_id="user_1", result_id="r1")))
        assert data["user_id"] == "user_1"
        assert data["result_id"] == "r1"

    def test_non_ascii_kept(self):
        output = JSONFormatter().format(make_record(msg="Categoría Autonomía"))
        assert "Autonomía" in output

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = make_record(exc_info=sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestDevelopmentFormatter:

    def test_context_fields_appended(self):
        output = DevelopmentFormatter().format(make_record(user_id="user_1", survey_id="s1"))
        assert "Scored survey" in output
        assert "[user_id=user_1 survey_id=s1]" in output

    def test_no_context(self):
        output = DevelopmentFormatter().format(make_record())
        assert output.endswith("Scored survey")


def test_get_logger_returns_named_logger():
    assert get_logger("pulse.test").name == "pulse.test"
