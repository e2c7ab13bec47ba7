"""Tests for src/infrastructure/observability/logging_config.py"""

import json
import logging

import pytest
import structlog

from domain.events import ChangeReason
from domain.models import FieldDataType
from infrastructure.observability.logging_config import (
    SERVICE_NAME,
    add_service_name,
    get_logger,
    render_enum_values,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestAddServiceName:
    def test_adds_name(self):
        assert add_service_name(None, "info", {})["service"] == SERVICE_NAME

    def test_keeps_existing(self):
        assert add_service_name(None, "info", {"service": "other"})["service"] == "other"


class TestRenderEnumValues:
    def test_enum_members_flattened(self):
        event = render_enum_values(
            None, "info", {"reason": ChangeReason.SEARCH, "data_type": FieldDataType.NUMBER}
        )
        assert event == {"reason": "search", "data_type": "number"}
        assert type(event["reason"]) is str

    def test_other_values_untouched(self):
        assert render_enum_values(None, "info", {"page_index": 3}) == {"page_index": 3}


class TestSetupLogging:
    def test_sets_level(self, restore_logging):
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, restore_logging):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_single_handler(self, restore_logging):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_stdlib_records_rendered_as_json(self, restore_logging, capsys):
        setup_logging("INFO")
        logging.getLogger("application.services.list_data_source").warning(
            "Page size must be greater than 0, got %s", 0
        )
        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "Page size must be greater than 0, got 0"
        assert payload["level"] == "warning"
        assert payload["service"] == SERVICE_NAME
        assert payload["logger"] == "application.services.list_data_source"

    def test_structlog_events_rendered_as_json(self, restore_logging, capsys):
        setup_logging("INFO")
        get_logger("list_state.events").bind(data_source="orders").info(
            "data_requested", reason=ChangeReason.SEARCH
        )
        payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert payload["event"] == "data_requested"
        assert payload["data_source"] == "orders"
        assert payload["reason"] == "search"
        assert "timestamp" in payload

    def test_console_output(self, restore_logging, capsys):
        setup_logging("INFO", json_output=False)
        logging.getLogger("x").info("plain message")
        assert "plain message" in capsys.readouterr().out
