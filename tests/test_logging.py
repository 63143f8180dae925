"""Tests for structured logging setup."""
import io
import json
import logging

from aps_nodepack.observability import node_context, setup_logging


class TestSetupLogging:
    def test_json_lines_carry_context(self, monkeypatch):
        monkeypatch.setenv("APS_NODEPACK_LOG_FORMAT", "json")
        stream = io.StringIO()
        setup_logging(stream)

        logging.getLogger("node.apsDataManagement").warning(
            "Item failed", extra=node_context(workflow_id="wf-1", item_index=0, operation="getHubs")
        )

        record = json.loads(stream.getvalue().strip())
        assert record["message"] == "Item failed"
        assert record["level"] == "WARNING"
        assert record["logger"] == "node.apsDataManagement"
        assert record["workflow_id"] == "wf-1"
        assert record["item_index"] == 0
        assert record["operation"] == "getHubs"
        assert "node_name" not in record

    def test_text_format(self, monkeypatch):
        monkeypatch.setenv("APS_NODEPACK_LOG_FORMAT", "text")
        stream = io.StringIO()
        setup_logging(stream)

        logging.getLogger("aps").info("hello")
        assert "[INFO] aps: hello" in stream.getvalue()

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setenv("APS_NODEPACK_LOG_LEVEL", "ERROR")
        setup_logging(io.StringIO())
        assert logging.getLogger().level == logging.ERROR


class TestNodeContext:
    def test_skips_empty_fields(self):
        assert node_context() == {}

    def test_zero_item_index_kept(self):
        assert node_context(item_index=0, extra_field="x") == {"item_index": 0, "extra_field": "x"}
