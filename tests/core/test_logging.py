import json
import logging
import sys

from core.logging import JSONFormatter


def _record(**extra):
    record = logging.makeLogRecord(
        {
            "name": "venueops",
            "levelname": "WARNING",
            "levelno": logging.WARNING,
            "msg": "Aggregator %s used partial data",
            "args": ("stockout",),
        }
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_message_and_level():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["message"] == "Aggregator stockout used partial data"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "venueops"
    assert "timestamp" in payload


def test_json_formatter_merges_extra_context():
    payload = json.loads(JSONFormatter().format(_record(venue="ORD", week="2024-W05")))
    assert payload["venue"] == "ORD"
    assert payload["week"] == "2024-W05"


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("snapshot export offline")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: snapshot export offline" in payload["exception"]
