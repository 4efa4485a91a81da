from __future__ import annotations

import json
import logging
from typing import Any

from taskdeck.observability import ConsoleLogFormatter, Metrics, get_json_logger, timed


def _parse_json_lines(output: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.strip().splitlines() if line.strip()]


def test_json_logger_redacts_and_formats(capsys: Any, monkeypatch: Any) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    logger = get_json_logger("obs-test")
    logger.setLevel(20)  # INFO
    logger.info(
        "task mutation acknowledged",
        extra={
            "event": "store_mutation",
            "operation": "delete",
            "task_id": 7,
            "attributes": {"token": "XYZ", "safe": "ok"},
        },
    )

    out = capsys.readouterr().out
    lines = _parse_json_lines(out)
    assert len(lines) == 1
    rec = lines[0]
    assert rec["msg"] == "task mutation acknowledged"
    assert rec["level"] == "info"
    assert rec["event"] == "store_mutation"
    assert rec["operation"] == "delete"
    assert rec["task_id"] == 7
    assert rec["attributes"] == {"token": "[REDACTED]", "safe": "ok"}


def test_console_formatter_summarizes_store_fields() -> None:
    record = logging.LogRecord("taskdeck.store", logging.WARNING, __file__, 1, "failed", None, None)
    record.event = "store_error"
    record.operation = "update_status"
    record.task_id = 3
    record.status_code = 500

    line = ConsoleLogFormatter().format(record)

    assert "WARNING taskdeck.store store_error op=update_status task=3 status=500 - failed" in line


def test_module_level_override(monkeypatch: Any) -> None:
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("LOG_MODULE_LEVELS", "obs-level=DEBUG")
    assert get_json_logger("obs-level.child").level == logging.DEBUG


def test_metrics_counters_increment_and_snapshot() -> None:
    metrics = Metrics()
    metrics.increment("store_ops", {"operation": "create"}, 2)
    metrics.increment("store_ops", {"operation": "create"})

    assert metrics.value("store_ops", {"operation": "create"}) == 3
    snap = metrics.snapshot()
    entry = next(e for e in snap if e["name"] == "store_ops")
    assert entry == {"name": "store_ops", "labels": {"operation": "create"}, "value": 3}


def test_timed_reports_duration() -> None:
    with timed() as t:
        pass
    assert t["duration_ms"] >= 0
