from __future__ import annotations

import pytest

from taskdeck.cli import build_parser, run
from tests.helpers.fake_api import BASE_URL, FakeTasksApi, task_payload


@pytest.fixture()
def api() -> FakeTasksApi:
    return FakeTasksApi(
        [
            task_payload(1, "Meeting notes", description="share with team", due_date="2025-01-10"),
            task_payload(2, "Buy milk", status="Completed"),
        ]
    )


def _run(api: FakeTasksApi, *argv: str) -> int:
    return run(["--api-url", BASE_URL, *argv], transport=api.transport())


def test_list_prints_every_task(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(api, "list") == 0
    out = capsys.readouterr().out
    assert "[ ] #1 Meeting notes (due: 10.01.2025)" in out
    assert "[x] #2 Buy milk (due: No due date)" in out


def test_list_search_filters(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(api, "list", "--search", "MEET") == 0
    out = capsys.readouterr().out
    assert "Meeting notes" in out
    assert "Buy milk" not in out


def test_list_empty_message(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(FakeTasksApi(), "list") == 0
    assert "No tasks yet." in capsys.readouterr().out


def test_list_fetch_failure_exits_non_zero(
    api: FakeTasksApi, capsys: pytest.CaptureFixture[str]
) -> None:
    api.status["list"] = 500
    assert _run(api, "list") == 1
    assert "Error: Failed to load tasks." in capsys.readouterr().err


def test_show_found_and_missing(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(api, "show", "1") == 0
    out = capsys.readouterr().out
    assert "#1 Meeting notes" in out
    assert "share with team" in out

    assert _run(api, "show", "42") == 1
    assert "task #42 not found" in capsys.readouterr().err


def test_add_creates_and_reports_total(
    api: FakeTasksApi, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(api, "add", "Call bank", "--due", "2025-02-03") == 0
    assert "Task saved. 3 task(s) total." in capsys.readouterr().out
    assert api.tasks[-1]["dueDate"] == "2025-02-03"
    assert api.calls == ["GET", "POST", "GET"]


def test_add_rejects_bad_date() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["add", "x", "--due", "tomorrow"])


def test_complete_and_reopen(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(api, "complete", "1") == 0
    assert "[x] #1 Meeting notes" in capsys.readouterr().out
    assert _run(api, "reopen", "1") == 0
    assert "[ ] #1 Meeting notes" in capsys.readouterr().out


def test_delete_failure_is_reported(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    api.status["delete"] = 200
    assert _run(api, "delete", "1") == 1
    assert "Error: Task could not be deleted." in capsys.readouterr().err


def test_delete_success(api: FakeTasksApi, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(api, "delete", "2") == 0
    assert "Task #2 deleted." in capsys.readouterr().out
    assert [t["id"] for t in api.tasks] == [1]


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert run([]) == 2
    assert "usage: taskdeck" in capsys.readouterr().out
