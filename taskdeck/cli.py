from __future__ import annotations

import argparse
import asyncio
import datetime
import sys
from typing import Any

import httpx

from taskdeck.config import ClientConfig, load_config
from taskdeck.models.task import TaskStatus
from taskdeck.store import Notification, StoreContext, TaskStore, build_store
from taskdeck.views.task_list import (
    empty_list_message,
    filter_tasks,
    render_task_detail,
    render_task_line,
)


class StderrNotifier:
    """Render failure notifications the way a terminal user sees them."""

    def notify(self, notification: Notification) -> None:
        sys.stderr.write(f"{notification.title}: {notification.message}\n")
        sys.stderr.flush()


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def _println(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("taskdeck")
    parser.add_argument("--api-url", help="Tasks resource URL (default: TASKDECK_API_URL)")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    sub = parser.add_subparsers(dest="cmd")

    p_list = sub.add_parser("list", help="List tasks")
    p_list.add_argument("--search", default="", help="Case-insensitive title/description filter")

    p_show = sub.add_parser("show", help="Show one task")
    p_show.add_argument("task_id", type=int)

    p_add = sub.add_parser("add", help="Create a task")
    p_add.add_argument("title")
    p_add.add_argument("--description", default="")
    p_add.add_argument("--due", type=_parse_date, help="Due date as YYYY-MM-DD")

    for name, help_text in (
        ("complete", "Mark a task as Completed"),
        ("reopen", "Mark a task as Pending"),
        ("delete", "Delete a task"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("task_id", type=int)

    p_serve = sub.add_parser("serve", help="Run the local dev API server")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    return parser


def _apply_overrides(cfg: ClientConfig, args: Any) -> ClientConfig:
    if getattr(args, "api_url", None):
        cfg.api_url = args.api_url
    if getattr(args, "timeout", None) is not None:
        cfg.timeout_s = args.timeout if args.timeout > 0 else None
    return cfg


async def _dispatch(args: Any, store: TaskStore, cfg: ClientConfig) -> int:
    # Session start: the first fetch populates the store
    fetched = await store.fetch_tasks()
    cmd = args.cmd

    if cmd == "list":
        if not fetched:
            return 1
        visible = filter_tasks(store.tasks, args.search)
        if not visible:
            _println(empty_list_message(store))
        for task in visible:
            _println(render_task_line(task, fmt=cfg.date_format))
        return 0

    if cmd == "show":
        task = store.get_task_by_id(args.task_id)
        if task is None:
            sys.stderr.write(f"task #{args.task_id} not found\n")
            return 1
        _println(render_task_detail(task, fmt=cfg.date_format))
        return 0

    if cmd == "add":
        ok = await store.create_task(args.title, args.description, args.due)
        if ok:
            _println(f"Task saved. {len(store.tasks)} task(s) total.")
        return 0 if ok else 1

    if cmd in {"complete", "reopen"}:
        status: TaskStatus = "Completed" if cmd == "complete" else "Pending"
        ok = await store.update_task_status(args.task_id, status)
        if ok:
            task = store.get_task_by_id(args.task_id)
            _println(render_task_line(task, fmt=cfg.date_format) if task else f"#{args.task_id}")
        return 0 if ok else 1

    if cmd == "delete":
        ok = await store.delete_task(args.task_id)
        if ok:
            _println(f"Task #{args.task_id} deleted.")
        return 0 if ok else 1

    return 2


async def _run_store_command(
    args: Any, cfg: ClientConfig, transport: httpx.AsyncBaseTransport | None
) -> int:
    context = StoreContext()
    context.provide(build_store(cfg, transport=transport, notifier=StderrNotifier()))
    store = context.require()
    try:
        return await _dispatch(args, store, cfg)
    finally:
        await store.aclose()


def run(
    argv: list[str] | None = None, *, transport: httpx.AsyncBaseTransport | None = None
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cmd = getattr(args, "cmd", None)
    if not cmd:
        parser.print_help()
        return 2
    if cmd == "serve":
        # Defer import to keep the client free of server dependencies at startup
        from taskdeck.devserver.__main__ import serve

        serve(host=args.host, port=args.port)
        return 0
    cfg = _apply_overrides(load_config(), args)
    return asyncio.run(_run_store_command(args, cfg, transport))


def main(argv: list[str] | None = None) -> None:
    raise SystemExit(run(argv))


if __name__ == "__main__":
    main()
