"""Command-line access to the Mission Control data files.

Usage:
    python3 -m mission_control.cli log --type deploy --title "Deploy v2" --project factursimple
    python3 -m mission_control.cli tasks --enabled-only
    python3 -m mission_control.cli tasks --week 2026-02-02
    python3 -m mission_control.cli sync-task --cron-id daily-seo --name "SEO article" --every-minutes 1440
    python3 -m mission_control.cli remove-task --cron-id daily-seo
    python3 -m mission_control.cli search "invoice"
    python3 -m mission_control.cli stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any

from mission_control.activity.log import ActivityLog
from mission_control.common.config import data_path, load_config, setup_logging
from mission_control.common.store import ACTIVITIES_FILE, TASKS_FILE, JsonArrayStore
from mission_control.schedule.tasks import TaskSchedule, week_start
from mission_control.search.workspace import DEFAULT_LIMIT, MIN_QUERY_LENGTH, search_all


def _activity_log(cfg: dict) -> ActivityLog:
    return ActivityLog(JsonArrayStore(data_path(cfg, ACTIVITIES_FILE)), max_entries=cfg["activities"]["max_entries"])


def _task_schedule(cfg: dict) -> TaskSchedule:
    return TaskSchedule(JsonArrayStore(data_path(cfg, TASKS_FILE)))


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _fmt_ms(ms: float) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%a %Y-%m-%d %H:%M")


def cmd_log(args: argparse.Namespace, cfg: dict) -> int:
    fields: dict[str, Any] = {
        "type": args.type,
        "title": args.title,
        "description": args.description,
        "category": args.category,
        "project": args.project,
        "status": args.status,
    }
    if args.metadata:
        fields["metadata"] = json.loads(args.metadata)
    activity = _activity_log(cfg).record(fields)
    print(f"Logged {activity['id']}: {activity['title']}")
    return 0


def cmd_tasks(args: argparse.Namespace, cfg: dict) -> int:
    schedule = _task_schedule(cfg)
    if args.week:
        start = week_start(datetime.strptime(args.week, "%Y-%m-%d"))
        week = schedule.occurrences_for_week(_ms(start))
        if not week:
            print(f"Nothing scheduled for the week of {start:%Y-%m-%d}.")
            return 0
        print(f"Week of {start:%Y-%m-%d}:\n")
        for entry in week:
            print(f"  {entry['task'].get('name', entry['task']['cronId'])}")
            for ms in entry["occurrences"]:
                print(f"    {_fmt_ms(ms)}")
        return 0

    tasks = schedule.list(enabled_only=args.enabled_only)
    if not tasks:
        print("No scheduled tasks.")
        return 0
    for t in tasks:
        kind = (t.get("schedule") or {}).get("kind", "?")
        state = "on " if t.get("enabled") else "off"
        print(f"  [{state}] [{kind:5s}] {t.get('cronId')}  {t.get('name', '')}")
    return 0


def cmd_sync_task(args: argparse.Namespace, cfg: dict) -> int:
    if args.at:
        schedule = {"kind": "at", "atMs": _ms(datetime.fromisoformat(args.at))}
    elif args.every_minutes:
        schedule = {"kind": "every", "everyMs": args.every_minutes * 60 * 1000}
    else:
        schedule = {"kind": "expr", "expr": args.expr}
    fields = {
        "cronId": args.cron_id,
        "name": args.name,
        "description": args.description,
        "schedule": schedule,
        "enabled": not args.disabled,
        "nextRun": _ms(datetime.fromisoformat(args.next_run)) if args.next_run else None,
        "project": args.project,
    }
    task = _task_schedule(cfg).upsert(fields)
    print(f"Synced task {task['cronId']}")
    return 0


def cmd_remove_task(args: argparse.Namespace, cfg: dict) -> int:
    if _task_schedule(cfg).remove(args.cron_id):
        print(f"Removed task {args.cron_id}")
    else:
        print(f"No task with cronId {args.cron_id}")
    return 0


def cmd_search(args: argparse.Namespace, cfg: dict) -> int:
    query = " ".join(args.query)
    if len(query) < MIN_QUERY_LENGTH:
        print(f"Query must be at least {MIN_QUERY_LENGTH} characters", file=sys.stderr)
        return 2
    results = asyncio.run(search_all(cfg, query, args.limit))
    total = sum(len(v) for v in results.values())
    if not total:
        print(f"No results for: {query}")
        return 0
    print(f"Found {total} result(s) for: {query}\n")
    for bucket, items in results.items():
        if not items:
            continue
        print(f"{bucket}:")
        for r in items:
            print(f"  {r['title']}")
            if r.get("path"):
                print(f"         {r['path']}")
        print()
    return 0


def cmd_stats(args: argparse.Namespace, cfg: dict) -> int:
    s = _activity_log(cfg).list(limit=0)["stats"]
    print(f"Activities: {s['total']:,} total, {s['today']:,} today, {s['thisWeek']:,} this week\n")
    print("By category (this week):")
    for name, n in sorted(s["byCategory"].items(), key=lambda kv: str(kv[0])):
        print(f"  {str(name):16s}  {n:,}")
    print("\nBy project (this week):")
    for name, n in sorted(s["byProject"].items()):
        print(f"  {name:16s}  {n:,}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mission-control", description="Mission Control data files")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Log to stderr and the log file")

    sub = parser.add_subparsers(dest="command", required=True)

    p_log = sub.add_parser("log", help="Record an activity")
    p_log.add_argument("--type", default="unknown")
    p_log.add_argument("--title", required=True)
    p_log.add_argument("--description", default=None)
    p_log.add_argument("--category", default="system")
    p_log.add_argument("--project", default=None)
    p_log.add_argument("--status", default="completed", choices=["completed", "running", "failed"])
    p_log.add_argument("--metadata", default=None, help="JSON object")

    p_tasks = sub.add_parser("tasks", help="List scheduled tasks")
    p_tasks.add_argument("--enabled-only", action="store_true")
    p_tasks.add_argument("--week", default=None, help="Show occurrences for the week containing YYYY-MM-DD")

    p_sync = sub.add_parser("sync-task", help="Create or replace a scheduled task")
    p_sync.add_argument("--cron-id", required=True)
    p_sync.add_argument("--name", required=True)
    p_sync.add_argument("--description", default=None)
    p_sync.add_argument("--project", default=None)
    p_sync.add_argument("--next-run", default=None, help="ISO datetime of the next run")
    p_sync.add_argument("--disabled", action="store_true")
    kind = p_sync.add_mutually_exclusive_group(required=True)
    kind.add_argument("--at", help="ISO datetime of a one-shot run")
    kind.add_argument("--every-minutes", type=int)
    kind.add_argument("--expr", help="Cron expression (stored, not expanded)")

    p_rm = sub.add_parser("remove-task", help="Delete a scheduled task")
    p_rm.add_argument("--cron-id", required=True)

    p_search = sub.add_parser("search", help="Search workspace files, activities and tasks")
    p_search.add_argument("query", nargs="+", help="Search query")
    p_search.add_argument("--limit", type=int, default=DEFAULT_LIMIT)

    sub.add_parser("stats", help="Activity rollups")

    args = parser.parse_args(argv)
    cfg = load_config(args.config)
    if args.verbose:
        setup_logging(cfg)

    dispatch = {
        "log": cmd_log,
        "tasks": cmd_tasks,
        "sync-task": cmd_sync_task,
        "remove-task": cmd_remove_task,
        "search": cmd_search,
        "stats": cmd_stats,
    }
    return dispatch[args.command](args, cfg)


if __name__ == "__main__":
    sys.exit(main())
