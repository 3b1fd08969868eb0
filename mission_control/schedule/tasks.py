"""Scheduled-task definitions synced from the agent's cron, and their weekly calendar.

Tasks are keyed by the caller's ``cronId``. Nothing here runs a task; the
schedule is only expanded into timestamps for display.

Schedule kinds::

    {"kind": "at", "atMs": 1770000000000}
    {"kind": "every", "everyMs": 3600000}
    {"kind": "expr", "expr": "0 9 * * 1-5"}

``expr`` schedules are stored but never expanded. For ``every`` schedules the
expansion starts from ``nextRun`` (or the week start when there is none) and
assumes that value is on the task's phase; a stale ``nextRun`` shifts every
generated occurrence by the same offset.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from mission_control.common.store import JsonArrayStore

logger = logging.getLogger("mission_control.schedule")

DAY_MS = 24 * 60 * 60 * 1000
WEEK_MS = 7 * DAY_MS
MAX_OCCURRENCES = 50

_TASK_FIELDS = ("cronId", "name", "description", "schedule", "enabled", "lastRun", "nextRun", "project")


def week_start(dt: datetime | None = None) -> datetime:
    """Local Monday 00:00 of the week containing *dt*."""
    dt = dt or datetime.now()
    monday = dt - timedelta(days=dt.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def expand_occurrences(task: dict[str, Any], week_start_ms: int) -> list[int]:
    """Fire times of *task* within ``[week_start_ms, week_start_ms + 7 days)``."""
    week_end_ms = week_start_ms + WEEK_MS
    schedule = task.get("schedule")
    if not isinstance(schedule, dict):
        return []
    kind = schedule.get("kind")

    if kind == "at":
        at_ms = schedule.get("atMs")
        if _is_number(at_ms) and week_start_ms <= at_ms < week_end_ms:
            return [at_ms]
        return []

    if kind == "every":
        interval = schedule.get("everyMs")
        if not _is_number(interval) or interval <= 0:
            return []
        next_run = task.get("nextRun")
        cursor = next_run if _is_number(next_run) else week_start_ms
        if cursor < week_start_ms:
            cursor += -(-(week_start_ms - cursor) // interval) * interval
        occurrences: list[int] = []
        while cursor < week_end_ms and len(occurrences) < MAX_OCCURRENCES:
            occurrences.append(cursor)
            cursor += interval
        return occurrences

    # "expr" and anything unrecognised
    return []


def normalize_task(fields: dict[str, Any]) -> dict[str, Any]:
    """Build a stored task from request fields. Raises ValueError without a cronId."""
    cron_id = fields.get("cronId")
    if not cron_id or not isinstance(cron_id, str):
        raise ValueError("cronId required")
    task: dict[str, Any] = {k: fields[k] for k in _TASK_FIELDS if fields.get(k) is not None}
    task["enabled"] = bool(fields["enabled"]) if fields.get("enabled") is not None else True
    return task


class TaskSchedule:
    """Scheduled tasks backed by a ``JsonArrayStore``."""

    def __init__(self, store: JsonArrayStore) -> None:
        self._store = store

    def list(self, *, enabled_only: bool = False) -> list[dict[str, Any]]:
        tasks = self._store.load()
        if enabled_only:
            tasks = [t for t in tasks if t.get("enabled")]
        return tasks

    def occurrences_for_week(self, week_start_ms: int) -> list[dict[str, Any]]:
        """Enabled tasks that fire during the week, each with its fire times."""
        result = []
        for task in self._store.load():
            if not task.get("enabled"):
                continue
            occurrences = expand_occurrences(task, week_start_ms)
            if occurrences:
                result.append({"task": task, "occurrences": occurrences})
        return result

    def upsert(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Replace the task with the same cronId, or append it."""
        task = normalize_task(fields)
        tasks = self._store.load()
        for i, existing in enumerate(tasks):
            if existing.get("cronId") == task["cronId"]:
                tasks[i] = task
                logger.debug("Updated task %s", task["cronId"])
                break
        else:
            tasks.append(task)
            logger.info("Added task %s", task["cronId"])
        self._store.save(tasks)
        return task

    def remove(self, cron_id: str) -> bool:
        """Delete every task with *cron_id*. Returns False when none matched."""
        tasks = self._store.load()
        kept = [t for t in tasks if t.get("cronId") != cron_id]
        self._store.save(kept)
        removed = len(kept) != len(tasks)
        if removed:
            logger.info("Removed task %s", cron_id)
        return removed
