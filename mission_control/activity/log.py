"""Agent activity log: append-only records with today / week / all-time rollups."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from mission_control.common.store import JsonArrayStore

logger = logging.getLogger("mission_control.activity")

MAX_ACTIVITIES = 10_000
DEFAULT_LIMIT = 50

_OPTIONAL_FIELDS = ("description", "project", "metadata")
_TEXT_FIELDS = ("type", "title", "category", "status", "project")


def now_ms() -> int:
    return int(time.time() * 1000)


def _timestamp(activity: dict[str, Any]) -> float:
    ts = activity.get("timestamp")
    return ts if isinstance(ts, (int, float)) else 0


def _is_key(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


@dataclass
class ActivityStats:
    """Rollup counters for the activity log."""

    total: int = 0
    today: int = 0
    this_week: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_project: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "today": self.today,
            "thisWeek": self.this_week,
            "byCategory": self.by_category,
            "byProject": self.by_project,
        }


def compute_stats(activities: list[dict[str, Any]], now: datetime | None = None) -> ActivityStats:
    """Count activities for today, the trailing week and all time.

    ``today`` starts at local midnight of *now*; the week window starts seven
    days before that midnight. Category and project counts cover the week
    window only, and activities without a project are left out of
    ``by_project``.
    """
    now = now or datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    today_ms = midnight.timestamp() * 1000
    week_ago_ms = (midnight - timedelta(days=7)).timestamp() * 1000

    stats = ActivityStats(total=len(activities))
    for a in activities:
        ts = _timestamp(a)
        if ts >= today_ms:
            stats.today += 1
        if ts < week_ago_ms:
            continue
        stats.this_week += 1
        category = a.get("category")
        if _is_key(category):
            stats.by_category[category] = stats.by_category.get(category, 0) + 1
        project = a.get("project")
        if project and _is_key(project):
            stats.by_project[project] = stats.by_project.get(project, 0) + 1
    return stats


class ActivityLog:
    """Activity records backed by a ``JsonArrayStore``, newest first on disk."""

    def __init__(self, store: JsonArrayStore, max_entries: int = MAX_ACTIVITIES) -> None:
        self._store = store
        self._max_entries = max_entries

    def all(self) -> list[dict[str, Any]]:
        return self._store.load()

    def list(
        self,
        *,
        category: str | None = None,
        project: str | None = None,
        type: str | None = None,
        limit: int = DEFAULT_LIMIT,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Filtered page sorted newest first, plus stats over the whole log."""
        everything = self._store.load()

        page = everything
        if category:
            page = [a for a in page if a.get("category") == category]
        if project:
            page = [a for a in page if a.get("project") == project]
        if type:
            page = [a for a in page if a.get("type") == type]

        page = sorted(page, key=_timestamp, reverse=True)[: max(limit, 0)]

        return {
            "activities": page,
            "stats": compute_stats(everything, now).to_dict(),
        }

    def record(self, fields: dict[str, Any], *, timestamp: int | None = None) -> dict[str, Any]:
        """Append one activity and prune the log to ``max_entries``.

        Any ``id`` or ``timestamp`` in *fields* is ignored; both are assigned here.
        Raises ``ValueError`` when a text field holds a non-string value.
        """
        for key in _TEXT_FIELDS:
            if fields.get(key) is not None and not isinstance(fields[key], str):
                raise ValueError(f"{key} must be a string")
        ts = timestamp if timestamp is not None else now_ms()
        activity: dict[str, Any] = {
            "id": f"act_{ts}_{uuid.uuid4().hex[:6]}",
            "timestamp": ts,
            "type": fields.get("type") or "unknown",
            "title": fields.get("title") or "Untitled Activity",
            "category": fields.get("category") or "system",
            "status": fields.get("status") or "completed",
        }
        for key in _OPTIONAL_FIELDS:
            if fields.get(key) is not None:
                activity[key] = fields[key]

        activities = self._store.load()
        activities.insert(0, activity)
        if len(activities) > self._max_entries:
            logger.info("Pruning %d activities past the %d cap", len(activities) - self._max_entries, self._max_entries)
            del activities[self._max_entries:]

        self._store.save(activities)
        logger.debug("Recorded activity %s (%s)", activity["id"], activity["type"])
        return activity
