"""Portfolio overview: projects, research ranking and quick links from overview.yaml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("mission_control.dashboard.overview")

_SECTIONS = ("projects", "research", "quickLinks")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _score(item: dict[str, Any]) -> float:
    score = item.get("score")
    return float(score) if _is_number(score) else 0.0


def load_overview(path: str | Path) -> dict[str, list[dict[str, Any]]]:
    """Read the overview file. Missing or malformed files give empty sections."""
    overview: dict[str, list[dict[str, Any]]] = {s: [] for s in _SECTIONS}
    path = Path(path)
    if not path.is_file():
        return overview
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.warning("Could not read overview file %s: %s", path, exc)
        return overview
    if not isinstance(raw, dict):
        logger.warning("Overview file %s is not a mapping", path)
        return overview

    for section in _SECTIONS:
        items = raw.get(section) or []
        if isinstance(items, list):
            overview[section] = [i for i in items if isinstance(i, dict)]
    for item in overview["research"]:
        if "score" in item and not _is_number(item["score"]):
            logger.warning("Research item %s has non-numeric score %r, using 0", item.get("id"), item["score"])
            item["score"] = 0
    overview["research"].sort(key=lambda r: -_score(r))
    return overview


def summary_stats(overview: dict[str, list[dict[str, Any]]], activities: list[dict[str, Any]]) -> dict[str, Any]:
    projects = overview.get("projects", [])
    research = overview.get("research", [])
    statuses: dict[str, int] = {}
    for a in activities:
        s = a.get("status", "completed")
        if isinstance(s, str):
            statuses[s] = statuses.get(s, 0) + 1
    return {
        "totalProjects": len(projects),
        "activeProjects": sum(1 for p in projects if p.get("status") == "active"),
        "totalResearchIdeas": len(research),
        "topResearchScore": max((_score(r) for r in research), default=None),
        "activitiesCompleted": statuses.get("completed", 0),
        "activitiesRunning": statuses.get("running", 0),
        "activitiesFailed": statuses.get("failed", 0),
    }
