"""Brute-force search over the workspace tree and the two record files.

No index: every query walks the workspace and reads each ``.md``/``.txt``
file in full, then scans the activity and task arrays in memory.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from mission_control.common.config import data_path
from mission_control.common.store import ACTIVITIES_FILE, TASKS_FILE, JsonArrayStore

logger = logging.getLogger("mission_control.search")

DEFAULT_LIMIT = 20
MIN_QUERY_LENGTH = 2
SNIPPET_RADIUS = 100

SEARCH_EXTENSIONS = (".md", ".txt")
SKIP_DIRS = frozenset({"node_modules", "dist", "build", "__pycache__"})
UNTAGGED_ROOTS = frozenset({"memory", "research"})


def _compact(result: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in result.items() if v is not None}


def _snippet(content: str, lower_content: str, lower_query: str) -> str:
    idx = lower_content.find(lower_query)
    if idx < 0:
        # name-only match
        start, end = 0, 2 * SNIPPET_RADIUS
    else:
        start = max(0, idx - SNIPPET_RADIUS)
        end = idx + len(lower_query) + SNIPPET_RADIUS
    return content[start:end].replace("\r\n", " ").replace("\n", " ")


def _document_result(rel_path: str, name: str, content: str, lower_content: str, lower_query: str) -> dict[str, Any]:
    parts = rel_path.split("/")
    doc_type = "memory" if "memory" in parts[:-1] else "document"
    project = parts[0] if len(parts) > 1 and parts[0] not in UNTAGGED_ROOTS else None
    title = name
    for ext in SEARCH_EXTENSIONS:
        if name.endswith(ext):
            title = name[: -len(ext)]
            break
    return _compact({
        "type": doc_type,
        "title": title,
        "content": _snippet(content, lower_content, lower_query),
        "path": rel_path,
        "project": project,
    })


def search_documents(root: str | Path, query: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    """Depth-first scan of *root* for text files whose content or name contains *query*."""
    root = Path(root)
    lower_query = query.lower()
    results: list[dict[str, Any]] = []

    def _walk(directory: Path) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return

        for entry in entries:
            if len(results) >= limit:
                return
            if entry.name.startswith(".") or entry.name in SKIP_DIRS:
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                _walk(Path(entry.path))
                continue
            if not entry.name.endswith(SEARCH_EXTENSIONS):
                continue
            try:
                content = Path(entry.path).read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", entry.path, exc)
                continue
            lower_content = content.lower()
            if lower_query in lower_content or lower_query in entry.name.lower():
                rel_path = Path(entry.path).relative_to(root).as_posix()
                results.append(_document_result(rel_path, entry.name, content, lower_content, lower_query))

    if limit > 0:
        _walk(root)
    return results


def _contains(value: Any, lower_query: str) -> bool:
    return isinstance(value, str) and lower_query in value.lower()


def search_activities(activities: list[dict[str, Any]], query: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    lower_query = query.lower()
    matches = [
        a for a in activities
        if _contains(a.get("title"), lower_query) or _contains(a.get("description"), lower_query)
    ][: max(limit, 0)]
    return [
        _compact({
            "type": "activity",
            "title": a.get("title", ""),
            "content": a.get("description") or "",
            "timestamp": a.get("timestamp"),
            "project": a.get("project"),
        })
        for a in matches
    ]


def search_tasks(tasks: list[dict[str, Any]], query: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    lower_query = query.lower()
    matches = [
        t for t in tasks
        if _contains(t.get("name"), lower_query) or _contains(t.get("description"), lower_query)
    ][: max(limit, 0)]
    return [
        _compact({
            "type": "task",
            "title": t.get("name", ""),
            "content": t.get("description") or "",
            "project": t.get("project"),
        })
        for t in matches
    ]


async def search_all(cfg: dict[str, Any], query: str, limit: int = DEFAULT_LIMIT) -> dict[str, list[dict[str, Any]]]:
    """Search files, activities and tasks concurrently and bucket the results.

    Waits for all three sources; there is no timeout.
    """
    activities_store = JsonArrayStore(data_path(cfg, ACTIVITIES_FILE))
    tasks_store = JsonArrayStore(data_path(cfg, TASKS_FILE))

    async def _records(store: JsonArrayStore, fn: Any) -> list[dict[str, Any]]:
        records = await asyncio.to_thread(store.load)
        return fn(records, query, limit)

    document_results, activity_results, task_results = await asyncio.gather(
        asyncio.to_thread(search_documents, cfg["workspace_dir"], query, limit),
        _records(activities_store, search_activities),
        _records(tasks_store, search_tasks),
    )

    return {
        "documents": [r for r in document_results if r["type"] == "document"],
        "memories": [r for r in document_results if r["type"] == "memory"],
        "activities": activity_results,
        "tasks": task_results,
    }
