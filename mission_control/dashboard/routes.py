"""FastAPI router for the dashboard API -- activities, tasks, search, overview."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from mission_control.activity.log import DEFAULT_LIMIT as ACTIVITY_LIMIT, ActivityLog
from mission_control.common.config import REPO_DIR, data_path, load_config
from mission_control.common.store import ACTIVITIES_FILE, TASKS_FILE, JsonArrayStore
from mission_control.dashboard.overview import load_overview, summary_stats
from mission_control.schedule.tasks import TaskSchedule
from mission_control.search.workspace import DEFAULT_LIMIT as SEARCH_LIMIT, MIN_QUERY_LENGTH, search_all

logger = logging.getLogger("mission_control.dashboard.routes")

CONFIG_PATH = REPO_DIR / "config" / "config.yaml"

router = APIRouter(prefix="/api", tags=["dashboard"])


def get_config() -> dict[str, Any]:
    """Configuration for the current request, re-read so edits apply without a restart."""
    return load_config(CONFIG_PATH)


def _activity_log(cfg: dict[str, Any]) -> ActivityLog:
    return ActivityLog(
        JsonArrayStore(data_path(cfg, ACTIVITIES_FILE)),
        max_entries=cfg["activities"]["max_entries"],
    )


def _task_schedule(cfg: dict[str, Any]) -> TaskSchedule:
    return TaskSchedule(JsonArrayStore(data_path(cfg, TASKS_FILE)))


async def _json_body(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# ------------------------------------------------------------------
# Activities
# ------------------------------------------------------------------

@router.get("/activities")
async def list_activities(
    limit: int = ACTIVITY_LIMIT,
    category: str | None = None,
    project: str | None = None,
    type: str | None = None,
) -> JSONResponse:
    log = _activity_log(get_config())
    result = await asyncio.to_thread(
        log.list, category=category, project=project, type=type, limit=limit,
    )
    return JSONResponse(result)


@router.post("/activities")
async def create_activity(request: Request) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return _error("Invalid JSON body", 400)
    log = _activity_log(get_config())
    try:
        activity = await asyncio.to_thread(log.record, body)
    except ValueError as exc:
        return _error(str(exc), 400)
    except OSError as exc:
        logger.exception("Failed to write activity log")
        return _error(str(exc), 500)
    return JSONResponse({"success": True, "activity": activity})


# ------------------------------------------------------------------
# Scheduled tasks
# ------------------------------------------------------------------

@router.get("/tasks")
async def list_tasks(weekStartMs: int | None = None, enabledOnly: str | None = None) -> JSONResponse:
    schedule = _task_schedule(get_config())
    if weekStartMs is not None:
        week = await asyncio.to_thread(schedule.occurrences_for_week, weekStartMs)
        return JSONResponse(week)
    tasks = await asyncio.to_thread(schedule.list, enabled_only=enabledOnly == "true")
    return JSONResponse(tasks)


@router.post("/tasks")
async def upsert_task(request: Request) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return _error("Invalid JSON body", 400)
    schedule = _task_schedule(get_config())
    try:
        task = await asyncio.to_thread(schedule.upsert, body)
    except ValueError as exc:
        return _error(str(exc), 400)
    except OSError as exc:
        logger.exception("Failed to write task file")
        return _error(str(exc), 500)
    return JSONResponse({"success": True, "task": task})


@router.delete("/tasks")
async def delete_task(cronId: str | None = None) -> JSONResponse:
    if not cronId:
        return _error("cronId required", 400)
    schedule = _task_schedule(get_config())
    try:
        await asyncio.to_thread(schedule.remove, cronId)
    except OSError as exc:
        logger.exception("Failed to write task file")
        return _error(str(exc), 500)
    return JSONResponse({"success": True})


# ------------------------------------------------------------------
# Search
# ------------------------------------------------------------------

@router.get("/search")
async def search(q: str | None = None, limit: int = SEARCH_LIMIT) -> JSONResponse:
    if not q or len(q) < MIN_QUERY_LENGTH:
        return _error(f"Query must be at least {MIN_QUERY_LENGTH} characters", 400)
    results = await search_all(get_config(), q, limit)
    return JSONResponse(results)


# ------------------------------------------------------------------
# Overview
# ------------------------------------------------------------------

@router.get("/overview")
async def overview() -> JSONResponse:
    cfg = get_config()
    data = await asyncio.to_thread(load_overview, cfg["overview_file"])
    activities = await asyncio.to_thread(_activity_log(cfg).all)
    data["summary"] = summary_stats(data, activities)
    data["pollIntervalSeconds"] = cfg["dashboard"]["poll_interval_seconds"]
    return JSONResponse(data)
