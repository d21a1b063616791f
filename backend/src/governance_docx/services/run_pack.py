"""Run governance pack builds as background tasks with progress events for SSE."""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

from loguru import logger

from ..config import MAX_RETAINED_TASKS
from ..converter import DocumentOptions
from .pack_builder import PackDocument, build_pack, pack_filename

# In-memory task store for status, events and the finished archive
_task_store: dict[str, dict[str, Any]] = {}


def _evict_finished(keep: str | None = None) -> None:
    """Drop the oldest finished tasks (and their archives) beyond MAX_RETAINED_TASKS.

    Running tasks and `keep` are never evicted, so the store can briefly exceed the cap.
    """
    excess = len(_task_store) - MAX_RETAINED_TASKS
    if excess <= 0:
        return
    # dicts keep insertion order, so the first finished entries are the oldest
    stale = [tid for tid, t in _task_store.items() if t.get("status") != "running" and tid != keep][:excess]
    for tid in stale:
        del _task_store[tid]
    if stale:
        logger.debug("Evicted {} finished pack tasks", len(stale))


def new_task() -> str:
    """Register a running task and return its id (so the caller can respond before it runs)."""
    task_id = uuid.uuid4().hex
    _task_store[task_id] = {"status": "running", "events": [], "result": None, "archive": None}
    _evict_finished()
    return task_id


def run_task(
    documents: list[PackDocument],
    organisation: str | None = None,
    accent_color: str | None = None,
    readme: str | None = None,
    task_id: str | None = None,
) -> str:
    """Build a pack. If task_id is provided, use it and append events to that task's store."""
    task_id = task_id or uuid.uuid4().hex
    events: list[dict[str, Any]] = []
    task = _task_store.setdefault(task_id, {"status": "running", "events": [], "result": None, "archive": None})
    task["events"] = events

    def on_progress(done: int, total: int, path: str) -> None:
        progress = int(done * 100 / total) if total else 100
        events.append({"kind": "progress", "data": {"step": "converting", "document": path, "progress": progress}})

    try:
        # Resolves defaults and rejects a bad accent before any document is converted.
        options = DocumentOptions(organisation=organisation or "", accent_color=accent_color or "")
        filename = pack_filename(options.organisation)
        archive = asyncio.run(
            build_pack(
                documents,
                organisation=options.organisation,
                accent_color=options.accent_color,
                readme=readme,
                on_progress=on_progress,
            )
        )
        result = {
            "status": "success",
            "filename": filename,
            "documents": len(documents),
            "size": len(archive),
            "failure_reason": None,
        }
        task["archive"] = archive
        task["result"] = result
        task["status"] = "completed"
        events.append({"kind": "progress", "data": {"step": "done", "progress": 100, "result": result}})
        logger.info("Pack task {} completed: {} ({} bytes)", task_id, filename, len(archive))
    except Exception as e:
        logger.exception("Pack task {} failed", task_id)
        task["status"] = "failed"
        task["result"] = {"status": "failed", "failure_reason": str(e)}
        events.append({"kind": "error", "data": {"message": str(e)}})
    _evict_finished(keep=task_id)
    return task_id


def get_task(task_id: str) -> dict[str, Any] | None:
    return _task_store.get(task_id)


def get_archive(task_id: str) -> tuple[str, bytes] | None:
    """Return (filename, zip bytes) for a completed task."""
    t = _task_store.get(task_id)
    if not t or t.get("status") != "completed" or t.get("archive") is None:
        return None
    return t["result"]["filename"], t["archive"]


def list_tasks(page: int = 1, size: int = 20) -> dict[str, Any]:
    items = list(_task_store.items())
    items.reverse()
    total = len(items)
    start = (page - 1) * size
    end = start + size
    tasks = []
    for tid, data in items[start:end]:
        row = {"task_id": tid, "status": data.get("status", "unknown")}
        result = data.get("result")
        if result:
            row["filename"] = result.get("filename")
            row["failure_reason"] = result.get("failure_reason")
        tasks.append(row)
    return {"tasks": tasks, "total": total}
