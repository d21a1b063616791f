"""API routes: upload/fetch markdown, convert to .docx, build governance packs."""

from __future__ import annotations

import asyncio
import json
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, AsyncGenerator
from urllib.parse import quote

import httpx
from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from loguru import logger
from sse_starlette.sse import EventSourceResponse

from ..config import MAX_UPLOAD_BYTES
from ..converter import DocumentOptions, markdown_to_docx, parse_blocks
from ..models import (
    ConvertRequest,
    FetchMarkdownRequest,
    FetchMarkdownResponse,
    PackRequest,
    PackResponse,
    ParseRequest,
    ParseResponse,
    TaskListResponse,
    UploadResponse,
)
from ..services.input_layer import fetch_markdown, get_upload, save_upload
from ..services.pack_builder import PackDocument, slugify
from ..services.run_pack import get_archive, get_task, list_tasks, new_task, run_task

router = APIRouter(prefix="/api", tags=["api"])
_executor = ThreadPoolExecutor(max_workers=4)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _attachment(filename: str) -> dict[str, str]:
    """Content-Disposition with an ASCII fallback name plus the RFC 5987 UTF-8 name."""
    stem, dot, suffix = filename.rpartition(".")
    if not dot:
        stem, suffix = filename, ""
    suffix = re.sub(r"[^A-Za-z0-9]", "", suffix)
    fallback = slugify(stem, default="document") + (f".{suffix}" if suffix else "")
    return {"Content-Disposition": f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"}


@router.post("/upload", response_model=UploadResponse)
async def api_upload(file: UploadFile = File(...)):
    """Upload a markdown file. Returns file_id and preview_markdown."""
    if not file.filename or not (file.filename.endswith(".md") or file.filename.endswith(".txt")):
        raise HTTPException(400, "File must be .md or .txt")
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(413, f"File exceeds {MAX_UPLOAD_BYTES} bytes")
    result = save_upload(content, file.filename)
    return UploadResponse(**result)


@router.post("/fetch-markdown", response_model=FetchMarkdownResponse)
async def api_fetch_markdown(body: FetchMarkdownRequest):
    """Fetch markdown from a URL. Returns file_id, preview_markdown, source_url."""
    try:
        result = fetch_markdown(body.url)
        return FetchMarkdownResponse(**result)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except httpx.HTTPError as e:
        logger.warning("Fetch failed for {}: {}", body.url, e)
        raise HTTPException(502, str(e))


@router.post("/parse", response_model=ParseResponse)
async def api_parse(body: ParseRequest):
    """Return the parsed block list (debug view)."""
    return ParseResponse(blocks=[b.to_dict() for b in parse_blocks(body.markdown)])


@router.post("/convert")
async def api_convert(body: ConvertRequest):
    """Convert markdown (inline or a stored upload) and return the .docx file."""
    source_name = "document"
    if body.markdown is not None:
        markdown = body.markdown
    else:
        upload = get_upload(body.file_id or "")
        if not upload:
            raise HTTPException(404, "Upload not found")
        markdown = upload.get("content", "")
        source_name = Path(upload.get("filename") or source_name).stem
    try:
        options = DocumentOptions(
            title=body.title,
            organisation=body.organisation or "",
            accent_color=body.accent_color or "",
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    data = await markdown_to_docx(markdown, options)
    filename = body.filename or f"{slugify(body.title or source_name)}.docx"
    logger.info("Converted {} into {} ({} bytes)", source_name, filename, len(data))
    return Response(content=data, media_type=DOCX_MEDIA_TYPE, headers=_attachment(filename))


@router.post("/packs", response_model=PackResponse)
async def api_packs(body: PackRequest):
    """Start a pack build. Returns task_id immediately. Subscribe to GET /api/tasks/{task_id}/stream for progress."""
    task_id = new_task()
    documents = [PackDocument(folder=d.folder, filename=d.filename, title=d.title, markdown=d.markdown) for d in body.documents]
    _executor.submit(
        run_task,
        documents=documents,
        organisation=body.organisation,
        accent_color=body.accent_color,
        readme=body.readme,
        task_id=task_id,
    )
    return PackResponse(task_id=task_id)


@router.get("/tasks/{task_id}/stream")
async def api_task_stream(task_id: str):
    """SSE stream for task progress. Events: progress (step, progress), result, error."""
    if not get_task(task_id):
        raise HTTPException(404, "Task not found")

    async def event_generator() -> AsyncGenerator[dict[str, Any], None]:
        last_index = 0
        while True:
            t = get_task(task_id)
            if not t:
                break
            events = t.get("events", [])
            for ev in events[last_index:]:
                yield {"data": json.dumps(ev)}
            last_index = len(events)
            status = t.get("status", "running")
            if status != "running":
                result = t.get("result")
                if result:
                    yield {"data": json.dumps({"kind": "result", "data": result})}
                break
            await asyncio.sleep(0.3)

    return EventSourceResponse(event_generator())


@router.get("/tasks/{task_id}/download")
async def api_task_download(task_id: str):
    """Download the zip of a completed pack task."""
    if not get_task(task_id):
        raise HTTPException(404, "Task not found")
    archive = get_archive(task_id)
    if archive is None:
        raise HTTPException(409, "Task has not completed successfully")
    filename, data = archive
    return Response(content=data, media_type="application/zip", headers=_attachment(filename))


@router.get("/tasks", response_model=TaskListResponse)
async def api_tasks_list(page: int = 1, size: int = 20):
    """List task history."""
    data = list_tasks(page=page, size=size)
    return TaskListResponse(**data)
