"""Input layer: local markdown upload and remote markdown fetch."""

from __future__ import annotations

import json
import re
import uuid
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from ..config import GOVERNANCE_DOCX_DATA_DIR

# Uploaded markdown lives:
# - in memory for the fast path
# - on disk so `convert` still works after a server reload/restart
_upload_store: dict[str, dict[str, Any]] = {}

_BACKEND_DIR = Path(__file__).resolve().parents[3]  # backend/
_DEFAULT_DATA_DIR = _BACKEND_DIR / ".data"
_DATA_DIR = Path(GOVERNANCE_DOCX_DATA_DIR or _DEFAULT_DATA_DIR)
_UPLOAD_DIR = _DATA_DIR / "uploads"

PREVIEW_CHARS = 5000

_GITHUB_BLOB_RE = re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/blob/(.+)$")


def _persist_upload(file_id: str, record: dict[str, Any]) -> None:
    _UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    path = _UPLOAD_DIR / f"{file_id}.json"
    path.write_text(json.dumps(record, ensure_ascii=False), encoding="utf-8")


def _load_upload_from_disk(file_id: str) -> dict[str, Any] | None:
    path = _UPLOAD_DIR / f"{file_id}.json"
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable upload {}: {}", path, e)
        return None


def _preview(content: str) -> str:
    return content[:PREVIEW_CHARS] + ("..." if len(content) > PREVIEW_CHARS else "")


def save_upload(content: str | bytes, filename: str = "document.md") -> dict[str, Any]:
    """Store uploaded content and return file_id and preview_markdown."""
    file_id = str(uuid.uuid4())
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError:
            content = content.decode("utf-8", errors="replace")
    preview = _preview(content)
    record = {
        "content": content,
        "filename": filename,
        "preview_markdown": preview,
    }
    _upload_store[file_id] = record
    _persist_upload(file_id, record)
    logger.info("Stored upload {} ({}, {} chars)", file_id, filename, len(content))
    return {"file_id": file_id, "preview_markdown": preview}


def get_upload(file_id: str) -> dict[str, Any] | None:
    """Retrieve stored upload by file_id."""
    rec = _upload_store.get(file_id)
    if rec is not None:
        return rec
    rec = _load_upload_from_disk(file_id)
    if rec is not None:
        _upload_store[file_id] = rec
    return rec


def to_raw_url(url: str) -> str:
    """Rewrite a GitHub `blob` page URL to its raw.githubusercontent.com form."""
    m = _GITHUB_BLOB_RE.match(url)
    if not m:
        return url
    owner, repo, rest = m.groups()
    return f"https://raw.githubusercontent.com/{owner}/{repo}/{rest}"


def fetch_markdown(url: str) -> dict[str, Any]:
    """
    Fetch a markdown document over HTTP(S) and store it like an upload.
    Returns file_id, preview_markdown, source_url (the URL actually fetched).
    """
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    source_url = to_raw_url(url)
    filename = source_url.rstrip("/").rsplit("/", 1)[-1] or "document.md"
    with httpx.Client(timeout=30.0, follow_redirects=True) as client:
        r = client.get(source_url, headers={"Accept": "text/markdown, text/plain, */*"})
        r.raise_for_status()
        content = r.text
    logger.info("Fetched {} ({} chars)", source_url, len(content))
    result = save_upload(content, filename)
    return {**result, "source_url": source_url}
