"""Pydantic models for API request/response."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

# Optional leading '#', six hex digits. Normalised by DocumentOptions.
ACCENT_COLOR_PATTERN = r"^#?[0-9A-Fa-f]{6}$"


class UploadResponse(BaseModel):
    file_id: str
    preview_markdown: str


class FetchMarkdownRequest(BaseModel):
    url: str


class FetchMarkdownResponse(BaseModel):
    file_id: str
    preview_markdown: str
    source_url: str


class ParseRequest(BaseModel):
    markdown: str


class ParseResponse(BaseModel):
    blocks: list[dict[str, Any]]


class ConvertRequest(BaseModel):
    """Either file_id (from upload/fetch) or inline markdown."""

    file_id: str | None = None
    markdown: str | None = None
    title: str = ""
    organisation: str | None = None
    accent_color: str | None = Field(default=None, pattern=ACCENT_COLOR_PATTERN)
    filename: str | None = None

    @model_validator(mode="after")
    def _require_source(self) -> "ConvertRequest":
        if self.file_id is None and self.markdown is None:
            raise ValueError("Provide file_id or markdown")
        return self


class PackDocumentIn(BaseModel):
    folder: str = ""
    filename: str
    title: str = ""
    markdown: str


class PackRequest(BaseModel):
    organisation: str | None = None
    accent_color: str | None = Field(default=None, pattern=ACCENT_COLOR_PATTERN)
    readme: str | None = None
    documents: list[PackDocumentIn] = Field(min_length=1)


class PackResponse(BaseModel):
    task_id: str


class TaskListItem(BaseModel):
    task_id: str
    status: str
    filename: str | None = None
    failure_reason: str | None = None


class TaskListResponse(BaseModel):
    tasks: list[TaskListItem]
    total: int
