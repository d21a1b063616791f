"""Bundle several converted documents into one zip "governance pack".

Layout: README.md at the root, every document under its category folder,
e.g. `01_Policies/AI_Use_Policy.docx`.
"""

from __future__ import annotations

import io
import re
import zipfile
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from ..converter import DocumentOptions, markdown_to_docx

ProgressCallback = Callable[[int, int, str], None]

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_PATH_SEP_RE = re.compile(r"[\\/]+")


@dataclass(frozen=True)
class PackDocument:
    folder: str
    filename: str
    title: str
    markdown: str

    @property
    def archive_path(self) -> str:
        """Zip entry name. Empty, `.` and `..` segments are dropped so entries stay inside the pack."""
        name = "_".join(_safe_segments(self.filename)) or "document"
        if not name.lower().endswith(".docx"):
            name = f"{name}.docx"
        return "/".join([*_safe_segments(self.folder), name])


def _safe_segments(path: str) -> list[str]:
    return [s.strip() for s in _PATH_SEP_RE.split(path) if s.strip() not in ("", ".", "..")]


def slugify(name: str, default: str = "pack") -> str:
    """Lower-case, dash-separated slug; `default` when nothing usable is left."""
    return _SLUG_RE.sub("-", name.lower()).strip("-") or default


def pack_filename(organisation: str) -> str:
    return f"governance-pack-{slugify(organisation)}.zip"


async def build_pack(
    documents: list[PackDocument],
    organisation: str,
    accent_color: str,
    readme: str | None = None,
    on_progress: ProgressCallback | None = None,
) -> bytes:
    """Convert every document in order and return the zip bytes. Any failure aborts the pack."""
    buffer = io.BytesIO()
    total = len(documents)
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        if readme:
            archive.writestr("README.md", readme)
        for index, doc in enumerate(documents, start=1):
            options = DocumentOptions(title=doc.title, organisation=organisation, accent_color=accent_color)
            data = await markdown_to_docx(doc.markdown, options)
            archive.writestr(doc.archive_path, data)
            logger.info("Pack {}: added {} ({}/{})", organisation, doc.archive_path, index, total)
            if on_progress:
                on_progress(index, total, doc.archive_path)
    return buffer.getvalue()
