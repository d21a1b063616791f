"""Load settings from environment (.env and env vars)."""

from __future__ import annotations

import os
from pathlib import Path

# Load .env from backend root if present
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
if _env_path.exists():
    from dotenv import load_dotenv
    load_dotenv(_env_path)


def _str(key: str, default: str = "") -> str:
    return (os.environ.get(key) or "").strip() or default


def _int(key: str, default: int) -> int:
    raw = _str(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


# Document defaults
DEFAULT_ORGANISATION = _str("GOVERNANCE_DOCX_ORGANISATION") or "AI Safety Net"
DEFAULT_ACCENT_COLOR = _str("GOVERNANCE_DOCX_ACCENT_COLOR") or "1B2A4A"

# Uploads
GOVERNANCE_DOCX_DATA_DIR = _str("GOVERNANCE_DOCX_DATA_DIR")
MAX_UPLOAD_BYTES = _int("GOVERNANCE_DOCX_MAX_UPLOAD_BYTES", 2 * 1024 * 1024)

# Pack tasks kept in memory (finished ones beyond this are evicted oldest first)
MAX_RETAINED_TASKS = _int("GOVERNANCE_DOCX_MAX_RETAINED_TASKS", 50)

# Logging
LOG_LEVEL = _str("GOVERNANCE_DOCX_LOG_LEVEL") or "INFO"
LOG_DIR = _str("GOVERNANCE_DOCX_LOG_DIR") or None
