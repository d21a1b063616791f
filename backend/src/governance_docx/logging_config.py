"""Logging configuration: loguru setup, standard logging interception, request context."""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Callable
from pathlib import Path

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from . import config


class InterceptHandler(logging.Handler):
    """Route standard library logging (uvicorn, httpx) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging internals so loguru reports the real caller
        frame, depth = sys._getframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str | None = None, log_dir: str | Path | None = None) -> None:
    """Stdout sink at the configured level, plus a JSONL file when a log dir is set."""
    level = (level or config.LOG_LEVEL).upper()
    log_dir = log_dir if log_dir is not None else config.LOG_DIR

    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "governance-docx.jsonl",
            format="{message}",
            level=level,
            serialize=True,
            rotation="50 MB",
            retention=20,
            compression="gz",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Add request_id to the logging context for correlation."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        with logger.contextualize(request_id=request_id):
            response = await call_next(request)

        return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions (e.g. serialization failures) and return a plain 500."""
    request_id = getattr(request.state, "request_id", None)
    context = f"{request.method} {request.url.path}"
    if request_id:
        context += f" request_id={request_id}"
    logger.exception(f"Unhandled exception on {context}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
