"""FastAPI application entry - governance document converter."""

from . import config  # noqa: F401 - load .env on startup
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import router
from .logging_config import RequestContextMiddleware, configure_logging, unhandled_exception_handler

configure_logging()

app = FastAPI(
    title="Governance DOCX",
    description="Convert governance-template Markdown into styled Word documents and packs",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)
app.add_exception_handler(Exception, unhandled_exception_handler)
app.include_router(router)


@app.get("/")
async def root():
    return {"service": "governance-docx", "docs": "/docs"}
