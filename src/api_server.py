"""
FastAPI API Server.

Receives end-of-call webhooks from the voice platform, extracts CRM
fields from the call summary and transcript, and writes them to the
contact record.

Start with:
    uvicorn src.api_server:app --reload --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv(".env.local")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.dependencies import close_clients
from src.api.extraction import router as extraction_router
from src.api.middleware import RequestIdMiddleware
from src.api.webhooks import router as webhooks_router
from src.config import get_settings
from src.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle hooks."""
    settings = get_settings()
    logger.info(
        "api_server_starting",
        environment=settings.environment.value,
        crm_configured=settings.crm_configured,
        webhook_secret_set=bool(settings.webhook_secret),
    )
    yield
    await close_clients()
    logger.info("api_server_stopping")


app = FastAPI(
    title="Call Field Extraction Service API",
    description="Extracts structured seller fields from voice-call summaries and transcripts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhooks_router)
app.include_router(extraction_router)


@app.get("/health", tags=["System"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "call-field-extraction"}


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    """API root."""
    return {
        "service": "Call Field Extraction Service",
        "version": "0.1.0",
        "docs": "/docs",
    }
