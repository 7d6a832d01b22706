"""Health check endpoint.

Reports service status and credential readiness for the configured Gemini
backend without making an API call.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from companion.config import APP_NAME, APP_VERSION, GEMINI_BACKEND

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    backend = (os.getenv("GEMINI_BACKEND") or GEMINI_BACKEND).lower()
    has_api_key = bool(os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY"))
    has_project = bool(os.getenv("GOOGLE_CLOUD_PROJECT"))
    llm_ready = has_project if backend == "vertexai" else has_api_key

    return {
        "status": "healthy",
        "service": APP_NAME,
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "llm": {
            "backend": backend,
            "ready": llm_ready,
            "google_api_key": has_api_key,
            "google_cloud_project": has_project,
        },
    }
