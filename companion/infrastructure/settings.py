"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

COMPANION_ROOT = Path(__file__).parent.parent

# Environment
ENV = os.getenv("COMPANION_ENV", "development")

# API Configuration
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("COMPANION_LOG_LEVEL", "INFO")

# Google Cloud / Gemini
# Credentials (GOOGLE_API_KEY / API_KEY / GOOGLE_CLOUD_PROJECT) are read per request
GEMINI_BACKEND = os.getenv("GEMINI_BACKEND", "genai")  # "genai" or "vertexai"
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-pro-preview")
GEMINI_LOCATION = os.getenv("GEMINI_LOCATION", "us-central1")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))

# Storage
DB_PATH = Path(os.getenv("COMPANION_DB_PATH", str(COMPANION_ROOT / "data" / "companion.db")))


def is_development() -> bool:
    """Check if running in development"""
    return ENV == "development"
