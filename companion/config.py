"""Centralized configuration for the Accessibility Companion backend.

Re-exports everything from companion.infrastructure.settings, then adds typed
constants for history storage, uploads, speech and the API. Environment
variable overrides use safe defaults so the app starts without extra env
configuration.
"""

from __future__ import annotations

import os

from companion.infrastructure.settings import *  # noqa: F401, F403 - re-export settings

# --- App ---
APP_NAME: str = "Universal Accessibility Companion"
APP_VERSION: str = "1.0.0"

# --- History ---
HISTORY_BACKEND: str = os.getenv("COMPANION_HISTORY_BACKEND", "sqlite")
HISTORY_KEY: str = os.getenv("COMPANION_HISTORY_KEY", "accessibility_app_history")
HISTORY_MAX_BYTES: int = int(os.getenv("COMPANION_HISTORY_MAX_BYTES", str(5 * 1024 * 1024)))

# --- Database ---
DB_CONNECT_TIMEOUT: float = float(os.getenv("COMPANION_DB_CONNECT_TIMEOUT", "30.0"))
DB_RETRY_MAX: int = int(os.getenv("COMPANION_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("COMPANION_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("COMPANION_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("COMPANION_DB_RETRY_JITTER", "0.1"))

# --- Uploads ---
MAX_IMAGE_BYTES: int = int(os.getenv("COMPANION_MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

# --- Speech ---
SPEECH_RATE: int = int(os.getenv("COMPANION_SPEECH_RATE", "170"))
DICTATION_LANGUAGE: str = os.getenv("COMPANION_DICTATION_LANGUAGE", "en-US")

# --- Export ---
EXPORT_FILENAME_PREFIX: str = "accessibility-companion-result"
