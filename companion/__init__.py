"""Universal Accessibility Companion - Gemini-backed accessibility assistant."""

from __future__ import annotations

__version__ = "1.0.0"
