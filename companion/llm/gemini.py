"""
Gemini Model Manager - credential resolution and cached model instances.

Supports two backends, selected by GEMINI_BACKEND:
  1. google-generativeai ("genai", default) - uses GOOGLE_API_KEY (or API_KEY)
  2. Vertex AI SDK ("vertexai") - uses GOOGLE_CLOUD_PROJECT + service account

Credentials are read from the environment at call time, so a missing key is
reported per request instead of at startup.
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from companion.infrastructure.settings import GEMINI_BACKEND, GEMINI_LOCATION, GEMINI_MODEL
from companion.observability.logging import get_logger

logger = get_logger(__name__)

BACKEND_GENAI = "genai"
BACKEND_VERTEXAI = "vertexai"

MISSING_API_KEY_MESSAGE = "API Key not found in environment variables"


class GeminiConfigurationError(RuntimeError):
    """Raised when backend credentials or backend selection are missing/invalid."""


class GeminiInitializationError(RuntimeError):
    """Raised when Gemini model cannot be initialized."""


@dataclass(frozen=True)
class GeminiCredentials:
    backend: str
    api_key: str | None = None
    project: str | None = None
    location: str = "us-central1"


def resolve_credentials() -> GeminiCredentials:
    """
    Resolve backend credentials from the environment.

    Raises:
        GeminiConfigurationError: If the credential for the selected backend
            is absent or the backend name is unknown
    """
    backend = (os.getenv("GEMINI_BACKEND") or GEMINI_BACKEND).strip().lower()

    if backend == BACKEND_GENAI:
        api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY")
        if not api_key:
            raise GeminiConfigurationError(MISSING_API_KEY_MESSAGE)
        return GeminiCredentials(backend=backend, api_key=api_key)

    if backend == BACKEND_VERTEXAI:
        project = os.getenv("GOOGLE_CLOUD_PROJECT")
        if not project:
            raise GeminiConfigurationError("GOOGLE_CLOUD_PROJECT not set")
        location = os.getenv("GEMINI_LOCATION") or GEMINI_LOCATION
        return GeminiCredentials(backend=backend, project=project, location=location)

    raise GeminiConfigurationError(f"Unknown GEMINI_BACKEND: {backend}")


def resolve_model_name() -> str:
    return os.getenv("GEMINI_MODEL") or GEMINI_MODEL


@lru_cache(maxsize=8)
def get_gemini_model(
    credentials: GeminiCredentials,
    system_instruction: str | None = None,
    model_name: str = GEMINI_MODEL,
):
    """
    Get or create a Gemini model instance for the given credentials.

    System instructions are per-model-instance in the Gemini API, so the cache
    is keyed on (credentials, system_instruction, model_name).

    Returns:
        GenerativeModel exposing ``generate_content_async``

    Raises:
        GeminiInitializationError: If the SDK is missing or initialization fails
    """
    try:
        if credentials.backend == BACKEND_VERTEXAI:
            import vertexai
            from vertexai.generative_models import GenerativeModel

            vertexai.init(project=credentials.project, location=credentials.location)
            model = GenerativeModel(model_name, system_instruction=system_instruction)
            logger.info(
                "Initialized Gemini model (Vertex AI): project=%s, location=%s, model=%s",
                credentials.project,
                credentials.location,
                model_name,
            )
            return model

        import google.generativeai as genai

        genai.configure(api_key=credentials.api_key)
        model = genai.GenerativeModel(model_name, system_instruction=system_instruction)
        logger.info("Initialized Gemini model (google-generativeai): model=%s", model_name)
        return model

    except ImportError as e:
        raise GeminiInitializationError(
            f"Gemini SDK for backend '{credentials.backend}' is not installed. "
            "Install google-generativeai or google-cloud-aiplatform."
        ) from e
    except Exception as e:
        logger.error("Failed to initialize Gemini model: %s", e)
        raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e


def to_sdk_parts(backend: str, segments) -> list[Any]:
    """Convert composer segments into the content parts each SDK expects.

    Image segments carry base64 text; both SDKs want raw bytes.
    """
    from companion.assist.composer import ImageSegment

    if backend == BACKEND_VERTEXAI:
        from vertexai.generative_models import Part

        parts: list[Any] = []
        for segment in segments:
            if isinstance(segment, ImageSegment):
                parts.append(
                    Part.from_data(data=base64.b64decode(segment.data), mime_type=segment.mime_type)
                )
            else:
                parts.append(Part.from_text(segment.text))
        return parts

    return [
        {"mime_type": segment.mime_type, "data": base64.b64decode(segment.data)}
        if isinstance(segment, ImageSegment)
        else segment.text
        for segment in segments
    ]


def response_text(response: Any) -> str:
    """Extract text from an SDK response; blocked/empty candidates yield ""."""
    try:
        return response.text or ""
    except ValueError:
        # Both SDKs raise ValueError from .text when no candidate has text parts
        return ""
