"""
Analysis Client - the single outbound call to the Gemini model.

One best-effort round trip per submission: no retries, no timeout handling,
no streaming. ``analyze`` never raises; every failure comes back as
``AnalysisResponse(markdown="", error=<message>)``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from companion.assist.composer import compose
from companion.assist.types import AnalysisRequest, AnalysisResponse, ImagePayload
from companion.infrastructure.settings import GEMINI_TEMPERATURE
from companion.llm.gemini import (
    GeminiConfigurationError,
    GeminiCredentials,
    get_gemini_model,
    resolve_credentials,
    resolve_model_name,
    response_text,
    to_sdk_parts,
)
from companion.llm.prompts import get_system_instruction
from companion.observability.logging import get_logger
from companion.observability.telemetry import counter, log_event, time_block
from companion.utils.validators import strip_data_url

logger = get_logger(__name__)

EMPTY_RESPONSE_MESSAGE = "No response generated from the model."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing your request."

ModelProvider = Callable[[GeminiCredentials, "str | None", str], Any]


class EmptyResponseError(RuntimeError):
    """The model returned no text."""


class AnalysisClient:
    """
    Owns the outbound generate-content call.

    Args:
        model_provider: Returns a model exposing ``generate_content_async``
            for (credentials, system_instruction, model_name). Defaults to
            the cached Gemini model manager.
        temperature: Sampling temperature; low by default for factual output.
    """

    def __init__(
        self,
        model_provider: ModelProvider | None = None,
        temperature: float = GEMINI_TEMPERATURE,
    ) -> None:
        self._model_provider = model_provider or get_gemini_model
        self.temperature = temperature

    async def analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        """
        Run one analysis.

        Side Effects:
            - Calls the Gemini API (one request)
            - Increments analysis.* telemetry counters
        """
        try:
            credentials = resolve_credentials()

            image = None
            if request.image is not None and request.image.data and request.image.mime_type:
                image = ImagePayload(
                    data=strip_data_url(request.image.data),
                    mime_type=request.image.mime_type,
                )

            composite = compose(request.mode, request.text, image)
            model = self._model_provider(
                credentials, get_system_instruction(), resolve_model_name()
            )
            parts = to_sdk_parts(credentials.backend, composite.segments)

            logger.info(
                "Analysis request: mode=%s, text_chars=%d, has_image=%s",
                request.mode.value,
                len(request.text or ""),
                composite.has_image,
            )
            with time_block("analysis.latency"):
                response = await model.generate_content_async(
                    parts,
                    generation_config={"temperature": self.temperature},
                )

            text = response_text(response)
            if not text:
                counter("analysis.empty_response")
                raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)

            counter("analysis.success")
            log_event("analysis.success", mode=request.mode.value, response_chars=len(text))
            return AnalysisResponse.success(text)

        except GeminiConfigurationError as e:
            counter("analysis.config_error")
            logger.error("Gemini configuration error: %s", e)
            return AnalysisResponse.failure(str(e))

        except Exception as e:
            counter("analysis.error")
            logger.error("Gemini API Error: %s (%s)", e, type(e).__name__)
            log_event("analysis.error", mode=request.mode.value, error_type=type(e).__name__)
            return AnalysisResponse.failure(str(e) or UNEXPECTED_ERROR_MESSAGE)
