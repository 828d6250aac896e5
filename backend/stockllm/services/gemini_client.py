"""Gemini AI client for generating portfolio reports."""
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from stockllm.config import get_settings
from stockllm.services.gemini_exceptions import (
    GeminiAPIError,
    GeminiOverloadedError,
    GeminiTimeoutError,
)
from stockllm.services.retry import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY, RetryingInvoker

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_REQUEST_TIMEOUT = 120.0  # seconds


class GeminiClient:
    """Client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash",
        generation_config: Optional[Dict[str, Any]] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model_name: Name of the Gemini model to use
            generation_config: REST ``generationConfig`` payload
            request_timeout: Seconds allowed per request
            max_attempts: Attempts per generation when Gemini is overloaded
            retry_delay: Fixed seconds to wait between overloaded attempts
            transport: Optional httpx transport (used by tests)
            sleep: Optional sleep function for the retry loop (used by tests)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.generation_config = generation_config or {
            "temperature": 0.2,
            "topP": 0.9,
            "topK": 40,
            "maxOutputTokens": 2000,
        }
        self.request_timeout = request_timeout
        self.transport = transport

        invoker_kwargs = {"max_attempts": max_attempts, "delay": retry_delay}
        if sleep is not None:
            invoker_kwargs["sleep"] = sleep
        self.invoker = RetryingInvoker(**invoker_kwargs)

    def _resolve_model_path(self) -> str:
        name = self.model_name
        return name if name.startswith("models/") else f"models/{name}"

    def generate(self, prompt: str) -> str:
        """
        Single ``generateContent`` call.

        Raises:
            GeminiOverloadedError: When the API answers 503 (model overloaded)
            GeminiAPIError: For any other 4xx/5xx or an empty response
            GeminiTimeoutError: When the request times out
        """
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {k: v for k, v in self.generation_config.items() if v is not None},
        }
        url = f"{GEMINI_API_BASE}/{self._resolve_model_path()}:generateContent"

        try:
            with httpx.Client(timeout=self.request_timeout, transport=self.transport) as client:
                response = client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.TimeoutException as timeout_exc:
            raise GeminiTimeoutError(
                f"Gemini API request timed out after {self.request_timeout}s"
            ) from timeout_exc
        except httpx.HTTPError as http_exc:
            raise GeminiAPIError(
                f"Gemini API request failed: {http_exc}",
                status_code=0,
                response_body=None,
            ) from http_exc

        if response.status_code == 503:
            raise GeminiOverloadedError(
                "Gemini API is temporarily unavailable (503)",
                response_body=response.text[:500],
            )
        if response.status_code >= 400:
            raise GeminiAPIError(
                f"Gemini API error: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

        data = response.json()
        text_response = ""
        for candidate in data.get("candidates") or []:
            content = candidate.get("content") or {}
            parts = content.get("parts") or []
            texts = [part.get("text") for part in parts if isinstance(part, dict) and part.get("text")]
            if texts:
                text_response = "".join(texts)
                break

        if not text_response:
            raise GeminiAPIError(
                "Gemini API returned no text content",
                status_code=500,
                response_body=str(data)[:500],
            )

        return text_response

    def generate_with_retry(self, prompt: str) -> str:
        """Generate text, retrying while Gemini reports it is overloaded."""
        return self.invoker.invoke(lambda: self.generate(prompt))


def get_gemini_client() -> GeminiClient:
    """Get Gemini client instance with settings from config."""
    settings = get_settings()

    return GeminiClient(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
        generation_config={
            "temperature": settings.gemini_temperature,
            "topP": settings.gemini_top_p,
            "topK": settings.gemini_top_k,
            "maxOutputTokens": settings.gemini_max_output_tokens,
        },
        request_timeout=settings.gemini_request_timeout,
        max_attempts=settings.gemini_max_attempts,
        retry_delay=settings.gemini_retry_delay,
    )
