"""OpenRouter LLM client for structured generation."""

import json
import logging
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import ValidationError

from ...config import config
from ...exceptions import LLMUnavailableError
from ...utils.json_utils import clean_json_string
from .base import LLMProvider, T

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an assistant that helps pick HTTP API operations and their inputs. "
    "You ONLY output a single valid JSON object, never text or explanations."
)


class OpenRouterClient(LLMProvider):
    """Client for the OpenRouter chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key (default: OPENROUTER_API_KEY)
            model: Model name (default: OPENROUTER_MODEL)
            temperature: Sampling temperature (default: OPENROUTER_TEMPERATURE)
            http_client: Preconfigured HTTP client
        """
        self.api_key = api_key or config.openrouter_api_key
        self.model = model or config.openrouter_model
        self.temperature = config.openrouter_temperature if temperature is None else temperature
        self.base_url = "https://openrouter.ai/api/v1"

        # Headers required by OpenRouter
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": "https://github.com/openapi-directory/openapi-directory",
            "X-Title": "OpenAPI Directory",
            "Content-Type": "application/json",
        }
        self.http_client = http_client or httpx.Client(headers=self.headers, timeout=30.0)

    def _call_llm(self, messages: Any) -> Dict[str, Any]:
        if not self.api_key:
            raise LLMUnavailableError("OPENROUTER_API_KEY is not configured")

        data = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
            "stream": False,
        }
        logger.debug(f"Request URL: {self.base_url}/chat/completions")

        try:
            response = self.http_client.post(
                f"{self.base_url}/chat/completions", json=data, headers=self.headers
            )
            if response.status_code != 200:
                logger.error(f"OpenRouter API error response: {response.text}")
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OpenRouter API call failed: {e}")
            raise LLMUnavailableError(f"OpenRouter API call failed: {e}") from e

    def generate_structured(
        self,
        prompt: str,
        output_model: Type[T],
        system_prompt: Optional[str] = None,
    ) -> T:
        schema = json.dumps(output_model.model_json_schema())
        messages = [
            {
                "role": "system",
                "content": (
                    f"{system_prompt or DEFAULT_SYSTEM_PROMPT}\n"
                    f"The JSON object must match this JSON schema:\n{schema}"
                ),
            },
            {"role": "user", "content": prompt},
        ]

        result = self._call_llm(messages)
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMUnavailableError(f"Unexpected OpenRouter response: {e}", {"response": result}) from e

        cleaned = clean_json_string(content or "")
        logger.debug(f"Cleaned JSON content: {cleaned}")
        try:
            return output_model.model_validate_json(cleaned)
        except ValidationError as e:
            logger.error(f"Failed to parse LLM response: {e}")
            raise LLMUnavailableError(
                f"LLM answer does not match {output_model.__name__}", {"content": content}
            ) from e

    def close(self) -> None:
        self.http_client.close()


__all__ = ["OpenRouterClient"]
