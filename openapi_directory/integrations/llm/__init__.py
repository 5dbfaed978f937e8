"""Language model providers."""

from .base import LLMProvider
from .openrouter_client import OpenRouterClient

__all__ = ["LLMProvider", "OpenRouterClient"]
