"""Base interface for LLM providers."""

from abc import ABC, abstractmethod
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def generate_structured(
        self,
        prompt: str,
        output_model: Type[T],
        system_prompt: Optional[str] = None,
    ) -> T:
        """Ask the model for an answer shaped like output_model.

        Args:
            prompt: The prompt to send to the LLM
            output_model: Pydantic model the answer must validate against
            system_prompt: Optional system prompt to set context

        Returns:
            Validated answer

        Raises:
            LLMUnavailableError: If no usable answer could be obtained
        """
