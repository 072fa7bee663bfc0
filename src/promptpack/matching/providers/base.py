"""Base protocol and types for LLM providers used by the LLM agent judge."""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Some models wrap JSON in a fenced block despite instructions
_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


@dataclass
class LLMResponse:
    """Standardized response from LLM providers.

    Attributes:
        content: The generated text content
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used
        finish_reason: Why generation stopped (stop, length, error, etc.)
        model: The actual model used (may differ from requested)
        duration_ms: Time taken for the API call in milliseconds
        raw_response: Provider-specific raw response for debugging
    """

    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    finish_reason: str
    model: str
    duration_ms: float
    raw_response: Any = None

    def json(self) -> Any:
        """Decode content as JSON, tolerating a surrounding code fence.

        Raises:
            ValueError: If the content is not valid JSON
        """
        text = self.content
        fenced = _CODE_FENCE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Model returned invalid JSON: {e}") from e


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implementations must handle:
    - API client initialization
    - Structured JSON output (using provider-specific mechanisms)
    - Token counting and cost calculation
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g., 'openai', 'anthropic')."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier being used."""
        ...

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 500,
        temperature: float = 0.0,
        json_schema: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate a completion from the LLM.

        Args:
            system_prompt: System message setting the context
            user_prompt: User message with the actual request
            max_tokens: Maximum tokens in the response
            temperature: Sampling temperature (0.0-1.0)
            json_schema: Optional JSON schema for structured output

        Returns:
            LLMResponse with the completion and metadata
        """
        ...

    @abstractmethod
    def calculate_cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        """Calculate the cost in USD for the given token usage."""
        ...

    def cost_of(self, response: LLMResponse) -> float:
        """Cost in USD of one response."""
        return self.calculate_cost(response.prompt_tokens, response.completion_tokens)

    def log_usage(self, response: LLMResponse, purpose: str) -> None:
        logger.debug(
            f"{self.provider_name}/{response.model} {purpose}: "
            f"{response.prompt_tokens}+{response.completion_tokens} tokens, "
            f"${self.cost_of(response):.6f}, {response.duration_ms:.0f}ms, "
            f"finish={response.finish_reason}"
        )
