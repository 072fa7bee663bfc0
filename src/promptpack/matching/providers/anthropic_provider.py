"""Anthropic LLM provider implementation."""

import json
import logging
import time
from typing import Any

from anthropic import Anthropic

from promptpack.matching.providers.base import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


# Pricing per 1M tokens
ANTHROPIC_PRICING = {
    "claude-sonnet-4-5": {"input": 3.00, "output": 15.00},
    "claude-opus-4-1": {"input": 15.00, "output": 75.00},
    "claude-haiku-4-5": {"input": 1.00, "output": 5.00},
    "claude-3-5-haiku": {"input": 0.80, "output": 4.00},
    "default": {"input": 3.00, "output": 15.00},
}

# Name of the forced tool used to obtain structured output
STRUCTURED_OUTPUT_TOOL = "record_response"


class AnthropicProvider(LLMProvider):
    """Anthropic LLM provider using the Anthropic Python SDK.

    Structured output is obtained with tool use: the JSON schema becomes the
    input schema of a single tool the model is forced to call, and the tool
    input is returned as the response content.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5",
        client: Anthropic | None = None,
    ):
        """Initialize the Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model to use (default: claude-sonnet-4-5)
            client: Pre-built client (for testing)
        """
        if not api_key and client is None:
            raise ValueError("Anthropic API key is required")

        self.client = client or Anthropic(api_key=api_key)
        self._model = model
        logger.info(f"Initialized Anthropic provider with model: {model}")

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 500,
        temperature: float = 0.0,
        json_schema: dict[str, Any] | None = None,
    ) -> LLMResponse:
        start_time = time.time()

        request_params: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }

        if json_schema is not None:
            request_params["tools"] = [
                {
                    "name": STRUCTURED_OUTPUT_TOOL,
                    "description": "Record the response in the required structure.",
                    "input_schema": json_schema,
                }
            ]
            request_params["tool_choice"] = {
                "type": "tool",
                "name": STRUCTURED_OUTPUT_TOOL,
            }

        response = self.client.messages.create(**request_params)
        duration_ms = (time.time() - start_time) * 1000

        return self._build_response(response, duration_ms)

    def _build_response(self, response: Any, duration_ms: float) -> LLMResponse:
        """Build LLMResponse from an Anthropic API response.

        Tool-use input takes precedence over text blocks.
        """
        content = ""
        for block in response.content:
            block_type = getattr(block, "type", None)
            if block_type == "tool_use" and block.name == STRUCTURED_OUTPUT_TOOL:
                content = json.dumps(block.input)
                break
            if block_type == "text":
                content += block.text

        usage = response.usage
        prompt_tokens = usage.input_tokens if usage else 0
        completion_tokens = usage.output_tokens if usage else 0

        return LLMResponse(
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            finish_reason=response.stop_reason or "unknown",
            model=response.model,
            duration_ms=duration_ms,
            raw_response=response,
        )

    def calculate_cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        """Calculate cost in USD, matching dated model names by prefix."""
        pricing = ANTHROPIC_PRICING.get(self._model)

        if pricing is None:
            for model_key, model_pricing in ANTHROPIC_PRICING.items():
                if model_key != "default" and self._model.startswith(model_key):
                    pricing = model_pricing
                    break

        if pricing is None:
            pricing = ANTHROPIC_PRICING["default"]

        input_cost = prompt_tokens * (pricing["input"] / 1_000_000)
        output_cost = completion_tokens * (pricing["output"] / 1_000_000)

        return input_cost + output_cost
