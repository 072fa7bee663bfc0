"""LLM-backed agent judge."""

import logging
from typing import Any, Sequence

from promptpack.exceptions import JudgeError
from promptpack.matching.base import AgentCandidate, AgentJudge, AgentMatch
from promptpack.matching.providers.base import LLMProvider

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You route requests to specialist agents.

Each agent has an identifier and a description of when it should be used.
Given the current context, select the agents whose activation conditions fit
it. Score each selected agent from 0.0 (irrelevant) to 1.0 (exact fit) and give
a one-sentence reason. Omit agents that do not fit. If none fit, return an
empty list. Only use identifiers from the list you are given."""


MATCH_PROMPT = """# Context
{context}

# Agents
{agents}

Return JSON in this exact format:
{{
  "matches": [
    {{"identifier": "agent identifier", "score": 0.0, "reason": "why it fits"}}
  ]
}}"""


MATCH_SCHEMA: dict[str, Any] = {
    "title": "agent_matches",
    "type": "object",
    "properties": {
        "matches": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "identifier": {"type": "string"},
                    "score": {"type": "number"},
                    "reason": {"type": "string"},
                },
                "required": ["identifier", "score", "reason"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["matches"],
    "additionalProperties": False,
}


def format_candidates(candidates: Sequence[AgentCandidate]) -> str:
    """Render every candidate with its complete description."""
    blocks = []
    for candidate in candidates:
        blocks.append(
            f"## {candidate.identifier}\n{candidate.description.strip()}"
        )
    return "\n\n".join(blocks)


class LLMJudge(AgentJudge):
    """Asks a language model which agents fit the context."""

    def __init__(
        self,
        provider: LLMProvider,
        max_tokens: int = 1000,
        temperature: float = 0.0,
    ) -> None:
        """Initialize the LLM judge.

        Args:
            provider: LLM provider used for the ranking call
            max_tokens: Maximum tokens for the response
            temperature: Sampling temperature
        """
        self.provider = provider
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def judge_name(self) -> str:
        return f"llm:{self.provider.provider_name}"

    def build_prompt(self, context: str, candidates: Sequence[AgentCandidate]) -> str:
        return MATCH_PROMPT.format(
            context=context.strip(),
            agents=format_candidates(candidates),
        )

    def rank(
        self, context: str, candidates: Sequence[AgentCandidate]
    ) -> list[AgentMatch]:
        if not candidates:
            return []

        try:
            response = self.provider.complete(
                system_prompt=SYSTEM_PROMPT,
                user_prompt=self.build_prompt(context, candidates),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_schema=MATCH_SCHEMA,
            )
        except Exception as e:
            raise JudgeError(
                f"{self.provider.provider_name} request failed: {e}"
            ) from e

        self.provider.log_usage(response, "agent match")

        try:
            payload = response.json()
        except ValueError as e:
            raise JudgeError(str(e)) from e

        return self._parse_matches(payload)

    def _parse_matches(self, payload: Any) -> list[AgentMatch]:
        if not isinstance(payload, dict) or not isinstance(
            payload.get("matches"), list
        ):
            raise JudgeError("Model response has no 'matches' list")

        matches = []
        for item in payload["matches"]:
            if not isinstance(item, dict) or not isinstance(
                item.get("identifier"), str
            ):
                logger.warning(f"Ignoring malformed match entry: {item!r}")
                continue
            try:
                score = float(item.get("score", 0.0))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring match with non-numeric score: {item!r}")
                continue
            reason = item.get("reason")
            matches.append(
                AgentMatch(
                    identifier=item["identifier"],
                    score=min(max(score, 0.0), 1.0),
                    reason=str(reason) if reason else None,
                )
            )
        return matches
