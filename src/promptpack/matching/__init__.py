"""
Agent matching.

Agents are activated by context rather than by name. Matching is a ranking over
(context, agent descriptions). The judgment itself sits behind the AgentJudge
interface so the router stays deterministic when given a deterministic judge.

Available judges:
- KeywordJudge: offline keyword overlap
- LLMJudge: a language model via an LLMProvider (OpenAI or Anthropic)
"""

import logging
from typing import TYPE_CHECKING, Optional

from promptpack.matching.base import AgentCandidate, AgentJudge, AgentMatch
from promptpack.matching.keyword import KeywordJudge
from promptpack.matching.llm import LLMJudge

if TYPE_CHECKING:
    from promptpack.config import Settings

logger = logging.getLogger(__name__)


def create_judge(
    judge_type: Optional[str] = None, settings: Optional["Settings"] = None
) -> AgentJudge:
    """
    Build the configured agent judge.

    Args:
        judge_type: "keyword", "openai" or "anthropic" (defaults to
                    settings.agent_judge)
        settings: Settings to read keys and models from (defaults to the
                  global settings)

    Raises:
        ValueError: If the judge type is unknown or its API key is missing
    """
    if settings is None:
        from promptpack.config import settings as global_settings

        settings = global_settings

    judge_type = (judge_type or settings.agent_judge).lower()

    if judge_type == "keyword":
        return KeywordJudge(min_score=settings.agent_match_min_score)

    if judge_type in ("openai", "anthropic"):
        from promptpack.matching.providers import create_provider

        if judge_type == "openai":
            api_key, model = settings.openai_api_key, settings.openai_model
        else:
            api_key, model = settings.anthropic_api_key, settings.anthropic_model

        provider = create_provider(judge_type, api_key=api_key, model=model)
        logger.debug(f"Using LLM judge with {judge_type}/{provider.model_name}")
        return LLMJudge(provider, max_tokens=settings.judge_max_tokens)

    raise ValueError(
        f"Unknown agent judge: {judge_type}. Supported: keyword, openai, anthropic"
    )


__all__ = [
    "AgentCandidate",
    "AgentJudge",
    "AgentMatch",
    "KeywordJudge",
    "LLMJudge",
    "create_judge",
]
