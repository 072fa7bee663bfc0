"""Deterministic keyword-overlap agent judge."""

import logging
import re
from typing import Sequence

from promptpack.matching.base import AgentCandidate, AgentJudge, AgentMatch

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[a-z0-9][a-z0-9+#.-]*[a-z0-9+#]|[a-z0-9]")

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "with", "this", "that", "use", "when", "you",
        "are", "from", "into", "your", "any", "all", "has", "have", "its",
        "should", "will", "can", "not", "but", "agent", "need", "needs",
        "user", "about", "like", "such", "also", "via", "then", "than",
    }
)


def tokenize(text: str) -> set[str]:
    """Lowercase word tokens of 3+ characters, minus stop words."""
    return {
        token
        for token in _WORD.findall(text.lower())
        if len(token) >= 3 and token not in STOP_WORDS
    }


class KeywordJudge(AgentJudge):
    """
    Scores agents by how many context words their description shares.

    score = |context tokens found in description| / |context tokens|

    Works offline and always gives the same answer for the same input.
    """

    def __init__(self, min_score: float = 0.0) -> None:
        if not 0.0 <= min_score < 1.0:
            raise ValueError(f"min_score must be in [0.0, 1.0), got {min_score}")
        self.min_score = min_score

    @property
    def judge_name(self) -> str:
        return "keyword"

    def rank(
        self, context: str, candidates: Sequence[AgentCandidate]
    ) -> list[AgentMatch]:
        context_tokens = tokenize(context)
        if not context_tokens:
            logger.debug("Context has no usable keywords; no agent matches")
            return []

        matches = []
        for candidate in candidates:
            shared = context_tokens & tokenize(candidate.description)
            score = len(shared) / len(context_tokens)
            if score <= self.min_score:
                continue
            matches.append(
                AgentMatch(
                    identifier=candidate.identifier,
                    score=score,
                    reason="shared keywords: " + ", ".join(sorted(shared)),
                )
            )
        return matches
