"""Base types for agent matching."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class AgentCandidate:
    """An agent offered to a judge: its identifier and full description."""

    identifier: str
    description: str


@dataclass(frozen=True)
class AgentMatch:
    """
    One ranked agent.

    Attributes:
        identifier: Agent identifier
        score: Relevance in [0.0, 1.0], higher is more relevant
        reason: Optional short explanation from the judge
    """

    identifier: str
    score: float
    reason: Optional[str] = None


class AgentJudge(ABC):
    """
    Decides which agents fit a context description.

    Implementations receive every candidate with its complete description and
    return the relevant ones. Returning an empty list means no agent fits.
    """

    @property
    @abstractmethod
    def judge_name(self) -> str:
        """Return the judge identifier (e.g., 'keyword', 'llm:openai')."""
        ...

    @abstractmethod
    def rank(
        self, context: str, candidates: Sequence[AgentCandidate]
    ) -> list[AgentMatch]:
        """Rank candidates by relevance to context.

        Args:
            context: Free-text description of the current situation
            candidates: Every agent, in load order

        Returns:
            Matching agents; order is not significant, the router sorts

        Raises:
            JudgeError: If the judge cannot produce a ranking
        """
        ...
