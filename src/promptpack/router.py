"""
Invocation router.

Resolves command invocations to interpolated template text and ranks agents
against a context description. The router only reads from its store, so one
router can serve any number of concurrent callers.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from promptpack.exceptions import NotFound, UnknownCommand
from promptpack.interpolate import interpolate
from promptpack.matching.base import AgentCandidate, AgentJudge, AgentMatch
from promptpack.matching.keyword import KeywordJudge
from promptpack.store import TemplateStore
from promptpack.templates.document import TemplateKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCommand:
    """Interpolated command text paired with the command's metadata."""

    identifier: str
    text: str
    metadata: Mapping[str, str]

    @property
    def model(self) -> Optional[str]:
        return self.metadata.get("model") or None


class Router:
    """
    Routes invocations to templates held by a READY TemplateStore.

    Example:
        >>> router = Router(store)
        >>> router.resolve_command("api-new", "POST /users").text
        'Create the endpoint POST /users ...'
        >>> [m.identifier for m in router.match_agent("slow postgres query")]
        ['db-tuner']
    """

    def __init__(
        self,
        store: TemplateStore,
        judge: Optional[AgentJudge] = None,
        placeholder: Optional[str] = None,
    ) -> None:
        """
        Args:
            store: Template store (must be READY before calls are made)
            judge: Agent judge (defaults to KeywordJudge)
            placeholder: Placeholder token (defaults to the store's token)
        """
        self.store = store
        self.judge = judge if judge is not None else KeywordJudge()
        self.placeholder = placeholder or store.placeholder

    def resolve_command(
        self, identifier: str, argument_text: str = ""
    ) -> ResolvedCommand:
        """
        Look up a command and interpolate its argument.

        Raises:
            NotReady: If the store is not loaded
            UnknownCommand: If no command has the identifier
        """
        try:
            document = self.store.get(TemplateKind.COMMAND, identifier)
        except NotFound:
            raise UnknownCommand(identifier) from None

        text = interpolate(document.body, argument_text, self.placeholder)
        logger.debug(
            f"Resolved command '{identifier}' "
            f"({document.placeholder_count} placeholder(s) filled)"
        )
        return ResolvedCommand(
            identifier=document.identifier,
            text=text,
            metadata=document.metadata,
        )

    def agent_candidates(self) -> tuple[AgentCandidate, ...]:
        """Every agent with its complete description, in load order."""
        return tuple(
            AgentCandidate(identifier=doc.identifier, description=doc.description)
            for doc in self.store.list(TemplateKind.AGENT)
        )

    def match_agent(self, context_description: str) -> tuple[AgentMatch, ...]:
        """
        Rank agents by how well their descriptions fit the context.

        Returns:
            Matches sorted by descending score; equal scores keep load order.
            Empty when no agent fits.

        Raises:
            NotReady: If the store is not loaded
            JudgeError: If the judge cannot produce a ranking
        """
        candidates = self.agent_candidates()
        if not candidates:
            return ()

        order = {candidate.identifier: i for i, candidate in enumerate(candidates)}

        seen: set[str] = set()
        matches: list[AgentMatch] = []
        for match in self.judge.rank(context_description, candidates):
            if match.identifier not in order:
                logger.warning(
                    f"{self.judge.judge_name} judge returned unknown agent "
                    f"'{match.identifier}'; ignoring it"
                )
                continue
            if match.identifier in seen:
                continue
            seen.add(match.identifier)
            matches.append(match)

        matches.sort(key=lambda m: (-m.score, order[m.identifier]))
        logger.debug(
            f"Agent match via {self.judge.judge_name}: "
            f"{[m.identifier for m in matches]}"
        )
        return tuple(matches)
