"""
Template document model.

A TemplateDocument is one parsed command or agent file. Documents are created
while a store loads and are read-only afterwards.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Mapping, Optional

from promptpack.exceptions import MissingRequiredField
from promptpack.templates.frontmatter import require_fields

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "$ARGUMENTS"

_SEPARATORS = re.compile(r"[\s_]+")


class TemplateKind(str, Enum):
    """Kind of template, decided by the directory a file lives in."""

    COMMAND = "command"
    """User-invoked template with a single argument slot."""

    AGENT = "agent"
    """Context-triggered persona template."""


# Metadata fields each kind must carry
REQUIRED_FIELDS: dict[TemplateKind, tuple[str, ...]] = {
    TemplateKind.COMMAND: ("description",),
    TemplateKind.AGENT: ("description", "name"),
}


def normalize_identifier(raw: str) -> str:
    """
    Normalize a command name: trimmed, lowercase, '_' and spaces become '-'.

    Example:
        >>> normalize_identifier("API_New")
        'api-new'
    """
    return _SEPARATORS.sub("-", raw.strip().lower())


def command_identifier(relative_path: str) -> tuple[str, Optional[str]]:
    """
    Derive (identifier, namespace) for a command file.

    The identifier is the normalized file stem. Directories between the
    commands root and the file form the namespace.

    Example:
        >>> command_identifier("commands/api/api-new.md")
        ('api-new', 'api')
    """
    path = PurePosixPath(relative_path)
    namespace_parts = path.parts[1:-1]
    namespace = "/".join(namespace_parts) if namespace_parts else None
    return normalize_identifier(path.stem), namespace


@dataclass(frozen=True)
class TemplateDocument:
    """
    One parsed template file.

    Attributes:
        kind: Command or agent
        identifier: Unique name within the kind
        metadata: Read-only frontmatter mapping (description required)
        body: Raw template text after the frontmatter
        source_path: POSIX path relative to the plugin root
        namespace: Sub-directory of a command file, if any
    """

    kind: TemplateKind
    identifier: str
    metadata: Mapping[str, str] = field(hash=False)
    body: str
    source_path: str
    namespace: Optional[str] = None
    placeholder: str = field(default=DEFAULT_PLACEHOLDER, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        require_fields(self.metadata, ("description",), self.source_path)

    @classmethod
    def from_parsed(
        cls,
        kind: TemplateKind,
        metadata: Mapping[str, str],
        body: str,
        source_path: str,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ) -> "TemplateDocument":
        """
        Build a document from parsed frontmatter, enforcing per-kind fields.

        Raises:
            MissingRequiredField: If a field required for the kind is missing
        """
        require_fields(metadata, REQUIRED_FIELDS[kind], source_path)

        namespace = None
        if kind is TemplateKind.COMMAND:
            identifier, namespace = command_identifier(source_path)
            if not identifier:
                raise MissingRequiredField("name", source_path)
            if "color" in metadata:
                logger.warning(
                    f"{source_path}: 'color' only applies to agents; ignoring it"
                )
        else:
            identifier = metadata["name"].strip()

        return cls(
            kind=kind,
            identifier=identifier,
            metadata=metadata,
            body=body,
            source_path=source_path,
            namespace=namespace,
            placeholder=placeholder,
        )

    @property
    def description(self) -> str:
        return self.metadata["description"]

    @property
    def model(self) -> Optional[str]:
        return self.metadata.get("model") or None

    @property
    def color(self) -> Optional[str]:
        if self.kind is not TemplateKind.AGENT:
            return None
        return self.metadata.get("color") or None

    @property
    def placeholder_count(self) -> int:
        """Number of placeholder occurrences in the body."""
        return self.body.count(self.placeholder)

    @property
    def takes_arguments(self) -> bool:
        return self.placeholder_count > 0
