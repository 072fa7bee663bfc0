"""Custom exceptions for promptpack."""

from pathlib import PurePath
from typing import Any, Optional, Sequence, Union

PathLike = Union[str, PurePath]


class PromptPackError(Exception):
    """Base exception for all promptpack errors."""

    pass


class TemplateError(PromptPackError):
    """Base exception for errors tied to a single template file."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        self.path = str(path) if path is not None else None
        self.message = message
        if self.path:
            message = f"{self.path}: {message}"
        super().__init__(message)


class MalformedFrontmatter(TemplateError):
    """Raised when a frontmatter block is opened but never closed, or unparsable."""

    pass


class MissingRequiredField(TemplateError):
    """Raised when a required metadata field is absent or empty."""

    def __init__(self, field: str, path: Optional[PathLike] = None):
        self.field = field
        super().__init__(f"missing required field '{field}'", path)


class DuplicateIdentifier(TemplateError):
    """Raised when two documents of the same kind share an identifier."""

    def __init__(
        self,
        kind: str,
        identifier: str,
        path: Optional[PathLike] = None,
        existing_path: Optional[PathLike] = None,
    ):
        self.kind = kind
        self.identifier = identifier
        self.existing_path = str(existing_path) if existing_path else None
        message = f"duplicate {kind} identifier '{identifier}'"
        if self.existing_path:
            message += f" (already defined by {self.existing_path})"
        super().__init__(message, path)


class UnreadableSource(TemplateError):
    """Raised when a template file cannot be read."""

    pass


class NotFound(PromptPackError):
    """Raised when a document lookup misses."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class UnknownCommand(NotFound):
    """Raised when a command invocation names no loaded command."""

    def __init__(self, identifier: str):
        super().__init__("command", identifier)


class StoreStateError(PromptPackError):
    """Base exception for operations attempted in the wrong store state."""

    pass


class NotReady(StoreStateError):
    """Raised when a store is used before load() has completed."""

    def __init__(self, operation: str = "operation"):
        self.operation = operation
        super().__init__(f"Template store is not loaded; cannot perform {operation}")


class AlreadyLoaded(StoreStateError):
    """Raised when load() is called on a store that is already Ready."""

    def __init__(self) -> None:
        super().__init__(
            "Template store is already loaded. Build a new store to reload."
        )


class LoadError(PromptPackError):
    """
    Raised when load() collected one or more per-file failures.

    Attributes:
        failures: Ordered LoadFailure records, one per failing file
    """

    def __init__(self, failures: Sequence[Any]):
        self.failures = tuple(failures)
        lines = [f"  - {failure}" for failure in self.failures]
        super().__init__(
            f"Failed to load {len(self.failures)} template file(s):\n"
            + "\n".join(lines)
        )


class InvalidManifestError(PromptPackError, ValueError):
    """Raised when a plugin manifest file is missing fields or malformed."""

    pass


class JudgeError(PromptPackError):
    """Raised when an agent judge returns an unusable ranking."""

    pass
