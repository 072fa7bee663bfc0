"""
Template store for command and agent documents.

The store has two states. A new store is UNLOADED; load() parses every file,
and only if all of them are valid installs the finished index and moves to
READY. A READY store never changes. Reloading means building a new store.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import Iterable, Iterator, Optional, Protocol, Union

from promptpack.exceptions import (
    AlreadyLoaded,
    DuplicateIdentifier,
    LoadError,
    NotFound,
    NotReady,
    TemplateError,
    UnreadableSource,
)
from promptpack.templates.document import (
    DEFAULT_PLACEHOLDER,
    TemplateDocument,
    TemplateKind,
    normalize_identifier,
)
from promptpack.templates.frontmatter import DEFAULT_MARKER, parse_frontmatter
from promptpack.utils.paths import normalize_relative_path

logger = logging.getLogger(__name__)

PathLike = Union[str, PurePath]


class StoreState(str, Enum):
    """Lifecycle state of a TemplateStore."""

    UNLOADED = "unloaded"
    READY = "ready"


@dataclass(frozen=True)
class LoadFailure:
    """A single file that could not be loaded, and why."""

    path: str
    error: TemplateError

    def __str__(self) -> str:
        return f"{self.path}: [{type(self.error).__name__}] {self.error.message}"


class FileSource(Protocol):
    """Supplies the text of plugin-relative paths."""

    def read_text(self, path: str) -> str:
        """
        Read one file.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid text
        """
        ...


class FilesystemSource:
    """FileSource reading from a plugin directory on disk."""

    def __init__(self, root: Path, encoding: str = "utf-8") -> None:
        self.root = Path(root)
        self.encoding = encoding

    def read_text(self, path: str) -> str:
        return (self.root / path).read_text(encoding=self.encoding)


class TemplateStore:
    """
    Index of TemplateDocuments keyed by (kind, identifier).

    Example:
        >>> store = TemplateStore().load(["commands/misc/lint.md"], root="my-plugin")
        >>> store.get(TemplateKind.COMMAND, "lint").description
        'Run the linters'
    """

    def __init__(
        self,
        commands_dir: str = "commands",
        agents_dir: str = "agents",
        marker: str = DEFAULT_MARKER,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ) -> None:
        self.commands_dir = commands_dir
        self.agents_dir = agents_dir
        self.marker = marker
        self.placeholder = placeholder

        self._index: Optional[dict[TemplateKind, dict[str, TemplateDocument]]] = None

        # Files left out because they could not be read
        self.skipped: tuple[LoadFailure, ...] = ()

    @property
    def state(self) -> StoreState:
        return StoreState.UNLOADED if self._index is None else StoreState.READY

    @property
    def is_ready(self) -> bool:
        return self._index is not None

    def classify(self, relative_path: str) -> Optional[TemplateKind]:
        """
        Decide the kind of a file from its top-level directory.

        Returns:
            TemplateKind, or None for files outside the template directories
        """
        top = relative_path.split("/", 1)[0]
        if top == self.commands_dir:
            return TemplateKind.COMMAND
        if top == self.agents_dir:
            return TemplateKind.AGENT
        return None

    def load(
        self,
        paths: Iterable[PathLike],
        root: Optional[PathLike] = None,
        source: Optional[FileSource] = None,
    ) -> "TemplateStore":
        """
        Parse every path and move the store to READY.

        Paths are processed in the order given, which is also the order
        list() reports. A path given more than once is read once. Files that
        cannot be read are recorded in `skipped` and left out. Every other
        per-file problem is collected.

        Args:
            paths: Template paths relative to the plugin root
            root: Plugin root directory (used when no source is given)
            source: Custom FileSource

        Returns:
            This store, now READY

        Raises:
            AlreadyLoaded: If the store is already READY
            LoadError: With every per-file failure, in path order. The store
                stays UNLOADED.
        """
        if self._index is not None:
            raise AlreadyLoaded()

        if source is None:
            if root is None:
                raise ValueError("load() needs a root directory or a file source")
            source = FilesystemSource(Path(root))

        index: dict[TemplateKind, dict[str, TemplateDocument]] = {
            kind: {} for kind in TemplateKind
        }
        failures: list[LoadFailure] = []
        skipped: list[LoadFailure] = []
        seen_paths: set[str] = set()

        for raw_path in paths:
            try:
                relative_path = normalize_relative_path(raw_path)
            except ValueError as e:
                skipped.append(
                    LoadFailure(str(raw_path), UnreadableSource(str(e), raw_path))
                )
                logger.warning(f"Skipping invalid template path {raw_path}: {e}")
                continue

            # A file named twice is still one document
            if relative_path in seen_paths:
                logger.debug(f"Template already loaded, skipping: {relative_path}")
                continue
            seen_paths.add(relative_path)

            kind = self.classify(relative_path)
            if kind is None:
                logger.debug(f"Not a template directory, skipping: {relative_path}")
                continue

            try:
                text = source.read_text(relative_path)
            except (OSError, UnicodeDecodeError) as e:
                error = UnreadableSource(f"cannot read file: {e}", relative_path)
                skipped.append(LoadFailure(relative_path, error))
                logger.warning(f"Skipping unreadable template {relative_path}: {e}")
                continue

            try:
                document = self._build_document(kind, relative_path, text)
                existing = index[kind].get(document.identifier)
                if existing is not None:
                    raise DuplicateIdentifier(
                        kind.value,
                        document.identifier,
                        relative_path,
                        existing.source_path,
                    )
                index[kind][document.identifier] = document
                logger.debug(
                    f"Loaded {kind.value} '{document.identifier}' from {relative_path}"
                )
            except TemplateError as e:
                failures.append(LoadFailure(relative_path, e))

        if failures:
            logger.error(f"Template load failed with {len(failures)} error(s)")
            raise LoadError(failures)

        self.skipped = tuple(skipped)
        # Publish the finished index in one assignment
        self._index = index

        logger.info(
            f"Loaded {len(index[TemplateKind.COMMAND])} command(s) and "
            f"{len(index[TemplateKind.AGENT])} agent(s)"
        )
        return self

    def _build_document(
        self, kind: TemplateKind, relative_path: str, text: str
    ) -> TemplateDocument:
        metadata, body = parse_frontmatter(text, self.marker, relative_path)
        return TemplateDocument.from_parsed(
            kind,
            metadata,
            body,
            relative_path,
            placeholder=self.placeholder,
        )

    def _require_index(
        self, operation: str
    ) -> dict[TemplateKind, dict[str, TemplateDocument]]:
        if self._index is None:
            raise NotReady(operation)
        return self._index

    def get(self, kind: TemplateKind | str, identifier: str) -> TemplateDocument:
        """
        Look up one document.

        Command identifiers are normalized the way file stems are, so
        "API_New" finds "api-new". Agent names must match exactly.

        Raises:
            NotReady: If the store is UNLOADED
            NotFound: If no document of that kind has the identifier
        """
        index = self._require_index("get")
        kind = TemplateKind(kind)
        try:
            return index[kind][self._lookup_key(kind, identifier)]
        except KeyError:
            raise NotFound(kind.value, identifier) from None

    @staticmethod
    def _lookup_key(kind: TemplateKind, identifier: str) -> str:
        if kind is TemplateKind.COMMAND:
            return normalize_identifier(identifier)
        return identifier

    def list(self, kind: TemplateKind | str) -> Iterator[TemplateDocument]:
        """
        Iterate documents of one kind in load order.

        Each call returns a fresh iterator over the same fixed sequence.

        Raises:
            NotReady: If the store is UNLOADED
        """
        index = self._require_index("list")
        return iter(tuple(index[TemplateKind(kind)].values()))

    def identifiers(self, kind: TemplateKind | str) -> tuple[str, ...]:
        """Identifiers of one kind in load order."""
        return tuple(self._require_index("identifiers")[TemplateKind(kind)])

    def documents(self) -> Iterator[TemplateDocument]:
        """Iterate every document, commands first."""
        index = self._require_index("documents")
        return iter(
            tuple(doc for kind in TemplateKind for doc in index[kind].values())
        )

    def __contains__(self, key: object) -> bool:
        if self._index is None or not isinstance(key, tuple) or len(key) != 2:
            return False
        kind, identifier = key
        try:
            kind = TemplateKind(kind)
        except ValueError:
            return False
        return self._lookup_key(kind, str(identifier)) in self._index[kind]

    def __len__(self) -> int:
        index = self._require_index("len")
        return sum(len(documents) for documents in index.values())

    def __repr__(self) -> str:
        if self._index is None:
            return "<TemplateStore unloaded>"
        return (
            f"<TemplateStore ready commands={len(self._index[TemplateKind.COMMAND])} "
            f"agents={len(self._index[TemplateKind.AGENT])}>"
        )


def load_store(
    paths: Iterable[PathLike],
    root: Optional[PathLike] = None,
    source: Optional[FileSource] = None,
    **options: str,
) -> TemplateStore:
    """
    Build and load a new TemplateStore in one call.

    Args:
        paths: Template paths relative to the plugin root
        root: Plugin root directory
        source: Custom FileSource
        **options: TemplateStore constructor options (commands_dir, agents_dir,
                   marker, placeholder)

    Raises:
        LoadError: If any file fails to parse
    """
    return TemplateStore(**options).load(paths, root=root, source=source)
