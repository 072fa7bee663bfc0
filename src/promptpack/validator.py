"""
Manifest validation against a loaded template store.

Every manifest entry is checked, and every problem is reported in one pass so a
hand-edited manifest can be fixed without an edit-reload cycle per error.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from promptpack.exceptions import NotFound, NotReady
from promptpack.manifest import ManifestEntry
from promptpack.store import TemplateStore

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why a manifest entry did not validate."""

    PATH_MISMATCH = "path_mismatch"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ManifestFailure:
    """One manifest entry that failed validation."""

    entry: ManifestEntry
    reason: FailureReason
    detail: str = ""

    def __str__(self) -> str:
        text = f"{self.entry}: {self.reason.value}"
        if self.detail:
            text += f" ({self.detail})"
        return text


@dataclass(frozen=True)
class ValidationReport:
    """
    Result of validating a manifest.

    Attributes:
        failures: Failures in manifest order; empty when everything resolved
        checked: Number of entries checked
    """

    failures: tuple[ManifestFailure, ...] = field(default_factory=tuple)
    checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def __bool__(self) -> bool:
        return self.ok


def validate_manifest(
    entries: Iterable[ManifestEntry], store: TemplateStore
) -> ValidationReport:
    """
    Check that each entry resolves to exactly the document it declares.

    Args:
        entries: Declared manifest entries
        store: A READY template store

    Returns:
        ValidationReport listing every NOT_FOUND and PATH_MISMATCH failure

    Raises:
        NotReady: If the store is UNLOADED
    """
    if not store.is_ready:
        raise NotReady("validate_manifest")

    failures: List[ManifestFailure] = []
    checked = 0

    for entry in entries:
        checked += 1
        try:
            document = store.get(entry.kind, entry.identifier)
        except NotFound:
            failures.append(
                ManifestFailure(
                    entry,
                    FailureReason.NOT_FOUND,
                    f"no {entry.kind.value} named '{entry.identifier}' was loaded",
                )
            )
            continue

        if document.source_path != entry.path:
            failures.append(
                ManifestFailure(
                    entry,
                    FailureReason.PATH_MISMATCH,
                    f"loaded from {document.source_path}",
                )
            )

    for failure in failures:
        logger.warning(f"Manifest entry failed validation: {failure}")

    return ValidationReport(failures=tuple(failures), checked=checked)

