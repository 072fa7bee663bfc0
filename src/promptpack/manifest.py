"""
Plugin manifest schema and validation.

Defines the structure of the plugin manifest file (plugin.json) that declares
a prompt plugin's commands and agents. Manifests are validated using Pydantic
for type safety.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from promptpack.exceptions import InvalidManifestError
from promptpack.templates.document import TemplateKind, normalize_identifier
from promptpack.utils.paths import normalize_relative_path

logger = logging.getLogger(__name__)


class ManifestEntry(BaseModel):
    """A declared (kind, identifier, path) triple."""

    model_config = ConfigDict(frozen=True)

    kind: TemplateKind = Field(
        ...,
        description="Template kind ('command' or 'agent')",
    )

    identifier: str = Field(
        ...,
        description="Logical name the template is invoked or matched by",
        min_length=1,
    )

    path: str = Field(
        ...,
        description="Template file path relative to the plugin root",
    )

    @field_validator("identifier")
    @classmethod
    def validate_identifier(cls, value: str, info: ValidationInfo) -> str:
        """Strip surrounding whitespace, reject blanks, normalize command names."""
        value = value.strip()
        if not value:
            raise ValueError("identifier must not be blank")
        if info.data.get("kind") is TemplateKind.COMMAND:
            return normalize_identifier(value)
        return value

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        """Normalize to a POSIX path inside the plugin root."""
        return normalize_relative_path(value)

    def __str__(self) -> str:
        return f"{self.kind.value} '{self.identifier}' -> {self.path}"


class PluginManifest(BaseModel):
    """
    Complete plugin manifest including package metadata and declared entries.

    Package metadata (name, version, description, author, homepage, license)
    is passed through and not interpreted beyond validation.
    """

    name: str = Field(
        ...,
        description="Unique plugin name (lowercase, alphanumeric, hyphens only)",
        pattern=r"^[a-z0-9-]+$",
    )

    version: str = Field(
        ...,
        description="Semantic version (e.g., '1.0.0')",
        pattern=r"^\d+\.\d+\.\d+$",
    )

    description: str = Field(
        "",
        description="Human-readable description of the plugin",
        max_length=1000,
    )

    author: Optional[str] = Field(
        None,
        description="Plugin author name or organization",
    )

    homepage: Optional[str] = Field(
        None,
        description="URL to plugin documentation or repository",
    )

    license: Optional[str] = Field(
        None,
        description="License identifier (e.g., 'MIT', 'Apache-2.0')",
    )

    entries: List[ManifestEntry] = Field(
        default_factory=list,
        description="Declared commands and agents, in load order",
    )

    plugin_dir: Optional[Path] = Field(
        None,
        description="Directory containing the plugin (set when read from disk)",
    )

    @property
    def paths(self) -> List[str]:
        """Entry paths in declaration order."""
        return [entry.path for entry in self.entries]

    def entries_of(self, kind: TemplateKind | str) -> List[ManifestEntry]:
        kind = TemplateKind(kind)
        return [entry for entry in self.entries if entry.kind is kind]

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], plugin_dir: Optional[Path] = None
    ) -> "PluginManifest":
        """
        Build a manifest from decoded JSON.

        Accepts the explicit "entries" list and the shorthand
        "commands"/"agents" objects mapping identifier to path. Shorthand
        entries follow the explicit ones, commands before agents.
        """
        data = dict(data)
        data.pop("plugin_dir", None)
        entries: list[Any] = list(data.pop("entries", None) or [])

        for key, kind in (("commands", TemplateKind.COMMAND), ("agents", TemplateKind.AGENT)):
            shorthand = data.pop(key, None)
            if shorthand is None:
                continue
            if not isinstance(shorthand, dict):
                raise InvalidManifestError(
                    f"'{key}' must map identifiers to paths, got {type(shorthand).__name__}"
                )
            for identifier, path in shorthand.items():
                entries.append({"kind": kind, "identifier": identifier, "path": path})

        try:
            return cls(**data, entries=entries, plugin_dir=plugin_dir)
        except ValidationError as e:
            raise InvalidManifestError(f"Invalid plugin manifest: {e}") from e

    @classmethod
    def from_file(
        cls, manifest_path: Path, plugin_dir: Optional[Path] = None
    ) -> "PluginManifest":
        """
        Load a plugin manifest from a plugin.json file.

        Args:
            manifest_path: Path to the manifest file
            plugin_dir: Directory containing the plugin (defaults to the
                        manifest's parent directory)

        Returns:
            PluginManifest instance

        Raises:
            InvalidManifestError: If the manifest file is invalid
            FileNotFoundError: If the manifest file doesn't exist
        """
        if not manifest_path.exists():
            raise FileNotFoundError(f"Manifest file not found: {manifest_path}")

        if plugin_dir is None:
            plugin_dir = manifest_path.parent

        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidManifestError(f"Invalid JSON in manifest {manifest_path}: {e}")

        if not isinstance(data, dict):
            raise InvalidManifestError(
                f"Manifest {manifest_path} must contain a JSON object"
            )

        try:
            manifest = cls.from_dict(data, plugin_dir=plugin_dir)
        except InvalidManifestError as e:
            raise InvalidManifestError(f"Failed to parse manifest {manifest_path}: {e}") from e

        logger.debug(
            f"Read manifest {manifest.name} v{manifest.version} "
            f"with {len(manifest.entries)} entr{'y' if len(manifest.entries) == 1 else 'ies'}"
        )
        return manifest
