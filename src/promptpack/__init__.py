"""
promptpack - load, validate and route prompt plugins.

A prompt plugin is a directory with a plugin.json manifest and Markdown
command and agent templates. promptpack parses the templates, checks the
manifest against them, interpolates command arguments and ranks agents for a
given context.
"""

from promptpack.exceptions import (
    AlreadyLoaded,
    DuplicateIdentifier,
    InvalidManifestError,
    JudgeError,
    LoadError,
    MalformedFrontmatter,
    MissingRequiredField,
    NotFound,
    NotReady,
    PromptPackError,
    UnknownCommand,
    UnreadableSource,
)
from promptpack.interpolate import interpolate
from promptpack.loader import (
    LoadedPlugin,
    PluginHandle,
    PluginLoader,
    PluginLoadError,
    load_plugin_dir,
)
from promptpack.manifest import ManifestEntry, PluginManifest
from promptpack.router import ResolvedCommand, Router
from promptpack.store import StoreState, TemplateStore, load_store
from promptpack.templates import TemplateDocument, TemplateKind, parse_frontmatter
from promptpack.validator import FailureReason, ValidationReport, validate_manifest

__version__ = "0.1.0"

__all__ = [
    "AlreadyLoaded",
    "DuplicateIdentifier",
    "FailureReason",
    "InvalidManifestError",
    "JudgeError",
    "LoadError",
    "LoadedPlugin",
    "MalformedFrontmatter",
    "ManifestEntry",
    "MissingRequiredField",
    "NotFound",
    "NotReady",
    "PluginHandle",
    "PluginLoadError",
    "PluginLoader",
    "PluginManifest",
    "PromptPackError",
    "ResolvedCommand",
    "Router",
    "StoreState",
    "TemplateDocument",
    "TemplateKind",
    "TemplateStore",
    "UnknownCommand",
    "UnreadableSource",
    "ValidationReport",
    "interpolate",
    "load_plugin_dir",
    "load_store",
    "parse_frontmatter",
    "validate_manifest",
]
