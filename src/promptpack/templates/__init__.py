"""
Template file parsing.

This package turns Markdown command and agent files into TemplateDocument
objects: frontmatter parsing, identifier derivation and per-kind validation.
"""

from promptpack.templates.document import (
    DEFAULT_PLACEHOLDER,
    REQUIRED_FIELDS,
    TemplateDocument,
    TemplateKind,
    command_identifier,
    normalize_identifier,
)
from promptpack.templates.frontmatter import (
    DEFAULT_MARKER,
    parse_frontmatter,
    render_frontmatter,
    require_fields,
)

__all__ = [
    "DEFAULT_MARKER",
    "DEFAULT_PLACEHOLDER",
    "REQUIRED_FIELDS",
    "TemplateDocument",
    "TemplateKind",
    "command_identifier",
    "normalize_identifier",
    "parse_frontmatter",
    "render_frontmatter",
    "require_fields",
]
