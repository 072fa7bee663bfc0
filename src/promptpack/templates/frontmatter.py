"""
Frontmatter parsing for Markdown template files.

A template file may start with a metadata block delimited by marker lines:

    ---
    description: Scaffold a new API endpoint
    model: claude-sonnet-4-5
    ---

    Create the endpoint described by $ARGUMENTS.

The block is read as a flat ``key: value`` mapping of strings. Files without an
opening marker are returned as body-only with empty metadata.
"""

import json
import logging
import re
from pathlib import PurePath
from typing import Iterable, Mapping, Optional, Tuple, Union

import yaml

from promptpack.exceptions import MalformedFrontmatter, MissingRequiredField

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "---"

_QUOTES = ("'", '"')

# Block scalar indicators and the string used to join their continuation lines
_BLOCK_INDICATORS = {"|": "\n", "|-": "\n", ">": " ", ">-": " "}

# YAML reads these as line breaks or rejects them as non-printable
_YAML_UNSAFE = re.compile("[\x7f-\x9f\u2028\u2029]")

PathLike = Union[str, PurePath]


def _is_marker(line: str, marker: str) -> bool:
    return line.rstrip("\r\n").rstrip() == marker


def _decode_value(value: str, lineno: int, path: Optional[PathLike]) -> str:
    """
    Decode a quoted scalar with YAML rules; anything else is kept as is.

    A value that merely starts and ends with a quote, such as
    ``"Backend" or "frontend"`` or ``"a": "b"``, is not a quoted scalar and
    stays verbatim.
    """
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        try:
            decoded = yaml.safe_load(value)
        except yaml.YAMLError as e:
            logger.debug(f"{path or '<text>'}: line {lineno} is not a quoted scalar: {e}")
            return value
        if isinstance(decoded, str):
            return decoded
    return value


def _split_lines(text: str) -> list[str]:
    """Split on LF only, keeping line ends; CR stays with its line."""
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def _split_block(
    text: str, marker: str, path: Optional[PathLike]
) -> Optional[Tuple[list[str], str]]:
    """
    Locate the frontmatter block.

    Returns:
        (block lines, body) or None when the text has no opening marker

    Raises:
        MalformedFrontmatter: If the block is never closed
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = _split_lines(text)
    if not lines or not _is_marker(lines[0], marker):
        return None

    for index in range(1, len(lines)):
        if _is_marker(lines[index], marker):
            body = "".join(lines[index + 1 :])
            # One separating blank line belongs to the frontmatter
            if body.startswith("\r\n"):
                body = body[2:]
            elif body.startswith("\n"):
                body = body[1:]
            return lines[1:index], body

    raise MalformedFrontmatter(
        f"frontmatter opened with '{marker}' but never closed", path
    )


def _parse_block(lines: list[str], path: Optional[PathLike]) -> dict[str, str]:
    metadata: dict[str, str] = {}
    last_key: Optional[str] = None
    joiner = " "

    # Line numbers are 1-based and the opening marker is line 1
    for lineno, raw in enumerate(lines, start=2):
        line = raw.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if last_key is not None and line[:1] in (" ", "\t"):
            previous = metadata[last_key]
            metadata[last_key] = f"{previous}{joiner}{stripped}" if previous else stripped
            continue

        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            raise MalformedFrontmatter(
                f"line {lineno}: expected 'key: value', got {stripped!r}", path
            )

        if key in metadata:
            logger.warning(f"{path or '<text>'}: duplicate frontmatter key '{key}'")

        value = value.strip()
        if value in _BLOCK_INDICATORS:
            joiner = _BLOCK_INDICATORS[value]
            metadata[key] = ""
        else:
            joiner = " "
            metadata[key] = _decode_value(value, lineno, path)
        last_key = key

    return metadata


def parse_frontmatter(
    text: str,
    marker: str = DEFAULT_MARKER,
    path: Optional[PathLike] = None,
) -> Tuple[dict[str, str], str]:
    """
    Split a template file into its metadata mapping and body.

    Args:
        text: Raw file contents
        marker: Delimiter line that opens and closes the block
        path: Source path, used only in error messages

    Returns:
        Tuple of (metadata, body). Text without an opening marker is returned
        unchanged with an empty mapping.

    Raises:
        MalformedFrontmatter: If the block is unterminated or has a bad line
    """
    split = _split_block(text, marker, path)
    if split is None:
        return {}, text

    block, body = split
    return _parse_block(block, path), body


def _encode_value(value: str) -> str:
    needs_quotes = (
        value != value.strip()
        or "\n" in value
        or "\r" in value
        or value in _BLOCK_INDICATORS
        or (len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0])
    )
    if needs_quotes:
        encoded = json.dumps(value, ensure_ascii=False)
        return _YAML_UNSAFE.sub(lambda m: f"\\u{ord(m.group()):04x}", encoded)
    return value


def render_frontmatter(
    metadata: Mapping[str, str],
    body: str,
    marker: str = DEFAULT_MARKER,
) -> str:
    """
    Serialize metadata and body back into template file text.

    parse_frontmatter() of the result yields an equal mapping and the same body.
    """
    lines = [marker]
    for key, value in metadata.items():
        if not key or ":" in key or key != key.strip() or "\n" in key:
            raise ValueError(f"Frontmatter key cannot be serialized: {key!r}")
        if key.startswith("#"):
            raise ValueError(f"Frontmatter key cannot start with '#': {key!r}")
        lines.append(f"{key}: {_encode_value(str(value))}".rstrip())
    lines.append(marker)
    return "\n".join(lines) + "\n\n" + body


def require_fields(
    metadata: Mapping[str, str],
    fields: Iterable[str],
    path: Optional[PathLike] = None,
) -> None:
    """
    Ensure every field is present with a non-blank value.

    Raises:
        MissingRequiredField: For the first field that is absent or blank
    """
    for field in fields:
        if not str(metadata.get(field, "")).strip():
            raise MissingRequiredField(field, path)
