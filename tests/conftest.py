"""
Pytest configuration and fixtures for promptpack tests.

Provides a small on-disk prompt plugin with two commands, two agents and a
documentation file.
"""

import json
from pathlib import Path

import pytest

API_NEW = """---
description: Scaffold a new REST API endpoint
model: claude-sonnet-4-5
---

Create a new endpoint for: $ARGUMENTS

Follow the existing controller conventions.
"""

LINT = """---
description: Run the linters and fix what they report
---

Run every configured linter and fix the findings.
"""

DB_TUNER = """---
name: db-tuner
description: Use this agent for slow PostgreSQL queries, missing indexes and query plans
model: claude-sonnet-4-5
color: blue
---

You are a PostgreSQL performance specialist.
"""

REACT_REVIEWER = """---
name: react-reviewer
description: Use this agent to review React components, hooks and frontend state
color: green
---

You review React code.
"""

README = """# Example plugin

Documentation files have no frontmatter.
"""


def write_file(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_manifest(plugin_dir: Path, entries: list[dict], **extra) -> Path:
    data = {
        "name": "example-plugin",
        "version": "1.0.0",
        "description": "Example prompt plugin for tests",
        "entries": entries,
    }
    data.update(extra)
    path = plugin_dir / "plugin.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


SAMPLE_ENTRIES = [
    {"kind": "command", "identifier": "api-new", "path": "commands/api/api-new.md"},
    {"kind": "command", "identifier": "lint", "path": "commands/misc/lint.md"},
    {"kind": "agent", "identifier": "db-tuner", "path": "agents/db-tuner.md"},
    {"kind": "agent", "identifier": "react-reviewer", "path": "agents/react-reviewer.md"},
]


@pytest.fixture
def plugin_dir(tmp_path) -> Path:
    """A valid plugin directory."""
    root = tmp_path / "example-plugin"
    write_file(root, "commands/api/api-new.md", API_NEW)
    write_file(root, "commands/misc/lint.md", LINT)
    write_file(root, "agents/db-tuner.md", DB_TUNER)
    write_file(root, "agents/react-reviewer.md", REACT_REVIEWER)
    write_file(root, "README.md", README)
    write_manifest(root, SAMPLE_ENTRIES)
    return root


@pytest.fixture
def sample_paths() -> list[str]:
    return [entry["path"] for entry in SAMPLE_ENTRIES]


@pytest.fixture
def make_file():
    """Write a file below a root directory, creating parents."""
    return write_file


@pytest.fixture
def make_manifest():
    """Write plugin.json into a plugin directory."""
    return write_manifest


@pytest.fixture
def sample_entries() -> list[dict]:
    return [dict(entry) for entry in SAMPLE_ENTRIES]
