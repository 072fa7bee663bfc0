"""Path normalization for plugin-relative template paths."""

from pathlib import PurePath, PurePosixPath


def normalize_relative_path(path: PurePath | str) -> str:
    """
    Normalize a plugin-relative path to POSIX form.

    Backslashes become '/', '.' segments are dropped.

    Args:
        path: Relative path as written in a manifest or passed to load()

    Returns:
        Normalized POSIX path string (e.g. 'commands/api/api-new.md')

    Raises:
        ValueError: If the path is empty, absolute, or escapes the plugin root
    """
    raw = str(path).replace("\\", "/").strip()
    if not raw:
        raise ValueError("Path is empty")

    posix = PurePosixPath(raw)
    if posix.is_absolute() or (len(raw) > 1 and raw[1] == ":"):
        raise ValueError(f"Path must be relative to the plugin root: {raw}")

    parts = [part for part in posix.parts if part not in ("", ".")]
    if ".." in parts:
        raise ValueError(f"Path escapes the plugin root: {raw}")
    if not parts:
        raise ValueError(f"Path does not name a file: {raw}")

    return "/".join(parts)
