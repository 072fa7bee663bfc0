"""Argument interpolation for command bodies."""

from promptpack.templates.document import DEFAULT_PLACEHOLDER


def interpolate(
    body: str,
    argument_text: str,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """
    Replace every placeholder in body with argument_text, verbatim.

    The replacement is a single pass: placeholders that appear inside
    argument_text are left as literal text. An empty argument leaves an empty
    slot. A body without the placeholder is returned unchanged.

    Example:
        >>> interpolate("Create $ARGUMENTS", "POST /users")
        'Create POST /users'
    """
    if not placeholder:
        raise ValueError("placeholder must be a non-empty string")
    return body.replace(placeholder, argument_text)


def count_placeholders(body: str, placeholder: str = DEFAULT_PLACEHOLDER) -> int:
    """Count placeholder occurrences in body."""
    if not placeholder:
        raise ValueError("placeholder must be a non-empty string")
    return body.count(placeholder)
