from __future__ import annotations

import keyword
import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """
    Convert a variant identifier into a method name.

    `GetValue` -> `get_value`, `HTTPGet` -> `http_get`, `Set` -> `set`.
    """
    return _WORD_BOUNDARY.sub("_", name).lower()


def strip_suffix(name: str, suffix: str) -> str | None:
    """Return `name` without `suffix`, or None if it does not end with it."""
    if not suffix or not name.endswith(suffix) or name == suffix:
        return None
    return name[: -len(suffix)]


def is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def escape_keyword(name: str) -> str:
    """`return` -> `return_`; any other name is returned unchanged."""
    return f"{name}_" if keyword.iskeyword(name) else name
