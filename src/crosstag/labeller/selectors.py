"""
Regex selectors for namespaces and pods.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from crosstag.core.errors import InvalidPattern


def compile_pattern(pattern: str | None) -> re.Pattern[str] | None:
    """
    Compile a selector pattern.

    An empty or missing pattern selects everything and compiles to None.

    Raises:
        InvalidPattern: if the pattern is not a valid regular expression
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPattern(f"Invalid selector pattern: {e}", {"pattern": pattern}) from e


def filter_names(names: Iterable[str], pattern: re.Pattern[str] | None) -> list[str]:
    """Names matching the pattern anywhere (unanchored search)."""
    if pattern is None:
        return list(names)
    return [name for name in names if pattern.search(name)]
