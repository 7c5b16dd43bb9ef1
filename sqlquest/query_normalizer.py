"""
SQL text normalization for the fast-path equality check
"""
import re

import sqlparse
from sqlparse.exceptions import SQLParseError

_MULTIPLE_SPACES = re.compile(r" {2,}")


def normalize(query: str) -> str:
    """
    Canonicalize SQL text so lexically equivalent queries compare equal.

    Semicolons and comments are removed, lines are joined with single
    spaces, tabs become spaces, and the result is lowercased, collapsed
    and trimmed. Never raises; blank input gives an empty string.
    """
    if not query or not query.strip():
        return ""

    text = query.replace(";", "")
    try:
        text = sqlparse.format(text, strip_comments=True)
    except SQLParseError:
        # Leave comment-only lines to the line filter below
        pass

    lines = [
        line for line in text.splitlines()
        if line.strip() and not line.lstrip().startswith("--")
    ]

    normalized = " ".join(lines).replace("\t", " ").lower()
    normalized = _MULTIPLE_SPACES.sub(" ", normalized)
    return normalized.strip()


def queries_match(user_query: str, solution_query: str) -> bool:
    """True when both queries are non-blank and normalize to the same text"""
    if not user_query or not user_query.strip():
        return False
    if not solution_query or not solution_query.strip():
        return False
    return normalize(user_query) == normalize(solution_query)
