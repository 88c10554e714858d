"""Substitution of ``{name}`` placeholders in request paths."""

from __future__ import annotations

import re
from collections.abc import Mapping

# Accepts both {param} and { param }.
_PLACEHOLDER_RE = re.compile(r"\{\s*.*?\s*\}")


def replace_placeholder(s: str, params: Mapping[str, str]) -> str:
    """Replace every placeholder in ``s`` whose name is in ``params``.

    Placeholders without a matching parameter are left untouched.
    """

    def _substitute(match: re.Match[str]) -> str:
        placeholder = match.group(0)
        key = placeholder.strip("{ }")
        return params.get(key, placeholder)

    return _PLACEHOLDER_RE.sub(_substitute, s)