"""Positional message formatting for translated templates."""

from __future__ import annotations

from collections.abc import Sequence
import re

# A doubled quote is a literal quote; {n} is the n-th parameter.
_TOKEN = re.compile(r"''|\{(\d+)\}")
_QUOTE = re.compile(r"''|'")


def escape_quotes(template: str) -> str:
    """Double every lone single quote so it survives substitution as a literal.

    Quotes that are already doubled are kept as one escaped pair.
    """
    return _QUOTE.sub("''", template)


def format_message(template: str, parameters: Sequence[str] | None) -> str:
    """Substitute ``{0}``, ``{1}`` ... in ``template`` with ``parameters``.

    Templates are returned untouched when there is nothing to substitute.
    Placeholders with no matching parameter are kept as written.
    """
    if not parameters:
        return template

    values = [str(param) for param in parameters]

    def _substitute(match: re.Match[str]) -> str:
        index = match.group(1)
        if index is None:
            return "'"
        position = int(index)
        if position < len(values):
            return values[position]
        return match.group(0)

    return _TOKEN.sub(_substitute, escape_quotes(template))
