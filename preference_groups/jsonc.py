# =============================================================
#  preference_groups/jsonc.py
# =============================================================
"""Parsing of hand-edited preference text through :mod:`json5`.

JSON5 is a superset of JSON that accepts ``//`` and ``/* */`` comments (and
trailing commas), so the annotated documents written by
:mod:`preference_groups.codec` parse back without any pre-processing.
Plain (comment-free) output goes through the standard ``json`` module.
"""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any

import json5
from pydantic_core import to_jsonable_python

from .errors import PreferenceParseError

__all__ = ["parse", "stringify", "is_blank"]

_BOM = "\ufeff"

# json5 reports "<fname>:<line> Unexpected <thing> at column <col>"
_ERROR_POSITION = re.compile(r":(\d+) (Unexpected .+) at column (\d+)$")


def _parse_error(e: ValueError) -> PreferenceParseError:
    message = str(e)
    match = _ERROR_POSITION.search(message)
    if match is None:
        return PreferenceParseError(message, 0, 0)
    return PreferenceParseError(match.group(2), int(match.group(1)), int(match.group(3)))


def is_blank(text: str | None) -> bool:
    """True when ``text`` is missing or holds nothing but white-space."""
    if text is None:
        return True
    return not text.lstrip(_BOM).strip()


def parse(text: str | None) -> Any:
    """Decode annotated text into plain ``dict``/``list``/scalar values.

    Numbers with a fraction or exponent become :class:`decimal.Decimal` so no
    precision is lost before a preference converts them.  Blank text parses
    to ``None``.

    Raises
    ------
    PreferenceParseError
        The text is not valid JSON5.
    """
    if is_blank(text):
        return None
    if text.startswith(_BOM):
        text = text[1:]
    try:
        return json5.loads(text, parse_float=Decimal)
    except ValueError as e:
        raise _parse_error(e) from e


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return int(obj) if obj.is_finite() and obj == obj.to_integral_value() else float(obj)
    return to_jsonable_python(obj)


def stringify(tree: Any, indent: int | None = 4) -> str:
    """Render a plain value tree as JSON (no comments)."""
    return json.dumps(tree, indent=indent, ensure_ascii=False, default=_jsonable)
