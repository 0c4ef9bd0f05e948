# =============================================================
#  preference_groups/reconcile.py
# =============================================================
"""Apply the values of previously written text onto a live preference tree.

The live tree drives the walk: keys are visited in the tree's own order,
keys absent from the text are left alone and keys the tree does not know are
ignored.  A value that cannot be converted or fails validation keeps the
preference's previous value and is reported through :mod:`logging` only, so
one bad entry never blocks the rest of the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from . import jsonc
from .codec import DEFAULT_INDENT_CHAR, DEFAULT_INDENT_DEPTH, write_to_string
from .errors import SetValueError
from .group import PreferenceGroup
from .preference import Preference
from .store import PreferenceStore, StoreItemKind

__all__ = [
    "ReconcileResult",
    "update_preference",
    "update_group",
    "update_groups",
    "update_store",
    "update_stores",
    "update_tree",
    "reconcile",
    "update_from_string",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of :func:`reconcile`.

    ``changed`` lists the dotted paths of preferences whose value changed,
    ``text`` is the freshly rendered document and ``text_changed`` tells
    whether it differs from the input text.
    """

    changed: Tuple[str, ...]
    text: str
    text_changed: bool


def _join(prefix: Optional[str], name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _shape(node: Any) -> str:
    if isinstance(node, dict):
        return "an object"
    if isinstance(node, list):
        return "an array"
    return "a value"


def _same(before: Any, after: Any) -> bool:
    if before is after:
        return True
    if before is None or after is None:
        return False
    # NaN never equals itself
    return before == after or (before != before and after != after)


# --------------------------------------------------------------------------- #
#                              walkers                                         #
# --------------------------------------------------------------------------- #


def update_preference(preference: Preference, node: Any, path: Optional[str] = None) -> List[str]:
    """Set ``preference`` from a parsed value; return ``[path]`` if it changed."""
    path = path or preference.name
    if isinstance(node, (dict, list)):
        log.warning("Keeping previous value of '%s': expected a value, found %s", path, _shape(node))
        return []
    before = preference.value
    try:
        preference.set_value(node)
    except SetValueError as e:
        log.warning("Keeping previous value of '%s': %s (%s)", path, e, e.step.value)
        return []
    if _same(before, preference.value):
        return []
    log.debug("Preference '%s' changed from %r to %r", path, before, preference.value)
    return [path]


def update_group(group: PreferenceGroup, node: Any, prefix: Optional[str] = None) -> List[str]:
    if not isinstance(node, dict):
        log.warning("Ignoring '%s': expected an object, found %s", prefix or "<root>", _shape(node))
        return []
    changed: List[str] = []
    for preference in group:
        if preference.name in node:
            changed += update_preference(preference, node[preference.name], _join(prefix, preference.name))
    return changed


def _update_array(containers: Sequence[Any], node: Any, prefix: Optional[str], update_one) -> List[str]:
    if not isinstance(node, list):
        log.warning("Ignoring '%s': expected an array, found %s", prefix or "<root>", _shape(node))
        return []
    changed: List[str] = []
    for idx, (container, element) in enumerate(zip(containers, node)):
        changed += update_one(container, element, _join(prefix, str(idx)))
    return changed


def update_groups(groups: Sequence[PreferenceGroup], node: Any, prefix: Optional[str] = None) -> List[str]:
    return _update_array(groups, node, prefix, update_group)


def update_store(store: PreferenceStore, node: Any, prefix: Optional[str] = None) -> List[str]:
    if not isinstance(node, dict):
        log.warning("Ignoring '%s': expected an object, found %s", prefix or "<root>", _shape(node))
        return []
    changed: List[str] = []
    for name, item in store.items():
        if name not in node:
            continue
        child, path = node[name], _join(prefix, name)
        if item.kind is StoreItemKind.PREFERENCE:
            changed += update_preference(item.payload, child, path)
        elif item.kind is StoreItemKind.GROUP:
            changed += update_group(item.payload, child, path)
        elif item.kind is StoreItemKind.GROUP_ARRAY:
            changed += update_groups(item.payload, child, path)
        elif item.kind is StoreItemKind.STORE:
            changed += update_store(item.payload, child, path)
        else:
            changed += update_stores(item.payload, child, path)
    return changed


def update_stores(stores: Sequence[PreferenceStore], node: Any, prefix: Optional[str] = None) -> List[str]:
    return _update_array(stores, node, prefix, update_store)


def update_tree(tree: Any, node: Any) -> List[str]:
    """Dispatch on the shape of ``tree``; see :func:`update_store` and friends."""
    if isinstance(tree, Preference):
        return update_preference(tree, node)
    if isinstance(tree, PreferenceGroup):
        return update_group(tree, node)
    if isinstance(tree, PreferenceStore):
        return update_store(tree, node)
    if isinstance(tree, (list, tuple)):
        if all(isinstance(t, PreferenceGroup) for t in tree):
            return update_groups(tree, node)
        if all(isinstance(t, PreferenceStore) for t in tree):
            return update_stores(tree, node)
        raise TypeError("arrays must hold only groups or only stores")
    raise TypeError(f"cannot reconcile a {type(tree).__name__}")


# --------------------------------------------------------------------------- #
#                              entry points                                    #
# --------------------------------------------------------------------------- #


def reconcile(
    tree: Any,
    text: Optional[str],
    *,
    indent_char: str = DEFAULT_INDENT_CHAR,
    indent_depth: int = DEFAULT_INDENT_DEPTH,
) -> ReconcileResult:
    """Apply ``text`` onto ``tree`` and render the merged result.

    Blank or missing text applies nothing.

    Raises
    ------
    PreferenceParseError
        ``text`` is malformed.
    """
    if jsonc.is_blank(text):
        changed: List[str] = []
    else:
        changed = update_tree(tree, jsonc.parse(text))
    rendered = write_to_string(tree, indent_char, indent_depth)
    return ReconcileResult(tuple(changed), rendered, rendered != (text or ""))


def update_from_string(
    tree: Any,
    text: Optional[str],
    *,
    indent_char: str = DEFAULT_INDENT_CHAR,
    indent_depth: int = DEFAULT_INDENT_DEPTH,
) -> Optional[List[str]]:
    """Reconcile ``text`` into ``tree``.

    Returns the dotted paths of the preferences whose value changed, or
    ``None`` when no value changed.  The report follows the values, not the
    text: a hand edit that the re-rendered document reproduces byte for byte
    is still reported as a change.  Use :func:`reconcile` to also learn
    whether the rendered text differs from ``text``.
    """
    result = reconcile(tree, text, indent_char=indent_char, indent_depth=indent_depth)
    return list(result.changed) or None
