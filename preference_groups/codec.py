# =============================================================
#  preference_groups/codec.py
#  Annotated (JSON with comments) rendering of preference trees
# =============================================================
"""Render a preference tree as JSON text annotated with ``//`` comments.

Each preference value is preceded by comment lines generated from its
metadata: the description, the allowed (or suggested) values and the default
value.  Rendering is deterministic; rendering the same tree twice gives
byte-identical text.

```python
from preference_groups import PreferenceBuilder, PreferenceGroupBuilder
from preference_groups.codec import write_to_string

group = (
    PreferenceGroupBuilder.create()
    .add_int32("Number", lambda b: b.with_default_value(13))
    .add_string("String", lambda b: b.with_description("A string preference."))
    .build()
)
print(write_to_string(group))
# {
#     // Default value: 13.
#     "Number": null,
#
#     // A string preference.
#     "String": null
# }
```
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Sequence

from . import kinds
from .group import PreferenceGroup
from .preference import Preference
from .store import PreferenceStore, StoreItemKind

__all__ = [
    "JsoncWriter",
    "write_to_string",
    "LINE_COMMENT_PREFIX",
    "LIST_SEPARATOR",
    "DEFAULT_INDENT_CHAR",
    "DEFAULT_INDENT_DEPTH",
]

log = logging.getLogger(__name__)

LINE_COMMENT_PREFIX = "// "
LIST_SEPARATOR = " | "
ITEM_SEPARATOR = ","
DEFAULT_INDENT_CHAR = " "
DEFAULT_INDENT_DEPTH = 4

_ALLOWED_PREFIX = "Allowed values: "
_SUGGESTED_PREFIX = "Suggested values: "
_FLAGS_SUFFIX = f"values are combinations of (separated by {json.dumps(kinds.FLAGS_SEPARATOR)}): "


class _Container(str, Enum):
    OBJECT = "object"
    ARRAY = "array"


class JsoncWriter:
    """
    Accumulates annotated text for one document.

    The writer keeps a stack of the open containers together with the number
    of items already written to each; the counts decide where item
    separators and blank lines go.

    Parameters
    ----------
    indent_char : str, default " "
        The single character repeated for each indentation unit.
    indent_depth : int, default 4
        How many ``indent_char`` make one nesting level.
    """

    def __init__(self, indent_char: str = DEFAULT_INDENT_CHAR, indent_depth: int = DEFAULT_INDENT_DEPTH):
        if not isinstance(indent_char, str) or len(indent_char) != 1:
            raise ValueError(f"indent_char must be a single character, got {indent_char!r}")
        if indent_depth < 0:
            raise ValueError(f"indent_depth must be >= 0, got {indent_depth}")
        self._tab = indent_char * indent_depth
        self._parts: List[str] = []
        self._indent = 0
        self._at_line_start = True
        self._stack: List[List[Any]] = []
        self.comments_written = False
        self.need_to_write_line = False

    # ------------ raw output -------------------------------------------- #

    def _write(self, text: str):
        if not text:
            return
        if self._at_line_start:
            self._parts.append(self._tab * self._indent)
            self._at_line_start = False
        self._parts.append(text)

    def _write_line(self, text: str = ""):
        self._write(text)
        self._parts.append("\n")
        self._at_line_start = True

    def getvalue(self) -> str:
        return "".join(self._parts)

    # ------------ container state --------------------------------------- #

    @property
    def current_type(self) -> Optional[_Container]:
        return self._stack[-1][0] if self._stack else None

    @property
    def current_count(self) -> int:
        return self._stack[-1][1] if self._stack else 0

    def _start(self, container: _Container):
        self._stack.append([container, 0])
        self._write_line("{" if container is _Container.OBJECT else "[")
        self._indent += 1

    def _end(self):
        container, _ = self._stack.pop()
        self._write_line()
        self._indent -= 1
        self._write("}" if container is _Container.OBJECT else "]")

    def _increment(self):
        if self._stack:
            self._stack[-1][1] += 1

    def _write_item_separator(self):
        if self.current_count > 0:
            self._write_line(ITEM_SEPARATOR)

    def _reset_need_to_write_line(self):
        self.need_to_write_line = self.current_count > 0 and self.current_type is not None

    def _write_empty_line_if_needed(self):
        if self.need_to_write_line:
            self._write_line()
            self.need_to_write_line = False

    def _write_property_name(self, name: str):
        self._write(f"{json.dumps(name, ensure_ascii=False)}: ")

    # ------------ comments ---------------------------------------------- #

    def write_comment(self, comment: Optional[str]):
        """Write ``comment`` as one ``//`` line per line of text."""
        if not comment:
            return
        self._write_empty_line_if_needed()
        for line in comment.splitlines():
            self._write_line(f"{LINE_COMMENT_PREFIX}{line}")

    def write_list_comment(self, items: Sequence[str], prefix: str = "", postfix: str = ""):
        if not items:
            return
        self._write_empty_line_if_needed()
        self._write_line(f"{LINE_COMMENT_PREFIX}{prefix}{LIST_SEPARATOR.join(items)}{postfix}")

    def _write_container_comments(self, description: Optional[str]):
        if self.comments_written:
            return
        self._reset_need_to_write_line()
        self.write_comment(description)
        self.comments_written = True
        self.need_to_write_line = False

    def _write_preference_comments(self, preference: Preference):
        if self.comments_written:
            return
        self._reset_need_to_write_line()
        self.write_comment(preference.description)
        allowed = preference.allowed_values
        if allowed:
            self.write_list_comment(
                [kinds.literal(preference.kind, v) for v in allowed],
                prefix=values_line_prefix(preference),
                postfix=".",
            )
        if preference.default_value is not None:
            self.write_comment(
                f"Default value: {kinds.literal(preference.kind, preference.default_value)}."
            )
        self.comments_written = True
        self.need_to_write_line = False

    # ------------ tree ------------------------------------------------- #

    def write_preference(self, preference: Preference):
        self._write_preference_comments(preference)
        if self.current_type is _Container.OBJECT:
            self._write_property_name(preference.name)
        self._write(kinds.literal(preference.kind, preference.value))

    def write_group(self, group: PreferenceGroup):
        self._write_container_comments(group.description)
        if len(group) == 0:
            self._write("{}")
            return
        self._start(_Container.OBJECT)
        for preference in group:
            self._write_item_separator()
            self.comments_written = False
            self.write_preference(preference)
            self._increment()
        self._end()

    def write_groups(self, groups: Sequence[PreferenceGroup]):
        self._write_array(groups, self.write_group)

    def write_store(self, store: PreferenceStore):
        self._write_container_comments(store.description)
        if len(store) == 0:
            self._write("{}")
            return
        self._start(_Container.OBJECT)
        for name, item in store.items():
            self._write_item_separator()
            self.comments_written = False
            if item.kind is StoreItemKind.PREFERENCE:
                self.write_preference(item.payload)
            else:
                description = item.description
                if not description and item.kind in (StoreItemKind.GROUP, StoreItemKind.STORE):
                    description = item.payload.description
                self._write_container_comments(description)
                self._write_property_name(name)
                if item.kind is StoreItemKind.GROUP:
                    self.write_group(item.payload)
                elif item.kind is StoreItemKind.GROUP_ARRAY:
                    self.write_groups(item.payload)
                elif item.kind is StoreItemKind.STORE:
                    self.write_store(item.payload)
                else:
                    self.write_stores(item.payload)
            self._increment()
        self._end()

    def write_stores(self, stores: Sequence[PreferenceStore]):
        self._write_array(stores, self.write_store)

    def _write_array(self, containers: Sequence[Any], write_one):
        if len(containers) == 0:
            self._write("[]")
            return
        self._start(_Container.ARRAY)
        for container in containers:
            self._write_item_separator()
            self.comments_written = False
            write_one(container)
            self._increment()
        self._end()

    def write(self, tree: Any):
        """Dispatch on the shape of ``tree`` and render it."""
        if isinstance(tree, Preference):
            self.write_preference(tree)
        elif isinstance(tree, PreferenceGroup):
            self.write_group(tree)
        elif isinstance(tree, PreferenceStore):
            self.write_store(tree)
        elif isinstance(tree, (list, tuple)):
            if all(isinstance(t, PreferenceGroup) for t in tree):
                self.write_groups(tree)
            elif all(isinstance(t, PreferenceStore) for t in tree):
                self.write_stores(tree)
            else:
                raise TypeError("arrays must hold only groups or only stores")
        elif tree is None:
            raise TypeError("tree must not be None")
        else:
            raise TypeError(f"cannot render a {type(tree).__name__}")


def values_line_prefix(preference: Preference) -> str:
    """Leading text of the allowed / suggested values comment line."""
    if preference.has_combinable_flags:
        word = "Suggested" if preference.allow_undefined_values else "Allowed"
        return f"{word} {_FLAGS_SUFFIX}"
    return _SUGGESTED_PREFIX if preference.allow_undefined_values else _ALLOWED_PREFIX


def write_to_string(
    tree: Any,
    indent_char: str = DEFAULT_INDENT_CHAR,
    indent_depth: int = DEFAULT_INDENT_DEPTH,
) -> str:
    """Render ``tree`` (a preference, group, store or array) to annotated text."""
    writer = JsoncWriter(indent_char, indent_depth)
    writer.write(tree)
    text = writer.getvalue()
    log.debug("Rendered %s to %d characters", type(tree).__name__, len(text))
    return text
