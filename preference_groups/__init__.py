# =============================================================
#  preference_groups/__init__.py
# =============================================================
"""
Preference-Groups
=================

Typed, self-documenting application preferences persisted as JSON with
comments.

Main ideas
~~~~~~~~~~
* A **preference** is a named, typed, optionally null value with a default,
  a description, an allowed-values set and pluggable validity processors.
  All checks run when it is built and again on every ``set_value``.
* Preferences live in insertion-ordered **groups**; **stores** nest groups,
  stores and arrays of both into arbitrary trees (e.g. one per plugin).
* The **codec** renders a tree as JSON where every value is preceded by
  ``//`` comments describing it.  Users may edit the file by hand.
* **Reconciliation** reads such a file back into a freshly built tree,
  keeps only the value changes, regenerates the comments and reports which
  preferences changed.

Quick example
~~~~~~~~~~~~~
```python
from preference_groups import PreferenceFile, PreferenceGroupBuilder

group = (
    PreferenceGroupBuilder.create()
    .add_int32("Number", lambda b: b.with_default_value(13))
    .add_string("String", lambda b: b.with_description("A string preference."))
    .build()
)

pref_file = PreferenceFile("settings.jsonc")
changed = pref_file.update(group)     # writes the file on first run
print(group.get_value("Number"), changed)
```
"""

from __future__ import annotations

from importlib import metadata as _meta
import logging as _logging

# --------------------------------------------------------------------- #
# Version
# --------------------------------------------------------------------- #
try:  # When installed (pip/poetry)
    __version__: str = _meta.version("preference-groups")
except _meta.PackageNotFoundError:  # Editable checkout / source tree
    __version__ = "0.1.0"

# --------------------------------------------------------------------- #
# Logging
# --------------------------------------------------------------------- #
_logging.getLogger(__name__).addHandler(_logging.NullHandler())  # *never* touch the root logger.

# --------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------- #
from .errors import (  # noqa: E402
    DuplicateNameError,
    InvalidNameError,
    ItemKindError,
    PreferenceError,
    PreferenceNotFoundError,
    PreferenceParseError,
    SetValueError,
    SetValueStep,
)
from .kinds import ValueKind  # noqa: E402
from .validity import NO_CHANGE, ValidityProcessor, ValidityResult  # noqa: E402
from .preference import Preference  # noqa: E402
from .builders import PreferenceBuilder, build  # noqa: E402
from .group import PreferenceGroup, PreferenceGroupBuilder  # noqa: E402
from .store import PreferenceStore, PreferenceStoreBuilder, StoreItem, StoreItemKind  # noqa: E402
from .codec import write_to_string  # noqa: E402
from .reconcile import ReconcileResult, reconcile, update_from_string  # noqa: E402
from .settings import PreferenceFileSettings  # noqa: E402
from .file import PreferenceFile  # noqa: E402

__all__ = [
    "ValueKind",
    "Preference",
    "PreferenceBuilder",
    "build",
    "ValidityProcessor",
    "ValidityResult",
    "NO_CHANGE",
    "PreferenceGroup",
    "PreferenceGroupBuilder",
    "PreferenceStore",
    "PreferenceStoreBuilder",
    "StoreItem",
    "StoreItemKind",
    "write_to_string",
    "reconcile",
    "update_from_string",
    "ReconcileResult",
    "PreferenceFile",
    "PreferenceFileSettings",
    "PreferenceError",
    "InvalidNameError",
    "SetValueError",
    "SetValueStep",
    "PreferenceNotFoundError",
    "DuplicateNameError",
    "ItemKindError",
    "PreferenceParseError",
]
