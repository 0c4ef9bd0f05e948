# =============================================================
#  preference_groups/builders.py
# =============================================================
"""Fluent, immutable builders for :class:`Preference` objects.

Every ``with_*`` call returns a *new* builder, so a partially configured
builder can be shared and specialised freely.  All cross-field checks happen
once, in :meth:`PreferenceBuilder.build`.

```python
from preference_groups.builders import PreferenceBuilder

port = (
    PreferenceBuilder.uint16("Port")
    .with_description("TCP port to listen on.")
    .with_allowed_values(80, 443, 8080)
    .allow_only_defined_values()
    .with_value_and_as_default(8080)
    .build()
)
```
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .kinds import CHOICE_KINDS, ValueKind, kind_for_enum
from .preference import Preference
from .validity import NO_CHANGE, ValidityProcessor, coalesce

__all__ = ["PreferenceBuilder", "build"]

_SEQUENCE_TYPES = (list, tuple, set, frozenset, range)


@dataclass(frozen=True)
class PreferenceBuilder:
    name: str
    kind: ValueKind
    enum_type: Optional[type] = None
    description: Optional[str] = None
    value: Any = None
    default_value: Any = None
    allowed: Optional[Tuple[Any, ...]] = None
    sort: bool = False
    allow_undefined: bool = True
    processor: ValidityProcessor = NO_CHANGE

    # ------------ entry points ------------------------------------------ #

    @classmethod
    def boolean(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.BOOLEAN)

    @classmethod
    def int8(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.INT8)

    @classmethod
    def uint8(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.UINT8)

    @classmethod
    def int16(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.INT16)

    @classmethod
    def uint16(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.UINT16)

    @classmethod
    def int32(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.INT32)

    @classmethod
    def uint32(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.UINT32)

    @classmethod
    def int64(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.INT64)

    @classmethod
    def uint64(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.UINT64)

    @classmethod
    def single(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.SINGLE)

    @classmethod
    def double(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.DOUBLE)

    @classmethod
    def decimal(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.DECIMAL)

    @classmethod
    def string(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.STRING)

    @classmethod
    def bytes_(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.BYTES)

    @classmethod
    def ip_address(cls, name: str) -> "PreferenceBuilder":
        return cls(name, ValueKind.IP_ADDRESS)

    @classmethod
    def enum(cls, name: str, enum_type: type) -> "PreferenceBuilder":
        """Builder for a choice preference over ``enum_type``.

        :class:`enum.Flag` types produce the combinable ``FLAGS`` kind.  Unlike
        the other kinds, undefined values are disallowed by default; while
        they are, an empty allowed set stands for every defined member (zero
        values and aliases included).
        """
        return cls(name, kind_for_enum(enum_type), enum_type=enum_type, allow_undefined=False)

    @classmethod
    def for_kind(cls, kind: ValueKind | str, name: str, enum_type: Optional[type] = None) -> "PreferenceBuilder":
        kind = ValueKind(kind)
        if kind in CHOICE_KINDS:
            if enum_type is None:
                raise TypeError(f"kind {kind.value} needs an enum_type")
            return cls.enum(name, enum_type)
        return cls(name, kind)

    # ------------ fluent setters ----------------------------------------- #

    def with_value(self, value: Any) -> "PreferenceBuilder":
        return dataclasses.replace(self, value=value)

    def with_default_value(self, value: Any) -> "PreferenceBuilder":
        return dataclasses.replace(self, default_value=value)

    def with_value_and_as_default(self, value: Any) -> "PreferenceBuilder":
        return dataclasses.replace(self, value=value, default_value=value)

    def with_description(self, description: Optional[str]) -> "PreferenceBuilder":
        if description is not None:
            description = description.strip()
        return dataclasses.replace(self, description=description)

    def with_allowed_values(self, *values: Any) -> "PreferenceBuilder":
        """Set the allowed values, given either as arguments or as one sequence."""
        if len(values) == 1 and isinstance(values[0], _SEQUENCE_TYPES):
            values = tuple(values[0])
        return dataclasses.replace(self, allowed=tuple(values))

    def with_allowed_values_and_sort(self, *values: Any) -> "PreferenceBuilder":
        return self.with_allowed_values(*values).sort_allowed_values()

    def with_allowed_values_and_do_not_sort(self, *values: Any) -> "PreferenceBuilder":
        return self.with_allowed_values(*values).do_not_sort_allowed_values()

    def with_no_allowed_values(self) -> "PreferenceBuilder":
        return dataclasses.replace(self, allowed=None)

    def sort_allowed_values(self) -> "PreferenceBuilder":
        return dataclasses.replace(self, sort=True)

    def do_not_sort_allowed_values(self) -> "PreferenceBuilder":
        return dataclasses.replace(self, sort=False)

    def allow_only_defined_values(self) -> "PreferenceBuilder":
        return dataclasses.replace(self, allow_undefined=False)

    def allow_undefined_values(self) -> "PreferenceBuilder":
        return dataclasses.replace(self, allow_undefined=True)

    def with_validity_processor(self, processor: ValidityProcessor) -> "PreferenceBuilder":
        """Replace the validity processor; ``None`` raises :class:`TypeError`."""
        return dataclasses.replace(self, processor=coalesce(processor))

    # ------------ build -------------------------------------------------- #

    def build(self) -> Preference:
        """Create the preference.

        Raises
        ------
        SetValueError
            The name, value, default value or an allowed value was rejected.
            The originating exception is available as ``cause``.
        """
        allowed = self.allowed
        if self.kind in CHOICE_KINDS and not allowed and not self.allow_undefined and self.enum_type is not None:
            # every defined member, zero values and aliases included
            allowed = tuple(dict.fromkeys(self.enum_type.__members__.values()))
        return Preference(
            self.name,
            self.kind,
            enum_type=self.enum_type,
            description=self.description,
            value=self.value,
            default_value=self.default_value,
            allowed_values=allowed,
            sort_allowed_values=self.sort,
            allow_undefined_values=self.allow_undefined,
            validity_processor=self.processor,
        )


def build(kind: ValueKind | str | type, name: str, value: Any = None, *, enum_type: Optional[type] = None) -> Preference:
    """Shortcut for a preference holding only a name and optionally a value.

    ``kind`` may also be an :class:`enum.Enum` type, in which case it is used
    as the ``enum_type`` of a choice preference.
    """
    if isinstance(kind, type):
        enum_type, kind = kind, kind_for_enum(kind)
    builder = PreferenceBuilder.for_kind(kind, name, enum_type)
    if value is not None:
        builder = builder.with_value(value)
    return builder.build()
