# =============================================================
#  preference_groups/group.py
# =============================================================
"""Insertion-ordered, name-keyed collections of preferences."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from .builders import PreferenceBuilder
from .errors import DuplicateNameError, PreferenceNotFoundError
from .kinds import ValueKind
from .preference import Preference

__all__ = ["PreferenceGroup", "PreferenceGroupBuilder", "KindAddersMixin"]

log = logging.getLogger(__name__)

Configure = Callable[[PreferenceBuilder], PreferenceBuilder]


def _check_preference(preference: Any) -> Preference:
    if preference is None:
        raise TypeError("preference must not be None")
    if not isinstance(preference, Preference):
        raise TypeError(f"expected Preference, got {type(preference).__name__}")
    return preference


class PreferenceGroup:
    """
    Ordered mapping ``name -> Preference``.

    Iteration yields the preferences in insertion order, which is also the
    order in which they are written to a document.
    """

    def __init__(self, description: Optional[str] = None, preferences: Optional[Iterable[Preference]] = None):
        self.description = description
        self._preferences: Dict[str, Preference] = {}
        if preferences is not None:
            self.add_all(preferences)

    # ------------ membership -------------------------------------------- #

    def add(self, *preferences: Preference) -> "PreferenceGroup":
        """Add one or more preferences; nothing is added if any is rejected.

        Raises
        ------
        TypeError
            An argument is ``None`` or not a :class:`Preference`.
        DuplicateNameError
            A name is already present (or repeated in the arguments).
        """
        return self.add_all(preferences)

    def add_all(self, preferences: Iterable[Preference]) -> "PreferenceGroup":
        if preferences is None:
            raise TypeError("preferences must not be None")
        staged: Dict[str, Preference] = {}
        for pref in preferences:
            pref = _check_preference(pref)
            if pref.name in self._preferences or pref.name in staged:
                raise DuplicateNameError(f"a preference named '{pref.name}' already exists")
            staged[pref.name] = pref
        self._preferences.update(staged)
        return self

    def update_or_add(self, preference: Preference) -> "PreferenceGroup":
        pref = _check_preference(preference)
        self._preferences[pref.name] = pref
        return self

    def remove(self, preference: Union[Preference, str]) -> bool:
        if isinstance(preference, str):
            return self.remove_by_name(preference)
        pref = _check_preference(preference)
        if self._preferences.get(pref.name) is not pref:
            return False
        del self._preferences[pref.name]
        return True

    def remove_by_name(self, name: str) -> bool:
        return self._preferences.pop(name, None) is not None

    def contains(self, preference: Preference) -> bool:
        pref = _check_preference(preference)
        return self._preferences.get(pref.name) is pref

    def contains_name(self, name: str) -> bool:
        return name in self._preferences

    def clear(self):
        self._preferences.clear()

    @property
    def names(self) -> List[str]:
        return list(self._preferences)

    # ------------ values ------------------------------------------------ #

    def get_value(self, name: str) -> Any:
        return self[name].value

    def set_value(self, name: str, value: Any):
        self[name].set_value(value)

    def get_value_as(self, name: str, tp: type) -> Any:
        return self[name].get_value_as(tp)

    def get_default_value(self, name: str) -> Any:
        return self[name].default_value

    def get_default_value_as(self, name: str, tp: type) -> Any:
        return self[name].get_default_value_as(tp)

    def try_get_value(self, name: str, default: Any = None) -> Any:
        pref = self._preferences.get(name)
        if pref is None or pref.value is None:
            return default
        return pref.value

    def set_values_to_null(self):
        for pref in self._preferences.values():
            pref.set_value_to_null()

    def set_values_to_default(self):
        for pref in self._preferences.values():
            pref.set_value_to_default()

    # ------------ dunder ------------------------------------------------ #

    def __getitem__(self, name: str) -> Preference:
        try:
            return self._preferences[name]
        except KeyError:
            raise PreferenceNotFoundError(f"no preference named '{name}'") from None

    def __setitem__(self, name: str, preference: Preference):
        pref = _check_preference(preference)
        if name != pref.name:
            raise ValueError(f"key '{name}' does not match preference name '{pref.name}'")
        self._preferences[name] = pref

    def __delitem__(self, name: str):
        if not self.remove_by_name(name):
            raise PreferenceNotFoundError(f"no preference named '{name}'")

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Preference):
            return self._preferences.get(item.name) is item
        return item in self._preferences

    def __iter__(self) -> Iterator[Preference]:
        return iter(list(self._preferences.values()))

    def __len__(self) -> int:
        return len(self._preferences)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(description={self.description!r}, names={self.names!r})"


# --------------------------------------------------------------------------- #
#                              builders                                        #
# --------------------------------------------------------------------------- #


class KindAddersMixin:
    """``add_<kind>`` helpers shared by the group and store builders.

    Sub-classes provide ``add(preference)``.  ``configure`` receives the
    kind's :class:`PreferenceBuilder` and must return the (new) builder.
    """

    def add(self, preference: Preference):  # pragma: no cover - overridden
        raise NotImplementedError

    def _add_built(self, builder: PreferenceBuilder, configure: Optional[Configure]):
        if configure is not None:
            builder = configure(builder)
            if not isinstance(builder, PreferenceBuilder):
                raise TypeError("configure must return a PreferenceBuilder")
        return self.add(builder.build())

    def add_kind(self, kind: ValueKind | str, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.for_kind(kind, name), configure)

    def add_boolean(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.boolean(name), configure)

    def add_int8(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.int8(name), configure)

    def add_uint8(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.uint8(name), configure)

    def add_int16(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.int16(name), configure)

    def add_uint16(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.uint16(name), configure)

    def add_int32(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.int32(name), configure)

    def add_uint32(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.uint32(name), configure)

    def add_int64(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.int64(name), configure)

    def add_uint64(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.uint64(name), configure)

    def add_single(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.single(name), configure)

    def add_double(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.double(name), configure)

    def add_decimal(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.decimal(name), configure)

    def add_string(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.string(name), configure)

    def add_bytes(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.bytes_(name), configure)

    def add_ip_address(self, name: str, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.ip_address(name), configure)

    def add_enum(self, name: str, enum_type: type, configure: Optional[Configure] = None):
        return self._add_built(PreferenceBuilder.enum(name, enum_type), configure)


class PreferenceGroupBuilder(KindAddersMixin):
    """Collects preferences and builds a :class:`PreferenceGroup`."""

    def __init__(self):
        self._description: Optional[str] = None
        self._preferences: List[Preference] = []

    @classmethod
    def create(cls) -> "PreferenceGroupBuilder":
        return cls()

    @staticmethod
    def build_empty(description: Optional[str] = None) -> PreferenceGroup:
        return PreferenceGroup(description)

    @staticmethod
    def build_from(model: Any) -> PreferenceGroup:
        """Seed a group from a pydantic model (see :mod:`preference_groups.declarative`)."""
        from .declarative import build_group_from

        return build_group_from(model)

    def with_description(self, description: Optional[str]) -> "PreferenceGroupBuilder":
        self._description = description.strip() if description is not None else None
        return self

    def add(self, preference: Preference) -> "PreferenceGroupBuilder":
        self._preferences.append(_check_preference(preference))
        return self

    def build(self) -> PreferenceGroup:
        group = PreferenceGroup(self._description, self._preferences)
        log.debug("Built preference group with %d preference(s)", len(group))
        return group
