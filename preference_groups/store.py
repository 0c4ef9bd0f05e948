# =============================================================
#  preference_groups/store.py
# =============================================================
"""Hierarchical preference stores.

A :class:`PreferenceStore` maps names to :class:`StoreItem` values.  A store
item is a tagged union over five shapes (a preference, a group, an array of
groups, a nested store or an array of stores) so configuration namespaces
can nest arbitrarily, e.g. one sub-tree per plugin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateNameError, ItemKindError, PreferenceNotFoundError
from .group import KindAddersMixin, PreferenceGroup
from .preference import Preference, process_name

__all__ = ["StoreItemKind", "StoreItem", "PreferenceStore", "PreferenceStoreBuilder"]

log = logging.getLogger(__name__)


class StoreItemKind(str, Enum):
    PREFERENCE = "preference"
    GROUP = "group"
    GROUP_ARRAY = "group_array"
    STORE = "store"
    STORE_ARRAY = "store_array"


_ARRAY_KINDS = {StoreItemKind.GROUP_ARRAY, StoreItemKind.STORE_ARRAY}


def _payload_type(kind: StoreItemKind) -> type:
    if kind is StoreItemKind.PREFERENCE:
        return Preference
    if kind in (StoreItemKind.GROUP, StoreItemKind.GROUP_ARRAY):
        return PreferenceGroup
    return PreferenceStore


@dataclass(frozen=True)
class StoreItem:
    """One entry of a :class:`PreferenceStore`.

    Arrays are held as tuples; the groups and stores inside them stay
    mutable.
    """

    kind: StoreItemKind
    payload: Any
    description: Optional[str] = None

    def __post_init__(self):
        kind = StoreItemKind(self.kind)
        object.__setattr__(self, "kind", kind)
        expected = _payload_type(kind)
        if kind in _ARRAY_KINDS:
            if self.payload is None or isinstance(self.payload, (str, bytes)):
                raise TypeError(f"{kind.value} payload must be a sequence")
            payload = tuple(self.payload)
            for element in payload:
                if not isinstance(element, expected):
                    raise TypeError(
                        f"{kind.value} elements must be {expected.__name__}, got {type(element).__name__}"
                    )
            object.__setattr__(self, "payload", payload)
        elif not isinstance(self.payload, expected):
            raise TypeError(
                f"{kind.value} payload must be {expected.__name__}, got {type(self.payload).__name__}"
            )

    @classmethod
    def of(cls, value: Any, description: Optional[str] = None) -> "StoreItem":
        """Wrap ``value``, inferring the item kind from its type."""
        if isinstance(value, StoreItem):
            if description is None:
                return value
            return cls(value.kind, value.payload, description)
        if isinstance(value, Preference):
            return cls(StoreItemKind.PREFERENCE, value, description)
        if isinstance(value, PreferenceGroup):
            return cls(StoreItemKind.GROUP, value, description)
        if isinstance(value, PreferenceStore):
            return cls(StoreItemKind.STORE, value, description)
        if isinstance(value, (list, tuple)):
            if value and all(isinstance(v, PreferenceGroup) for v in value):
                return cls(StoreItemKind.GROUP_ARRAY, value, description)
            if value and all(isinstance(v, PreferenceStore) for v in value):
                return cls(StoreItemKind.STORE_ARRAY, value, description)
            raise TypeError(
                "a sequence item must be a non-empty list of groups or of stores; "
                "use StoreItem(kind, ...) for empty arrays"
            )
        if value is None:
            raise TypeError("store item value must not be None")
        raise TypeError(f"cannot store a value of type {type(value).__name__}")

    # ------------ typed extraction -------------------------------------- #

    def _expect(self, kind: StoreItemKind) -> Any:
        if self.kind is not kind:
            raise ItemKindError(f"item is a {self.kind.value}, not a {kind.value}")
        return self.payload

    def as_preference(self) -> Preference:
        return self._expect(StoreItemKind.PREFERENCE)

    def as_group(self) -> PreferenceGroup:
        return self._expect(StoreItemKind.GROUP)

    def as_groups(self) -> Tuple[PreferenceGroup, ...]:
        return self._expect(StoreItemKind.GROUP_ARRAY)

    def as_store(self) -> "PreferenceStore":
        return self._expect(StoreItemKind.STORE)

    def as_stores(self) -> Tuple["PreferenceStore", ...]:
        return self._expect(StoreItemKind.STORE_ARRAY)

    def try_as_preference(self) -> Optional[Preference]:
        return self.payload if self.kind is StoreItemKind.PREFERENCE else None

    def try_as_group(self) -> Optional[PreferenceGroup]:
        return self.payload if self.kind is StoreItemKind.GROUP else None

    def try_as_groups(self) -> Optional[Tuple[PreferenceGroup, ...]]:
        return self.payload if self.kind is StoreItemKind.GROUP_ARRAY else None

    def try_as_store(self) -> Optional["PreferenceStore"]:
        return self.payload if self.kind is StoreItemKind.STORE else None

    def try_as_stores(self) -> Optional[Tuple["PreferenceStore", ...]]:
        return self.payload if self.kind is StoreItemKind.STORE_ARRAY else None

    # ------------ bulk helpers ------------------------------------------ #

    def containers(self) -> Iterable[Any]:
        """Groups and stores reachable directly from this item."""
        if self.kind in _ARRAY_KINDS:
            return self.payload
        if self.kind in (StoreItemKind.GROUP, StoreItemKind.STORE):
            return (self.payload,)
        return ()


class PreferenceStore:
    """Ordered mapping ``name -> StoreItem``."""

    def __init__(self, description: Optional[str] = None):
        self.description = description
        self._items: Dict[str, StoreItem] = {}

    @staticmethod
    def _wrap(name: str, value: Any, description: Optional[str]) -> Tuple[str, StoreItem]:
        name = process_name(name)
        item = StoreItem.of(value, description)
        if item.kind is StoreItemKind.PREFERENCE and item.payload.name != name:
            raise ValueError(f"key '{name}' does not match preference name '{item.payload.name}'")
        return name, item

    # ------------ membership -------------------------------------------- #

    def add(self, name: str, value: Any, description: Optional[str] = None) -> "PreferenceStore":
        """Add ``value`` (a preference, group, store or array of those) under ``name``.

        Raises
        ------
        DuplicateNameError
            ``name`` is already present.
        """
        name, item = self._wrap(name, value, description)
        if name in self._items:
            raise DuplicateNameError(f"an item named '{name}' already exists")
        self._items[name] = item
        return self

    def add_preference(self, preference: Preference) -> "PreferenceStore":
        if preference is None:
            raise TypeError("preference must not be None")
        if not isinstance(preference, Preference):
            raise TypeError(f"expected Preference, got {type(preference).__name__}")
        return self.add(preference.name, preference)

    def update_or_add(self, name: str, value: Any, description: Optional[str] = None) -> "PreferenceStore":
        name, item = self._wrap(name, value, description)
        self._items[name] = item
        return self

    def remove(self, name: str) -> bool:
        return self._items.pop(name, None) is not None

    def contains_name(self, name: str) -> bool:
        return name in self._items

    def clear(self):
        self._items.clear()

    @property
    def names(self) -> List[str]:
        return list(self._items)

    def items(self) -> List[Tuple[str, StoreItem]]:
        return list(self._items.items())

    # ------------ typed extraction -------------------------------------- #

    def get_item_as_preference(self, name: str) -> Preference:
        return self[name].as_preference()

    def get_item_as_group(self, name: str) -> PreferenceGroup:
        return self[name].as_group()

    def get_item_as_groups(self, name: str) -> Tuple[PreferenceGroup, ...]:
        return self[name].as_groups()

    def get_item_as_store(self, name: str) -> "PreferenceStore":
        return self[name].as_store()

    def get_item_as_stores(self, name: str) -> Tuple["PreferenceStore", ...]:
        return self[name].as_stores()

    # ------------ values ------------------------------------------------ #

    def get_value(self, name: str) -> Any:
        return self.get_item_as_preference(name).value

    def set_value(self, name: str, value: Any):
        self.get_item_as_preference(name).set_value(value)

    def get_value_as(self, name: str, tp: type) -> Any:
        return self.get_item_as_preference(name).get_value_as(tp)

    def get_default_value_as(self, name: str, tp: type) -> Any:
        return self.get_item_as_preference(name).get_default_value_as(tp)

    def set_values_to_null(self):
        for item in self._items.values():
            if item.kind is StoreItemKind.PREFERENCE:
                item.payload.set_value_to_null()
            for container in item.containers():
                container.set_values_to_null()

    def set_values_to_default(self):
        for item in self._items.values():
            if item.kind is StoreItemKind.PREFERENCE:
                item.payload.set_value_to_default()
            for container in item.containers():
                container.set_values_to_default()

    # ------------ dunder ------------------------------------------------ #

    def __getitem__(self, name: str) -> StoreItem:
        try:
            return self._items[name]
        except KeyError:
            raise PreferenceNotFoundError(f"no item named '{name}'") from None

    def __setitem__(self, name: str, value: Any):
        self.update_or_add(name, value)

    def __delitem__(self, name: str):
        if not self.remove(name):
            raise PreferenceNotFoundError(f"no item named '{name}'")

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(description={self.description!r}, names={self.names!r})"


class PreferenceStoreBuilder(KindAddersMixin):
    """Collects items and builds a :class:`PreferenceStore`."""

    def __init__(self):
        self._description: Optional[str] = None
        self._items: List[Tuple[str, Any]] = []

    @classmethod
    def create(cls) -> "PreferenceStoreBuilder":
        return cls()

    @staticmethod
    def build_empty(description: Optional[str] = None) -> PreferenceStore:
        return PreferenceStore(description)

    def with_description(self, description: Optional[str]) -> "PreferenceStoreBuilder":
        self._description = description.strip() if description is not None else None
        return self

    def add(self, preference: Preference) -> "PreferenceStoreBuilder":
        if not isinstance(preference, Preference):
            raise TypeError(f"expected Preference, got {type(preference).__name__}")
        self._items.append((preference.name, preference))
        return self

    def add_group(self, name: str, group: PreferenceGroup, description: Optional[str] = None) -> "PreferenceStoreBuilder":
        self._items.append((name, StoreItem(StoreItemKind.GROUP, group, description)))
        return self

    def add_groups(self, name: str, groups: Iterable[PreferenceGroup], description: Optional[str] = None) -> "PreferenceStoreBuilder":
        self._items.append((name, StoreItem(StoreItemKind.GROUP_ARRAY, groups, description)))
        return self

    def add_store(self, name: str, store: PreferenceStore, description: Optional[str] = None) -> "PreferenceStoreBuilder":
        self._items.append((name, StoreItem(StoreItemKind.STORE, store, description)))
        return self

    def add_stores(self, name: str, stores: Iterable[PreferenceStore], description: Optional[str] = None) -> "PreferenceStoreBuilder":
        self._items.append((name, StoreItem(StoreItemKind.STORE_ARRAY, stores, description)))
        return self

    def build(self) -> PreferenceStore:
        store = PreferenceStore(self._description)
        for name, value in self._items:
            store.add(name, value)
        log.debug("Built preference store with %d item(s)", len(store))
        return store
