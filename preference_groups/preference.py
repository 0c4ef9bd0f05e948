# =============================================================
#  preference_groups/preference.py
# =============================================================
"""The atomic, named and typed preference slot.

A single :class:`Preference` class serves every :class:`ValueKind`; the
kind-specific parts (conversion, literal text, ordering) are looked up in
:mod:`preference_groups.kinds`.  Instances are normally created through
:class:`preference_groups.builders.PreferenceBuilder`.
"""

from __future__ import annotations

import logging
from enum import Flag
from functools import reduce
from typing import Any, Iterable, List, Optional, Tuple

from . import kinds
from .errors import InvalidNameError, SetValueError, SetValueStep
from .kinds import CHOICE_KINDS, ValueKind
from .validity import NO_CHANGE, ValidityProcessor, coalesce

__all__ = ["Preference", "process_name", "process_allow_undefined_values"]

log = logging.getLogger(__name__)

_CONVERSION_ERRORS = (TypeError, ValueError, ArithmeticError)


def process_name(name: Any) -> str:
    """Return ``name`` trimmed; ``None``, empty or blank names are rejected."""
    if name is None:
        raise InvalidNameError("name must not be None")
    if not isinstance(name, str):
        raise InvalidNameError(f"name must be a str, got {type(name).__name__}")
    trimmed = name.strip()
    if not trimmed:
        raise InvalidNameError("name must not be empty or white-space")
    return trimmed


def process_allow_undefined_values(
    allow_undefined_values: bool, allowed_values: Optional[Iterable[Any]]
) -> bool:
    """An absent or empty allowed set can never forbid a value."""
    return bool(allow_undefined_values) or not allowed_values


class Preference:
    """
    A named, optionally-valued setting of one :class:`ValueKind`.

    Parameters
    ----------
    name : str
        Identity of the preference; trimmed, must not be blank.
    kind : ValueKind
        The kind of the values held.
    enum_type : type, optional
        The :class:`enum.Enum` (or :class:`enum.Flag`) type of choice kinds.
    allowed_values : iterable, optional
        Values suggested for (or, with ``allow_undefined_values=False``,
        required of) the preference.  Nulls are dropped and duplicates
        removed, keeping the first occurrence.
    sort_allowed_values : bool, default False
        Sort the allowed values with the kind's ordering (stable).
    """

    def __init__(
        self,
        name: str,
        kind: ValueKind | str,
        *,
        enum_type: Optional[type] = None,
        description: Optional[str] = None,
        value: Any = None,
        default_value: Any = None,
        allowed_values: Optional[Iterable[Any]] = None,
        sort_allowed_values: bool = False,
        allow_undefined_values: bool = True,
        validity_processor: ValidityProcessor = NO_CHANGE,
    ):
        try:
            self._name = process_name(name)
        except InvalidNameError as e:
            raise SetValueError(e, SetValueStep.PROCESSING_NAME) from e
        self._kind = ValueKind(kind)
        if self._kind in CHOICE_KINDS:
            if enum_type is None:
                raise TypeError(f"preference '{self._name}' of kind {self._kind.value} needs an enum_type")
            if kinds.kind_for_enum(enum_type) is not self._kind:
                raise TypeError(f"{enum_type.__name__} does not match kind {self._kind.value}")
        elif enum_type is not None:
            raise TypeError(f"enum_type is only valid for choice kinds, not {self._kind.value}")
        self._enum_type = enum_type
        self._description = description
        self._validity_processor = coalesce(validity_processor)

        self._allowed_values = self._normalize_allowed_values(allowed_values, sort_allowed_values)
        self._allow_undefined_values = process_allow_undefined_values(
            allow_undefined_values, self._allowed_values
        )

        self._default_value = self._process(default_value)
        self._value = self._process(value)

    # ------------ identity / metadata ---------------------------------- #

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def enum_type(self) -> Optional[type]:
        return self._enum_type

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def allowed_values(self) -> Optional[Tuple[Any, ...]]:
        return self._allowed_values

    @property
    def allow_undefined_values(self) -> bool:
        return self._allow_undefined_values

    @property
    def validity_processor(self) -> ValidityProcessor:
        return self._validity_processor

    @property
    def is_choice_type(self) -> bool:
        return self._kind in CHOICE_KINDS

    @property
    def has_combinable_flags(self) -> bool:
        return self._kind is ValueKind.FLAGS

    # ------------ values ------------------------------------------------ #

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any):
        self.set_value(value)

    @property
    def default_value(self) -> Any:
        return self._default_value

    @default_value.setter
    def default_value(self, value: Any):
        self.set_default_value(value)

    @property
    def value_is_null(self) -> bool:
        return self._value is None

    @property
    def default_value_is_null(self) -> bool:
        return self._default_value is None

    def set_value(self, value: Any):
        """Set the value after conversion and validation.

        Raises
        ------
        SetValueError
            The value was rejected; the current value is left untouched.
        """
        self._value = self._process(value)
        log.debug("Preference '%s' set to %r", self._name, self._value)

    def set_default_value(self, value: Any):
        self._default_value = self._process(value)

    def set_value_to_default(self):
        self._value = self._default_value

    def set_value_to_null(self):
        self._value = None

    def is_value_valid(self, value: Any) -> bool:
        """Return whether ``value`` would be accepted by :meth:`set_value`."""
        try:
            self._process(value)
        except SetValueError:
            return False
        return True

    # ------------ accessors --------------------------------------------- #

    def get_value_as(self, tp: type) -> Any:
        return self._cast(self._value, tp)

    def get_default_value_as(self, tp: type) -> Any:
        return self._cast(self._default_value, tp)

    def get_value_as_string(self) -> Optional[str]:
        return kinds.text(self._kind, self._value)

    def get_default_value_as_string(self) -> Optional[str]:
        return kinds.text(self._kind, self._default_value)

    def get_allowed_values_as_strings(self) -> Optional[List[str]]:
        if self._allowed_values is None:
            return None
        return [kinds.text(self._kind, v) for v in self._allowed_values]

    def _cast(self, value: Any, tp: type) -> Any:
        if value is None:
            return None
        if not isinstance(value, tp):
            raise TypeError(
                f"value of preference '{self._name}' is {type(value).__name__}, not {tp.__name__}"
            )
        return value

    # ------------ processing -------------------------------------------- #

    def _coerce(self, raw: Any, step: SetValueStep) -> Any:
        try:
            return kinds.coerce(self._kind, raw, self._enum_type)
        except _CONVERSION_ERRORS as e:
            raise SetValueError(e, step) from e

    def _normalize_allowed_values(
        self, allowed_values: Optional[Iterable[Any]], sort: bool
    ) -> Optional[Tuple[Any, ...]]:
        if allowed_values is None:
            return None
        if isinstance(allowed_values, (str, bytes)):
            raise TypeError("allowed_values must be an iterable of values, not a single value")
        converted = (self._coerce(v, SetValueStep.CONVERTING) for v in allowed_values if v is not None)
        unique = list(dict.fromkeys(converted))
        if sort:
            unique.sort(key=kinds.sort_key(self._kind))
        return tuple(unique)

    def _is_member(self, value: Any) -> bool:
        allowed = self._allowed_values
        if not allowed:
            return False
        if value in allowed:
            return True
        if isinstance(value, Flag) and value.value:
            # a combination is a member when all of its bits are allowed
            mask = reduce(lambda acc, v: acc | v.value, allowed, 0)
            return value.value & ~mask == 0
        return False

    def _process(self, raw: Any) -> Any:
        if raw is None:
            return None
        value = self._coerce(raw, SetValueStep.CONVERTING)
        proc = self._validity_processor
        value = proc.run_pre(value)
        member = self._is_member(value)
        if not member and not self._allow_undefined_values:
            raise SetValueError(
                ValueError(
                    f"{kinds.text(self._kind, value)!r} is not an allowed value of '{self._name}'"
                ),
                SetValueStep.VALIDITY_CHECK,
            )
        if not member:
            value = proc.check(value)
        value = proc.run_post(value)
        return self._coerce(value, SetValueStep.SETTING_VALUE)

    # ------------ dunder ------------------------------------------------ #

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, kind={self._kind.value}, "
            f"value={self._value!r}, default_value={self._default_value!r})"
        )
