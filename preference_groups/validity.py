# =============================================================
#  preference_groups/validity.py
#  Pre / validity / post processing of candidate values
# =============================================================
"""Pluggable validity processors.

A :class:`ValidityProcessor` runs in three stages, each a callable taking the
candidate value:

* ``pre``      - normalize the raw candidate (e.g. trim a string)
* ``is_valid`` - accept or reject the normalized candidate
* ``post``     - normalize the accepted value before it is stored

Every stage returns a :class:`ValidityResult`.  Plain ``bool`` results are
accepted as a shorthand for ``ok(candidate)`` / ``not_valid(...)``.

Basic usage
-----------
```python
from preference_groups import PreferenceBuilder
from preference_groups.validity import ensure_not_blank, greater_than, pre_trim

port = (
    PreferenceBuilder.uint16("Port")
    .with_validity_processor(greater_than(1023))
    .with_value(8080)
    .build()
)
name = (
    PreferenceBuilder.string("Name")
    .with_validity_processor(pre_trim().then(ensure_not_blank()))
    .build()
)
```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag
from functools import reduce
from typing import Any, Callable, Optional, Union

from .errors import SetValueError, SetValueStep

__all__ = [
    "ValidityResult",
    "ValidityProcessor",
    "NO_CHANGE",
    "greater_than",
    "greater_than_or_equal_to",
    "less_than",
    "less_than_or_equal_to",
    "equal_to",
    "not_equal_to",
    "in_range",
    "is_defined",
    "not_zero",
    "is_defined_and_not_zero",
    "pre_trim",
    "ensure_not_empty",
    "ensure_not_blank",
    "ensure_not_blank_and_post_trim",
    "coalesce",
]


@dataclass(frozen=True)
class ValidityResult:
    valid: bool
    value: Any = None
    error: Union[str, BaseException, None] = None

    @classmethod
    def ok(cls, value: Any) -> "ValidityResult":
        return cls(True, value)

    @classmethod
    def not_valid(cls, error: Union[str, BaseException, None] = None) -> "ValidityResult":
        return cls(False, None, error)


Stage = Callable[[Any], Union[ValidityResult, bool]]


def _unchanged(value: Any) -> ValidityResult:
    return ValidityResult.ok(value)


def _as_result(outcome: Union[ValidityResult, bool], value: Any) -> ValidityResult:
    if isinstance(outcome, ValidityResult):
        return outcome
    if outcome is True:
        return ValidityResult.ok(value)
    if outcome is False:
        return ValidityResult.not_valid(f"{value!r} is not valid")
    raise TypeError(
        f"validity stage returned {type(outcome).__name__}, expected ValidityResult or bool"
    )


def _chain(first: Stage, second: Stage) -> Stage:
    def _stage(value: Any) -> ValidityResult:
        res = _as_result(first(value), value)
        if not res.valid:
            return res
        return _as_result(second(res.value), res.value)

    return _stage


@dataclass(frozen=True)
class ValidityProcessor:
    """Three-stage processor applied to every non-null candidate value."""

    pre: Stage = _unchanged
    is_valid: Stage = _unchanged
    post: Stage = _unchanged

    def __post_init__(self):
        for stage in ("pre", "is_valid", "post"):
            if not callable(getattr(self, stage)):
                raise TypeError(f"'{stage}' stage must be callable")

    # ------------ stages ------------------------------------------------ #

    @staticmethod
    def _run(stage: Stage, value: Any, step: SetValueStep) -> Any:
        try:
            res = _as_result(stage(value), value)
        except SetValueError:
            raise
        except Exception as e:
            raise SetValueError(e, step) from e
        if not res.valid:
            cause = res.error
            if not isinstance(cause, BaseException):
                cause = ValueError(cause or f"{value!r} is not valid")
            raise SetValueError(cause, step)
        return res.value

    def run_pre(self, value: Any) -> Any:
        return self._run(self.pre, value, SetValueStep.PRE_PROCESSING)

    def check(self, value: Any) -> Any:
        return self._run(self.is_valid, value, SetValueStep.VALIDITY_CHECK)

    def run_post(self, value: Any) -> Any:
        return self._run(self.post, value, SetValueStep.POST_PROCESSING)

    def __call__(self, value: Any) -> Any:
        """Run all three stages and return the value to store.

        Raises
        ------
        SetValueError
            When a stage rejects the candidate or raises.
        """
        return self.run_post(self.check(self.run_pre(value)))

    def then(self, other: "ValidityProcessor") -> "ValidityProcessor":
        """Chain ``other`` after this processor, stage by stage."""
        if other is None:
            raise TypeError("cannot chain a None validity processor")
        return ValidityProcessor(
            pre=_chain(self.pre, other.pre),
            is_valid=_chain(self.is_valid, other.is_valid),
            post=_chain(self.post, other.post),
        )


NO_CHANGE = ValidityProcessor()


# ------------------------------------------------------------------
# comparison factories
# ------------------------------------------------------------------

def _compare(test: Callable[[Any], bool], describe: str) -> ValidityProcessor:
    def _is_valid(value: Any) -> ValidityResult:
        try:
            passed = test(value)
        except TypeError as e:
            return ValidityResult.not_valid(e)
        if passed:
            return ValidityResult.ok(value)
        return ValidityResult.not_valid(f"{value!r} is not {describe}")

    return ValidityProcessor(is_valid=_is_valid)


def greater_than(limit: Any) -> ValidityProcessor:
    return _compare(lambda v: v > limit, f"greater than {limit!r}")


def greater_than_or_equal_to(limit: Any) -> ValidityProcessor:
    return _compare(lambda v: v >= limit, f"greater than or equal to {limit!r}")


def less_than(limit: Any) -> ValidityProcessor:
    return _compare(lambda v: v < limit, f"less than {limit!r}")


def less_than_or_equal_to(limit: Any) -> ValidityProcessor:
    return _compare(lambda v: v <= limit, f"less than or equal to {limit!r}")


def equal_to(other: Any) -> ValidityProcessor:
    return _compare(lambda v: v == other, f"equal to {other!r}")


def not_equal_to(other: Any) -> ValidityProcessor:
    return _compare(lambda v: v != other, f"different from {other!r}")


def in_range(low: Any, high: Any) -> ValidityProcessor:
    """Accept values in the closed interval ``[low, high]``."""
    if high < low:
        raise ValueError(f"empty range [{low!r}, {high!r}]")
    return _compare(lambda v: low <= v <= high, f"in the range [{low!r}, {high!r}]")


# ------------------------------------------------------------------
# choice factories
# ------------------------------------------------------------------

def _defined_bits(flag_type: type) -> int:
    return reduce(lambda acc, m: acc | m.value, flag_type, 0)


def _is_defined(value: Any) -> bool:
    if isinstance(value, Flag):
        return value.value & ~_defined_bits(type(value)) == 0
    if isinstance(value, Enum):
        return value in type(value)
    return False


def _is_zero(value: Any) -> bool:
    return (value.value if isinstance(value, Enum) else value) == 0


def is_defined() -> ValidityProcessor:
    """Reject values that are not (combinations of) declared members."""
    return _compare(_is_defined, "a defined member")


def not_zero() -> ValidityProcessor:
    return _compare(lambda v: not _is_zero(v), "non-zero")


def is_defined_and_not_zero() -> ValidityProcessor:
    return _compare(lambda v: _is_defined(v) and not _is_zero(v), "a defined non-zero member")


# ------------------------------------------------------------------
# string factories
# ------------------------------------------------------------------

def _trim(value: Any) -> ValidityResult:
    if not isinstance(value, str):
        return ValidityResult.not_valid(TypeError(f"cannot trim {type(value).__name__}"))
    return ValidityResult.ok(value.strip())


def _not_empty(value: Any) -> ValidityResult:
    if value == "":
        return ValidityResult.not_valid("value must not be empty")
    return ValidityResult.ok(value)


def _not_blank(value: Any) -> ValidityResult:
    if not isinstance(value, str) or not value.strip():
        return ValidityResult.not_valid("value must not be blank")
    return ValidityResult.ok(value)


def pre_trim() -> ValidityProcessor:
    return ValidityProcessor(pre=_trim)


def ensure_not_empty() -> ValidityProcessor:
    return ValidityProcessor(is_valid=_not_empty)


def ensure_not_blank() -> ValidityProcessor:
    return ValidityProcessor(is_valid=_not_blank)


def ensure_not_blank_and_post_trim() -> ValidityProcessor:
    return ValidityProcessor(is_valid=_not_blank, post=_trim)


def coalesce(processor: Optional[ValidityProcessor]) -> ValidityProcessor:
    """Return ``processor``; a ``None`` processor is a configuration error."""
    if processor is None:
        raise TypeError("validity processor must not be None")
    if not isinstance(processor, ValidityProcessor):
        raise TypeError(f"expected ValidityProcessor, got {type(processor).__name__}")
    return processor
