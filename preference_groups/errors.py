# =============================================================
#  preference_groups/errors.py
# =============================================================
"""Exception hierarchy shared by every module of the package."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "PreferenceError",
    "InvalidNameError",
    "SetValueStep",
    "SetValueError",
    "PreferenceNotFoundError",
    "DuplicateNameError",
    "ItemKindError",
    "PreferenceParseError",
]


class PreferenceError(Exception):
    """Base class for preference errors."""


class InvalidNameError(PreferenceError, ValueError):
    """Raised when a name is ``None``, empty or only white-space."""


class SetValueStep(str, Enum):
    """The step of a set operation that failed."""

    UNKNOWN = "unknown"
    PROCESSING_NAME = "processing_name"
    CONVERTING = "converting"
    PRE_PROCESSING = "pre_processing"
    VALIDITY_CHECK = "validity_check"
    POST_PROCESSING = "post_processing"
    SETTING_VALUE = "setting_value"


class SetValueError(PreferenceError, ValueError):
    """Raised when a value or default value cannot be set.

    The originating exception is available as :attr:`cause` (and is also
    chained as ``__cause__``) so callers can branch on its type.
    """

    def __init__(self, cause: BaseException, step: SetValueStep = SetValueStep.UNKNOWN):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
        self.step = SetValueStep(step)
        self.__cause__ = cause


class PreferenceNotFoundError(PreferenceError, KeyError):
    """Raised when a name is not present in a group or store."""

    def __str__(self) -> str:  # KeyError quotes its message otherwise
        return str(self.args[0]) if self.args else ""


class DuplicateNameError(PreferenceError, ValueError):
    """Raised when adding an item whose name is already taken."""


class ItemKindError(PreferenceError, TypeError):
    """Raised when a store item is read as the wrong kind."""


class PreferenceParseError(PreferenceError, ValueError):
    """Raised when persisted text cannot be parsed.

    Carries the 1-based ``lineno``/``colno`` of the offending character
    (both 0 when the decoder reported no position) and, when known, its
    0-based ``pos``.
    """

    def __init__(self, msg: str, lineno: int, colno: int, pos: Optional[int] = None):
        super().__init__(f"{msg}: line {lineno} column {colno}")
        self.msg = msg
        self.lineno = lineno
        self.colno = colno
        self.pos = pos
