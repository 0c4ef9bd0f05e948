# =============================================================
#  preference_groups/kinds.py
# =============================================================
"""The closed set of value kinds and the per-kind behaviour table.

Every preference carries a :class:`ValueKind`.  Behaviour that differs from
kind to kind (converting raw input, rendering the canonical literal, ordering
allowed values) lives in one :class:`KindSpec` per kind, so the preference
model itself stays generic.
"""

from __future__ import annotations

import base64
import json
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum, Flag
from functools import reduce
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any, Callable, Dict, Optional, Tuple, Type

__all__ = [
    "ValueKind",
    "KindSpec",
    "KIND_SPECS",
    "CHOICE_KINDS",
    "INTEGER_RANGES",
    "FLAGS_SEPARATOR",
    "spec_for",
    "kind_for_enum",
    "coerce",
    "text",
    "literal",
    "sort_key",
    "flag_text",
]

FLAGS_SEPARATOR = ", "
_FLAGS_SPLIT = re.compile(r"[,|]")

# largest finite IEEE-754 binary32 value
_SINGLE_MAX = 3.4028234663852886e38

_POSITIVE_INFINITY = {"∞", "+∞", "infinity", "+infinity", "inf", "+inf"}
_NEGATIVE_INFINITY = {"-∞", "-infinity", "-inf"}


class ValueKind(str, Enum):
    BOOLEAN = "boolean"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    BYTES = "bytes"
    IP_ADDRESS = "ip_address"
    ENUM = "enum"
    FLAGS = "flags"


CHOICE_KINDS = frozenset({ValueKind.ENUM, ValueKind.FLAGS})

INTEGER_RANGES: Dict[ValueKind, Tuple[int, int]] = {
    ValueKind.INT8: (-(2**7), 2**7 - 1),
    ValueKind.UINT8: (0, 2**8 - 1),
    ValueKind.INT16: (-(2**15), 2**15 - 1),
    ValueKind.UINT16: (0, 2**16 - 1),
    ValueKind.INT32: (-(2**31), 2**31 - 1),
    ValueKind.UINT32: (0, 2**32 - 1),
    ValueKind.INT64: (-(2**63), 2**63 - 1),
    ValueKind.UINT64: (0, 2**64 - 1),
}


# ---------- coercion ------------------------------------------------------ #

def _coerce_boolean(raw: Any, _enum_type: Optional[type]) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw != 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
        raise ValueError(f"invalid boolean: {raw!r}")
    raise TypeError(f"expected bool, got {type(raw).__name__}")


def _integer_coercer(kind: ValueKind) -> Callable[[Any, Optional[type]], int]:
    low, high = INTEGER_RANGES[kind]

    def _coerce(raw: Any, _enum_type: Optional[type]) -> int:
        if isinstance(raw, bool):
            raise TypeError("expected int, got bool")
        if isinstance(raw, int):
            val = raw
        elif isinstance(raw, (float, Decimal)):
            if not (math.isfinite(raw) and raw == int(raw)):
                raise ValueError(f"{raw!r} is not an integral number")
            val = int(raw)
        elif isinstance(raw, str):
            text = raw.strip()
            if text.lower().lstrip("+-").startswith("0x"):
                val = int(text, 16)
            else:
                val = int(text, 10)
        else:
            raise TypeError(f"expected int, got {type(raw).__name__}")
        if not low <= val <= high:
            raise OverflowError(
                f"{val} is outside the {kind.value} range [{low}, {high}]"
            )
        return val

    return _coerce


def _float_coercer(single: bool) -> Callable[[Any, Optional[type]], float]:
    def _coerce(raw: Any, _enum_type: Optional[type]) -> float:
        if isinstance(raw, bool):
            raise TypeError("expected a number, got bool")
        if isinstance(raw, (int, float, Decimal)):
            val = float(raw)
        elif isinstance(raw, str):
            text = raw.strip()
            folded = text.lower()
            if folded in _POSITIVE_INFINITY:
                val = math.inf
            elif folded in _NEGATIVE_INFINITY:
                val = -math.inf
            elif folded == "nan":
                val = math.nan
            else:
                val = float(text)
        else:
            raise TypeError(f"expected a number, got {type(raw).__name__}")
        if single and math.isfinite(val) and abs(val) > _SINGLE_MAX:
            raise OverflowError(f"{val!r} is outside the single precision range")
        return val

    return _coerce


def _coerce_decimal(raw: Any, _enum_type: Optional[type]) -> Decimal:
    if isinstance(raw, bool):
        raise TypeError("expected a number, got bool")
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        return Decimal(repr(raw))
    if isinstance(raw, str):
        try:
            return Decimal(raw.strip())
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal: {raw!r}") from e
    raise TypeError(f"expected a number, got {type(raw).__name__}")


def _coerce_string(raw: Any, _enum_type: Optional[type]) -> str:
    if isinstance(raw, str):
        return raw
    raise TypeError(f"expected str, got {type(raw).__name__}")


def _coerce_bytes(raw: Any, _enum_type: Optional[type]) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if isinstance(raw, str):
        return base64.b64decode(raw.strip(), validate=True)
    raise TypeError(f"expected bytes or base64 text, got {type(raw).__name__}")


def _coerce_ip_address(raw: Any, _enum_type: Optional[type]) -> IPv4Address | IPv6Address:
    if isinstance(raw, (IPv4Address, IPv6Address)):
        return raw
    if isinstance(raw, bool):
        raise TypeError("expected an address, got bool")
    if isinstance(raw, int):
        return ip_address(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if text.lower().startswith("0x"):
            return ip_address(int(text, 16))
        return ip_address(text)
    raise TypeError(f"expected an address, got {type(raw).__name__}")


def _member_by_name(enum_type: Type[Enum], name: str) -> Enum:
    members = enum_type.__members__
    if name in members:
        return members[name]
    folded = name.casefold()
    for key, member in members.items():
        if key.casefold() == folded:
            return member
    raise ValueError(f"{name!r} is not a member of {enum_type.__name__}")


def _require_enum_type(enum_type: Optional[type]) -> Type[Enum]:
    if enum_type is None or not issubclass(enum_type, Enum):
        raise TypeError("choice kinds need an Enum type")
    return enum_type


def _coerce_enum(raw: Any, enum_type: Optional[type]) -> Enum:
    enum_type = _require_enum_type(enum_type)
    if isinstance(raw, enum_type):
        return raw
    if isinstance(raw, Enum) or isinstance(raw, bool):
        raise TypeError(f"expected {enum_type.__name__}, got {type(raw).__name__}")
    if isinstance(raw, Decimal) and raw == int(raw):
        raw = int(raw)
    if isinstance(raw, int):
        return enum_type(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if text.lstrip("+-").isdigit():
            return enum_type(int(text))
        return _member_by_name(enum_type, text)
    raise TypeError(f"expected {enum_type.__name__}, got {type(raw).__name__}")


def _coerce_flags(raw: Any, enum_type: Optional[type]) -> Flag:
    enum_type = _require_enum_type(enum_type)
    if not isinstance(raw, str) or raw.strip().lstrip("+-").isdigit():
        return _coerce_enum(raw, enum_type)
    parts = [p.strip() for p in _FLAGS_SPLIT.split(raw) if p.strip()]
    if not parts:
        raise ValueError(f"no flag names in {raw!r}")
    bits = 0
    for part in parts:
        # unnamed bits are written as a plain number
        bits |= int(part) if part.isdigit() else _member_by_name(enum_type, part).value
    return enum_type(bits)


# ---------- text rendering ------------------------------------------------ #

# bare literals that are not valid JSON numbers
_NON_FINITE_TEXT = frozenset({"Infinity", "-Infinity", "NaN", "-NaN", "sNaN", "-sNaN"})


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def flag_text(value: Flag) -> str:
    """Return the constituent names of ``value`` joined by ``", "``.

    A value that is exactly one named member (an alias such as ``Weekend``
    included) renders as that single name.  Bits without a member name are
    appended as one decimal number.
    """
    name = value.name
    if name is not None and "|" not in name:
        return name
    members = list(value)
    names = [member.name for member in members]
    rest = value.value & ~reduce(lambda acc, m: acc | m.value, members, 0)
    if rest or not names:
        names.append(str(rest))
    return FLAGS_SEPARATOR.join(names)


def _text_boolean(value: bool) -> str:
    return "true" if value else "false"


def _text_float(value: float) -> str:
    if math.isfinite(value):
        return repr(value)
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def _text_bytes(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


# ---------- sort keys ----------------------------------------------------- #

def _enum_sort_key(value: Enum) -> Tuple[int, Any]:
    if isinstance(value.value, int) and not isinstance(value.value, bool):
        return (0, value.value)
    return (1, list(type(value)).index(value))


def _identity(value: Any) -> Any:
    return value


# ---------- table --------------------------------------------------------- #

@dataclass(frozen=True)
class KindSpec:
    """Kind-specific behaviour used by the generic preference model.

    ``text`` gives the plain string form of a value, ``quoted`` tells whether
    that form is written as a JSON string literal.
    """

    kind: ValueKind
    coerce: Callable[[Any, Optional[type]], Any]
    text: Callable[[Any], str]
    sort_key: Callable[[Any], Any]
    quoted: bool = False


KIND_SPECS: Dict[ValueKind, KindSpec] = {
    ValueKind.BOOLEAN: KindSpec(ValueKind.BOOLEAN, _coerce_boolean, _text_boolean, int),
    **{
        kind: KindSpec(kind, _integer_coercer(kind), str, _identity)
        for kind in INTEGER_RANGES
    },
    ValueKind.SINGLE: KindSpec(ValueKind.SINGLE, _float_coercer(True), _text_float, _identity),
    ValueKind.DOUBLE: KindSpec(ValueKind.DOUBLE, _float_coercer(False), _text_float, _identity),
    ValueKind.DECIMAL: KindSpec(ValueKind.DECIMAL, _coerce_decimal, str, _identity),
    ValueKind.STRING: KindSpec(ValueKind.STRING, _coerce_string, str, _identity, quoted=True),
    ValueKind.BYTES: KindSpec(ValueKind.BYTES, _coerce_bytes, _text_bytes, _identity, quoted=True),
    ValueKind.IP_ADDRESS: KindSpec(
        ValueKind.IP_ADDRESS,
        _coerce_ip_address,
        str,
        lambda v: (v.version, int(v)),
        quoted=True,
    ),
    ValueKind.ENUM: KindSpec(
        ValueKind.ENUM, _coerce_enum, lambda v: v.name, _enum_sort_key, quoted=True
    ),
    ValueKind.FLAGS: KindSpec(
        ValueKind.FLAGS, _coerce_flags, flag_text, lambda v: v.value, quoted=True
    ),
}


def spec_for(kind: ValueKind | str) -> KindSpec:
    return KIND_SPECS[ValueKind(kind)]


def kind_for_enum(enum_type: type) -> ValueKind:
    """Return ``FLAGS`` for :class:`enum.Flag` types and ``ENUM`` otherwise."""
    enum_type = _require_enum_type(enum_type)
    return ValueKind.FLAGS if issubclass(enum_type, Flag) else ValueKind.ENUM


def coerce(kind: ValueKind, raw: Any, enum_type: Optional[type] = None) -> Any:
    """Convert ``raw`` into a concrete value of ``kind`` (``None`` passes through)."""
    if raw is None:
        return None
    return KIND_SPECS[kind].coerce(raw, enum_type)


def text(kind: ValueKind, value: Any) -> Optional[str]:
    """Plain string form of ``value`` or ``None`` when it is null."""
    if value is None:
        return None
    return KIND_SPECS[kind].text(value)


def literal(kind: ValueKind, value: Any) -> str:
    """Canonical literal of ``value`` as written to a document; ``null`` for ``None``."""
    if value is None:
        return "null"
    spec = KIND_SPECS[kind]
    plain = spec.text(value)
    if spec.quoted or plain in _NON_FINITE_TEXT:
        return _quote(plain)
    return plain


def sort_key(kind: ValueKind) -> Callable[[Any], Any]:
    return KIND_SPECS[kind].sort_key
