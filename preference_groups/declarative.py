# =============================================================
#  preference_groups/declarative.py
#  Build preference groups from Pydantic models
# =============================================================
"""Declare preferences as fields of a Pydantic model.

Field metadata (description, default, ``ge``/``gt``/``le``/``lt``
constraints and the ``json_schema_extra`` overrides set by
:func:`PreferenceField`) is turned into one preference per field.

Basic usage
-----------
```python
from typing import Literal
from pydantic import BaseModel, Field
from preference_groups.declarative import PreferenceField, build_group_from, update_back

class ServerPrefs(BaseModel):
    port: int = Field(8080, ge=1, le=65535, description="TCP port.")
    mode: Literal["fast", "safe"] = PreferenceField("safe", name="Mode")

prefs = ServerPrefs()
group = build_group_from(prefs)          # "port", "Mode"
...                                      # reconcile the group with a file
prefs = update_back(prefs, group)        # new, validated ServerPrefs
```
"""

from __future__ import annotations

import inspect
import logging
import types
from decimal import Decimal
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, Field, IPvAnyAddress
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from . import validity
from .builders import PreferenceBuilder
from .group import PreferenceGroup, PreferenceGroupBuilder
from .kinds import CHOICE_KINDS, ValueKind, kind_for_enum

__all__ = ["PreferenceField", "build_group_from", "update_back", "preference_name"]

log = logging.getLogger(__name__)

_EXTRA_KEY = "preference"

# checked in order; bool before int
_KIND_BY_TYPE: Tuple[Tuple[type, ValueKind], ...] = (
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INT64),
    (float, ValueKind.DOUBLE),
    (Decimal, ValueKind.DECIMAL),
    (str, ValueKind.STRING),
    (bytes, ValueKind.BYTES),
    (IPv4Address, ValueKind.IP_ADDRESS),
    (IPv6Address, ValueKind.IP_ADDRESS),
    (IPvAnyAddress, ValueKind.IP_ADDRESS),
)

_CONSTRAINTS = {
    "gt": validity.greater_than,
    "ge": validity.greater_than_or_equal_to,
    "lt": validity.less_than,
    "le": validity.less_than_or_equal_to,
}


def PreferenceField(
    default: Any = PydanticUndefined,
    *,
    name: Optional[str] = None,
    kind: Optional[ValueKind | str] = None,
    allowed_values: Optional[Iterable[Any]] = None,
    allow_undefined_values: Optional[bool] = None,
    sort_allowed_values: Optional[bool] = None,
    **kwargs: Any,
) -> Any:
    """``pydantic.Field`` with preference overrides stored in ``json_schema_extra``."""
    extra: Dict[str, Any] = dict(kwargs.pop("json_schema_extra", None) or {})
    overrides = {
        "name": name,
        "kind": ValueKind(kind).value if kind is not None else None,
        "allowed_values": list(allowed_values) if allowed_values is not None else None,
        "allow_undefined_values": allow_undefined_values,
        "sort_allowed_values": sort_allowed_values,
    }
    extra[_EXTRA_KEY] = {k: v for k, v in overrides.items() if v is not None}
    return Field(default, json_schema_extra=extra, **kwargs)


# ---------- helpers --------------------------------------------------------- #


def _overrides(info: FieldInfo) -> Dict[str, Any]:
    extra = info.json_schema_extra
    if isinstance(extra, dict):
        return dict(extra.get(_EXTRA_KEY) or {})
    return {}


def preference_name(field_name: str, info: FieldInfo) -> str:
    """Name of the preference produced for a model field."""
    return _overrides(info).get("name") or field_name


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            raise TypeError(f"unsupported union annotation: {annotation!r}")
        return args[0]
    return annotation


def _resolve_kind(
    annotation: Any, override: Optional[str]
) -> Tuple[ValueKind, Optional[type], Optional[Tuple[Any, ...]]]:
    """Return ``(kind, enum_type, literal_values)`` for a field annotation."""
    annotation = _unwrap_optional(annotation)
    if get_origin(annotation) is Literal:
        values = get_args(annotation)
        if all(isinstance(v, str) for v in values):
            kind = ValueKind.STRING
        elif all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            kind = ValueKind.INT64
        else:
            raise TypeError(f"Literal values must all be str or all be int: {annotation!r}")
        return ValueKind(override) if override else kind, None, values

    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return kind_for_enum(annotation), annotation, None
    if override:
        return ValueKind(override), None, None
    if isinstance(annotation, type):
        for tp, kind in _KIND_BY_TYPE:
            if issubclass(annotation, tp):
                return kind, None, None
    raise TypeError(f"no preference kind for annotation {annotation!r}")


def _constraint_processor(info: FieldInfo) -> Optional[validity.ValidityProcessor]:
    processor = None
    for meta in info.metadata:
        for attr, factory in _CONSTRAINTS.items():
            if (val := getattr(meta, attr, None)) is not None:
                step = factory(val)
                processor = step if processor is None else processor.then(step)
    return processor


def _field_default(info: FieldInfo) -> Any:
    if info.is_required():
        return None
    val = info.get_default(call_default_factory=True)
    return None if val is PydanticUndefined else val


def _model_class(model: Any) -> Type[BaseModel]:
    cls = model if isinstance(model, type) else type(model)
    if not issubclass(cls, BaseModel):
        raise TypeError(f"expected a pydantic model, got {cls.__name__}")
    return cls


# ---------- producer -------------------------------------------------------- #


def build_group_from(model: Union[BaseModel, Type[BaseModel]]) -> PreferenceGroup:
    """Create one preference per field of ``model``.

    ``model`` may be an instance (its field values become the preference
    values) or a model class (values stay null).  The class docstring becomes
    the group description.

    Raises
    ------
    TypeError
        A field annotation has no matching preference kind.
    """
    cls = _model_class(model)
    doc = cls.__dict__.get("__doc__")
    builder = PreferenceGroupBuilder.create().with_description(inspect.cleandoc(doc) if doc else None)

    for field_name, info in cls.model_fields.items():
        meta = _overrides(info)
        kind, enum_type, literal_values = _resolve_kind(info.annotation, meta.get("kind"))
        if kind in CHOICE_KINDS and enum_type is None:
            raise TypeError(f"field '{field_name}' needs an Enum annotation for kind {kind.value}")

        pb = PreferenceBuilder.for_kind(kind, preference_name(field_name, info), enum_type)
        if info.description:
            pb = pb.with_description(info.description)

        allowed = meta.get("allowed_values", literal_values)
        if allowed is not None:
            pb = pb.with_allowed_values(list(allowed))
            if literal_values is not None:
                pb = pb.allow_only_defined_values()
        if meta.get("allow_undefined_values") is True:
            pb = pb.allow_undefined_values()
        elif meta.get("allow_undefined_values") is False:
            pb = pb.allow_only_defined_values()
        if meta.get("sort_allowed_values"):
            pb = pb.sort_allowed_values()

        processor = _constraint_processor(info)
        if processor is not None:
            pb = pb.with_validity_processor(processor)

        pb = pb.with_default_value(_field_default(info))
        if not isinstance(model, type):
            pb = pb.with_value(getattr(model, field_name))
        builder.add(pb.build())

    group = builder.build()
    log.debug("Built group from %s with %d preference(s)", cls.__name__, len(group))
    return group


def update_back(model: BaseModel, group: PreferenceGroup) -> BaseModel:
    """Return a new, validated copy of ``model`` holding the group's values.

    Fields without a matching preference keep their current value.
    """
    cls = _model_class(model)
    if isinstance(model, type):
        raise TypeError("update_back needs a model instance")
    data = model.model_dump(by_alias=True)
    updated: List[str] = []
    for field_name, info in cls.model_fields.items():
        name = preference_name(field_name, info)
        if not group.contains_name(name):
            continue
        data[info.alias or field_name] = group.get_value(name)
        updated.append(field_name)
    log.debug("Writing %d value(s) back to %s", len(updated), cls.__name__)
    return cls.model_validate(data)
