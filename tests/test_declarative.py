from enum import Enum
from typing import Literal, Optional

import pytest
from pydantic import BaseModel, Field

from preference_groups import PreferenceGroupBuilder, SetValueError, ValueKind, update_from_string
from preference_groups.declarative import PreferenceField, build_group_from, update_back


class Level(Enum):
    Low = 1
    High = 2


class ServerPrefs(BaseModel):
    """Server preferences."""

    port: int = Field(8080, ge=1, le=65535, description="TCP port.")
    mode: Literal["fast", "safe"] = PreferenceField("safe", name="Mode")
    level: Level = Level.Low
    ratio: Optional[float] = None


def test_fields_become_preferences():
    group = build_group_from(ServerPrefs())
    assert group.description == "Server preferences."
    assert group.names == ["port", "Mode", "level", "ratio"]

    port = group["port"]
    assert port.kind is ValueKind.INT64
    assert port.description == "TCP port."
    assert port.value == 8080 and port.default_value == 8080

    mode = group["Mode"]
    assert mode.allowed_values == ("fast", "safe")
    assert mode.allow_undefined_values is False

    assert group["level"].value is Level.Low
    assert group["ratio"].kind is ValueKind.DOUBLE


def test_field_constraints_are_enforced():
    group = build_group_from(ServerPrefs)
    assert group.get_value("port") is None
    with pytest.raises(SetValueError):
        group.set_value("port", 0)
    with pytest.raises(SetValueError):
        group.set_value("Mode", "slow")


def test_update_back_round_trip():
    prefs = ServerPrefs()
    group = build_group_from(prefs)
    update_from_string(group, '{"port": 9000, "Mode": "fast", "level": "high"}')
    updated = update_back(prefs, group)
    assert updated.port == 9000
    assert updated.mode == "fast"
    assert updated.level is Level.High
    assert prefs.port == 8080


def test_builder_shortcut():
    group = PreferenceGroupBuilder.build_from(ServerPrefs)
    assert "Mode" in group


def test_unsupported_annotation():
    class Bad(BaseModel):
        items: list = []

    with pytest.raises(TypeError):
        build_group_from(Bad)
