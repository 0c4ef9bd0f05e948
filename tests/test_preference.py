from decimal import Decimal
from enum import Enum, Flag

import pytest

from preference_groups import (
    Preference,
    PreferenceBuilder,
    SetValueError,
    SetValueStep,
    ValueKind,
    build,
)
from preference_groups import validity


class Color(Enum):
    Red = 1
    Green = 2
    Blue = 3


class Days(Flag):
    Sunday = 1
    Monday = 2
    Tuesday = 4
    Friday = 32


def test_fresh_preference_is_null():
    pref = PreferenceBuilder.int32("Number").build()
    assert pref.value is None
    assert pref.default_value is None
    assert pref.value_is_null and pref.default_value_is_null
    pref.set_value_to_default()
    assert pref.value is None


def test_value_and_default():
    pref = PreferenceBuilder.int32("Number").with_default_value(13).build()
    assert pref.value is None
    pref.set_value_to_default()
    assert pref.value == 13
    pref.set_value_to_null()
    assert pref.value is None
    pref.value = "0x20"
    assert pref.get_value_as(int) == 32
    assert pref.get_value_as_string() == "32"


def test_name_is_trimmed_and_validated():
    assert PreferenceBuilder.string("  Name ").build().name == "Name"
    with pytest.raises(SetValueError) as exc:
        PreferenceBuilder.string("   ").build()
    assert exc.value.step is SetValueStep.PROCESSING_NAME


def test_conversion_failure_keeps_value():
    pref = PreferenceBuilder.int32("Number").with_value(1).build()
    with pytest.raises(SetValueError) as exc:
        pref.set_value("abc")
    assert exc.value.step is SetValueStep.CONVERTING
    assert isinstance(exc.value.cause, ValueError)
    assert pref.value == 1
    assert not pref.is_value_valid("abc")


def test_allowed_values_are_deduplicated():
    pref = PreferenceBuilder.boolean("Flag").with_allowed_values([True, False, True]).build()
    assert pref.allowed_values == (True, False)


def test_sorting_allowed_values():
    ints = PreferenceBuilder.int32("I").with_allowed_values_and_sort(3, 1, 2).build()
    assert ints.allowed_values == (1, 2, 3)
    strings = PreferenceBuilder.string("S").with_allowed_values_and_sort("b", "c", "a").build()
    assert strings.allowed_values == ("a", "b", "c")
    unsorted = PreferenceBuilder.string("U").with_allowed_values("b", "a").build()
    assert unsorted.allowed_values == ("b", "a")


def test_undefined_values_forced_without_allowed_set():
    pref = PreferenceBuilder.string("S").allow_only_defined_values().build()
    assert pref.allow_undefined_values is True
    pref.set_value("anything")


def test_only_defined_values():
    pref = (
        PreferenceBuilder.string("Mode")
        .with_allowed_values("fast", "safe")
        .allow_only_defined_values()
        .build()
    )
    pref.set_value("fast")
    with pytest.raises(SetValueError) as exc:
        pref.set_value("slow")
    assert exc.value.step is SetValueStep.VALIDITY_CHECK
    assert pref.value == "fast"


def test_members_skip_validity_check():
    pref = (
        PreferenceBuilder.int32("Level")
        .with_allowed_values(0)
        .with_validity_processor(validity.greater_than(0))
        .build()
    )
    pref.set_value(0)
    pref.set_value(5)
    with pytest.raises(SetValueError):
        pref.set_value(-1)


def test_processor_transforms_value():
    pref = PreferenceBuilder.string("Text").with_validity_processor(validity.ensure_not_blank_and_post_trim()).build()
    pref.set_value("  hello ")
    assert pref.value == "hello"
    with pytest.raises(SetValueError):
        pref.set_value("  ")


def test_none_processor_raises():
    with pytest.raises(TypeError):
        PreferenceBuilder.string("S").with_validity_processor(None)


def test_enum_defaults_to_all_members():
    pref = PreferenceBuilder.enum("Color", Color).build()
    assert pref.allowed_values == (Color.Red, Color.Green, Color.Blue)
    assert pref.allow_undefined_values is False
    assert pref.is_choice_type
    pref.set_value("blue")
    assert pref.value is Color.Blue
    assert pref.get_allowed_values_as_strings() == ["Red", "Green", "Blue"]


def test_flags_combination_outside_suggested_values():
    pref = (
        PreferenceBuilder.enum("Days", Days)
        .with_allowed_values(Days.Sunday, Days.Monday)
        .allow_undefined_values()
        .build()
    )
    assert pref.has_combinable_flags
    pref.set_value(Days.Monday | Days.Friday)
    assert pref.get_value_as_string() == "Monday, Friday"


def test_flags_membership_by_bits():
    pref = (
        PreferenceBuilder.enum("Days", Days)
        .with_allowed_values(Days.Sunday, Days.Monday)
        .build()
    )
    pref.set_value("Sunday, Monday")
    with pytest.raises(SetValueError):
        pref.set_value(Days.Friday)


def test_choice_kind_needs_enum_type():
    with pytest.raises(TypeError):
        Preference("Color", ValueKind.ENUM)
    with pytest.raises(TypeError):
        Preference("Color", ValueKind.STRING, enum_type=Color)


def test_get_value_as_type_mismatch():
    pref = build(ValueKind.STRING, "Name", "x")
    assert pref.get_value_as(str) == "x"
    with pytest.raises(TypeError):
        pref.get_value_as(int)
    assert build(Color, "C", "Red").value is Color.Red


class Week(Flag):
    NoDay = 0
    Sunday = 1
    Saturday = 2
    Monday = 4
    Weekend = Sunday | Saturday


class Size(Enum):
    Small = 1
    Large = 2
    S = 1


def test_choice_defaults_include_zero_and_alias_members():
    pref = PreferenceBuilder.enum("Week", Week).build()
    assert pref.allowed_values == (Week.NoDay, Week.Sunday, Week.Saturday, Week.Monday, Week.Weekend)
    pref.set_value(Week.NoDay)
    assert pref.value is Week.NoDay
    pref.set_value("Weekend")
    assert pref.get_value_as_string() == "Weekend"

    sizes = PreferenceBuilder.enum("Size", Size).build()
    assert sizes.allowed_values == (Size.Small, Size.Large)


def test_choice_without_allowed_values_stays_unconstrained():
    pref = PreferenceBuilder.enum("Color", Color).with_no_allowed_values().allow_undefined_values().build()
    assert pref.allowed_values is None
    assert pref.allow_undefined_values is True
    pref.set_value(Color.Green)


# ---------- properties shared by every kind ------------------------------- #

SAMPLES = {
    ValueKind.BOOLEAN: (True, False),
    ValueKind.INT8: (1, 2),
    ValueKind.UINT8: (1, 2),
    ValueKind.INT16: (1, 2),
    ValueKind.UINT16: (1, 2),
    ValueKind.INT32: (1, 2),
    ValueKind.UINT32: (1, 2),
    ValueKind.INT64: (1, 2),
    ValueKind.UINT64: (1, 2),
    ValueKind.SINGLE: (1.5, 2.5),
    ValueKind.DOUBLE: (1.5, 2.5),
    ValueKind.DECIMAL: (Decimal("1.5"), Decimal("2.5")),
    ValueKind.STRING: ("a", "b"),
    ValueKind.BYTES: (b"a", b"b"),
    ValueKind.IP_ADDRESS: ("10.0.0.1", "10.0.0.2"),
    ValueKind.ENUM: (Color.Red, Color.Green),
    ValueKind.FLAGS: (Days.Sunday, Days.Friday),
}
ENUM_TYPES = {ValueKind.ENUM: Color, ValueKind.FLAGS: Days}


def _builder(kind):
    return PreferenceBuilder.for_kind(kind, "P", ENUM_TYPES.get(kind))


def test_samples_cover_every_kind():
    assert set(SAMPLES) == set(ValueKind)


@pytest.mark.parametrize("kind", list(ValueKind))
def test_fresh_build_is_null_for_every_kind(kind):
    pref = _builder(kind).build()
    assert pref.value is None and pref.default_value is None
    pref.set_value_to_default()
    assert pref.value is None


@pytest.mark.parametrize("kind", list(ValueKind))
@pytest.mark.parametrize("allowed", [None, []])
def test_missing_allowed_set_forces_undefined_values(kind, allowed):
    pref = Preference(
        "P",
        kind,
        enum_type=ENUM_TYPES.get(kind),
        allowed_values=allowed,
        allow_undefined_values=False,
    )
    assert pref.allow_undefined_values is True


@pytest.mark.parametrize("kind", list(ValueKind))
def test_membership_for_every_kind(kind):
    member, outsider = SAMPLES[kind]
    builder = _builder(kind).with_allowed_values(member).allow_only_defined_values()
    assert builder.with_value(member).build().value is not None
    with pytest.raises(SetValueError) as exc:
        builder.with_value(outsider).build()
    assert exc.value.step is SetValueStep.VALIDITY_CHECK
