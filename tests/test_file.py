import json
import tomllib

import pytest
import yaml

from preference_groups import (
    PreferenceFile,
    PreferenceFileSettings,
    PreferenceGroupBuilder,
    PreferenceParseError,
    PreferenceStoreBuilder,
)
from preference_groups.file import to_plain_values


def _group():
    return (
        PreferenceGroupBuilder.create()
        .add_int32("Number", lambda b: b.with_default_value(13))
        .add_string("String", lambda b: b.with_description("A string preference."))
        .build()
    )


def test_missing_file_is_written(tmp_path):
    path = tmp_path / "nested" / "prefs.jsonc"
    pf = PreferenceFile(path)
    assert pf.update(_group()) is None
    assert path.exists()
    assert pf.read_as_string() == pf.write_to_string(_group())


def test_missing_file_can_raise(tmp_path):
    pf = PreferenceFile(tmp_path / "absent.jsonc")
    with pytest.raises(FileNotFoundError):
        pf.update(_group(), write_if_file_not_found=False)


def test_user_edits_are_applied_and_file_rewritten(tmp_path):
    path = tmp_path / "prefs.jsonc"
    path.write_text('{"Number": 42}', encoding="utf-8")
    group = _group()
    pf = PreferenceFile(path)

    assert pf.update(group) == ["Number"]
    assert group.get_value("Number") == 42
    text = path.read_text(encoding="utf-8")
    assert "// Default value: 13." in text
    assert '"Number": 42' in text

    # second run: nothing to change, file left as is
    mtime = path.stat().st_mtime_ns
    assert pf.update(_group()) == ["Number"]
    assert pf.update(group) is None
    assert path.stat().st_mtime_ns == mtime


def test_parse_error_raises_by_default(tmp_path):
    path = tmp_path / "prefs.jsonc"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(PreferenceParseError):
        PreferenceFile(path).update(_group())
    assert path.read_text(encoding="utf-8") == "{ not json"


def test_parse_error_rewrites_when_enabled(tmp_path):
    path = tmp_path / "prefs.jsonc"
    path.write_text("{ not json", encoding="utf-8")
    pf = PreferenceFile(path, write_on_parse_error=True)
    assert pf.update(_group()) is None
    assert pf.read_as_tree() == {"Number": None, "String": None}
    assert "// Default value: 13." in pf.read_as_string()


def test_read_as_tree_drops_comments(tmp_path):
    pf = PreferenceFile(tmp_path / "prefs.jsonc")
    group = _group()
    group.set_value("String", "hi")
    pf.write(group)
    assert pf.read_as_tree() == {"Number": None, "String": "hi"}


def test_custom_indentation(tmp_path):
    pf = PreferenceFile(tmp_path / "prefs.jsonc", indent_char="\t", indent_depth=1)
    pf.write(_group())
    assert '\t"Number": null' in pf.read_as_string()


def test_settings_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("PREFERENCE_GROUPS_INDENT_DEPTH", "2")
    pf = PreferenceFile(tmp_path / "prefs.jsonc")
    assert pf.indent_depth == 2
    assert PreferenceFile(tmp_path / "prefs.jsonc", indent_depth=8).indent_depth == 8


def test_invalid_settings_are_rejected(tmp_path):
    with pytest.raises(ValueError):
        PreferenceFile(tmp_path / "prefs.jsonc", indent_char="ab")
    with pytest.raises(ValueError):
        PreferenceFile(tmp_path / "prefs.jsonc", encoding="no-such-codec")
    with pytest.raises(ValueError):
        PreferenceFile("  ")
    assert PreferenceFileSettings().encoding == "utf-8"


def _store():
    group = _group()
    group.set_value("Number", 1)
    return (
        PreferenceStoreBuilder.create()
        .add_boolean("Enabled", lambda b: b.with_value(True))
        .add_group("Main", group)
        .build()
    )


def test_plain_values():
    assert to_plain_values(_store()) == {"Enabled": True, "Main": {"Number": 1, "String": None}}


def test_save_as_yaml(tmp_path):
    out = PreferenceFile(tmp_path / "prefs.jsonc").save_as(tmp_path / "export.yaml", _store())
    assert yaml.safe_load(out.read_text(encoding="utf-8")) == {
        "Enabled": True,
        "Main": {"Number": 1, "String": None},
    }


def test_save_as_toml_drops_nulls(tmp_path):
    out = PreferenceFile(tmp_path / "prefs.jsonc").save_as(tmp_path / "export.toml", _store())
    assert tomllib.loads(out.read_text(encoding="utf-8")) == {"Enabled": True, "Main": {"Number": 1}}


def test_save_as_explicit_json(tmp_path):
    out = PreferenceFile(tmp_path / "prefs.jsonc").save_as(tmp_path / "export.txt", _store(), "json")
    assert json.loads(out.read_text(encoding="utf-8"))["Main"]["Number"] == 1
