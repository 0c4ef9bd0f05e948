import pytest

from preference_groups import (
    DuplicateNameError,
    ItemKindError,
    PreferenceBuilder,
    PreferenceGroup,
    PreferenceGroupBuilder,
    PreferenceNotFoundError,
    PreferenceStore,
    PreferenceStoreBuilder,
    StoreItem,
    StoreItemKind,
)


def _group():
    return (
        PreferenceGroupBuilder.create()
        .with_description("Server settings.")
        .add_uint16("Port", lambda b: b.with_value_and_as_default(8080))
        .add_string("Host", lambda b: b.with_default_value("localhost"))
        .build()
    )


class TestGroup:
    """Ordered name -> preference mapping."""

    def test_keeps_insertion_order(self):
        group = _group()
        assert group.names == ["Port", "Host"]
        assert [p.name for p in group] == ["Port", "Host"]
        assert len(group) == 2
        assert group.description == "Server settings."

    def test_duplicate_add_is_atomic(self):
        group = _group()
        extra = PreferenceBuilder.string("Extra").build()
        dup = PreferenceBuilder.string("Host").build()
        with pytest.raises(DuplicateNameError):
            group.add(extra, dup)
        assert "Extra" not in group
        with pytest.raises(TypeError):
            group.add(None)

    def test_update_or_add_replaces(self):
        group = _group()
        host = PreferenceBuilder.string("Host").with_value("example.org").build()
        group.update_or_add(host)
        assert group.get_value("Host") == "example.org"
        assert group.names == ["Port", "Host"]

    def test_remove_and_lookup(self):
        group = _group()
        assert group.remove("Host") is True
        assert group.remove("Host") is False
        with pytest.raises(PreferenceNotFoundError) as exc:
            group["Host"]
        assert "Host" in str(exc.value)
        with pytest.raises(KeyError):
            del group["Host"]

    def test_setitem_key_must_match(self):
        group = PreferenceGroup()
        with pytest.raises(ValueError):
            group["Other"] = PreferenceBuilder.string("Name").build()

    def test_values_helpers(self):
        group = _group()
        assert group.get_value_as("Port", int) == 8080
        assert group.try_get_value("Host", "fallback") == "fallback"
        assert group.try_get_value("Missing", 1) == 1
        group.set_values_to_default()
        assert group.get_value("Host") == "localhost"
        group.set_values_to_null()
        assert group.get_value("Port") is None
        assert group.get_default_value("Port") == 8080

    def test_configure_must_return_builder(self):
        with pytest.raises(TypeError):
            PreferenceGroupBuilder.create().add_string("S", lambda b: None)


class TestStore:
    """Nested stores, groups and arrays."""

    def _store(self):
        plugin = PreferenceStoreBuilder.create().add_int32("Port", lambda b: b.with_default_value(1)).build()
        return (
            PreferenceStoreBuilder.create()
            .with_description("Application.")
            .add_boolean("Enabled", lambda b: b.with_value_and_as_default(True))
            .add_group("Server", _group())
            .add_groups("Profiles", [_group(), _group()])
            .add_store("Plugin", plugin)
            .add_stores("Plugins", [plugin])
            .build()
        )

    def test_typed_access(self):
        store = self._store()
        assert store.names == ["Enabled", "Server", "Profiles", "Plugin", "Plugins"]
        assert store.get_value("Enabled") is True
        assert isinstance(store.get_item_as_group("Server"), PreferenceGroup)
        assert len(store.get_item_as_groups("Profiles")) == 2
        assert isinstance(store.get_item_as_store("Plugin"), PreferenceStore)
        assert store["Plugins"].kind is StoreItemKind.STORE_ARRAY

    def test_wrong_kind_raises(self):
        store = self._store()
        with pytest.raises(ItemKindError):
            store.get_item_as_group("Enabled")
        with pytest.raises(ItemKindError):
            store.get_value("Server")
        assert store["Server"].try_as_store() is None

    def test_duplicate_and_missing(self):
        store = self._store()
        with pytest.raises(DuplicateNameError):
            store.add("Server", _group())
        with pytest.raises(PreferenceNotFoundError):
            store["Missing"]
        with pytest.raises(ValueError):
            store.add("Other", PreferenceBuilder.string("Name").build())

    def test_recursive_defaults_and_null(self):
        store = self._store()
        store.set_values_to_default()
        assert store.get_item_as_group("Server").get_value("Host") == "localhost"
        assert store.get_item_as_store("Plugin").get_value("Port") == 1
        store.set_values_to_null()
        assert store.get_value("Enabled") is None
        assert store.get_item_as_groups("Profiles")[1].get_value("Port") is None

    def test_store_item_inference(self):
        assert StoreItem.of([_group()]).kind is StoreItemKind.GROUP_ARRAY
        assert StoreItem.of(PreferenceStore()).kind is StoreItemKind.STORE
        with pytest.raises(TypeError):
            StoreItem.of([])
        with pytest.raises(TypeError):
            StoreItem.of("text")
        empty = StoreItem(StoreItemKind.GROUP_ARRAY, [])
        assert empty.payload == ()
