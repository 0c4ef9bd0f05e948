#!/usr/bin/env python3
# =============================================================
#  examples/plugin_preferences.py
# =============================================================
"""
Example of a per-plugin preference store persisted as annotated JSON.

This example shows how to:
1. Build a store holding top-level preferences, a group and a nested store
2. Write it to disk with the generated comments
3. Pick up values edited by hand and report what changed
"""

import logging
from enum import Flag
from pathlib import Path
import tempfile

from preference_groups import PreferenceFile, PreferenceGroupBuilder, PreferenceStoreBuilder
from preference_groups import validity


class Days(Flag):
    Sunday = 1
    Monday = 2
    Tuesday = 4
    Wednesday = 8
    Thursday = 16
    Friday = 32
    Saturday = 64


def build_tree():
    server = (
        PreferenceGroupBuilder.create()
        .with_description("Network settings.")
        .add_uint16(
            "Port",
            lambda b: b.with_description("TCP port to listen on.")
            .with_allowed_values(80, 443, 8080)
            .with_default_value(8080)
            .with_validity_processor(validity.greater_than(0)),
        )
        .add_ip_address("Bind", lambda b: b.with_default_value("127.0.0.1"))
        .build()
    )
    backup = (
        PreferenceStoreBuilder.create()
        .add_enum(
            "Days",
            Days,
            lambda b: b.with_allowed_values(Days.Saturday, Days.Sunday)
            .allow_undefined_values()
            .with_value_and_as_default(Days.Sunday),
        )
        .add_string("Target", lambda b: b.with_validity_processor(validity.ensure_not_blank_and_post_trim()))
        .build()
    )
    return (
        PreferenceStoreBuilder.create()
        .add_boolean("Enabled", lambda b: b.with_value_and_as_default(True))
        .add_group("Server", server)
        .add_store("Backup", backup, "Backup plugin.")
        .build()
    )


def main():
    logging.basicConfig(level=logging.INFO)
    path = Path(tempfile.mkdtemp()) / "plugins.jsonc"
    pref_file = PreferenceFile(path)

    tree = build_tree()
    pref_file.update(tree)
    print(path.read_text())

    # Simulate the user editing the file by hand
    text = path.read_text().replace('"Port": null', '"Port": 443')
    path.write_text(text)

    tree = build_tree()
    print("Changed:", pref_file.update(tree))
    print("Port is now", tree.get_item_as_group("Server").get_value("Port"))


if __name__ == "__main__":
    main()
