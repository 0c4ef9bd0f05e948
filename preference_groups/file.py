# =============================================================
#  preference_groups/file.py
# =============================================================
"""File-backed persistence of preference trees.

```python
from preference_groups import PreferenceFile

pref_file = PreferenceFile("~/.my_app/settings.jsonc")
changed = pref_file.update(store)    # read -> reconcile -> write if needed
if changed:
    print("changed by the user:", changed)
```
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from . import jsonc, kinds
from .codec import write_to_string
from .errors import PreferenceParseError
from .group import PreferenceGroup
from .preference import Preference
from .reconcile import reconcile, update_from_string
from .settings import PreferenceFileSettings
from .store import PreferenceStore, StoreItemKind

__all__ = ["PreferenceFile", "to_plain_values"]

log = logging.getLogger(__name__)


# ---------- plain value export --------------------------------------------- #


def _plain(preference: Preference) -> Any:
    if preference.value is None:
        return None
    return json.loads(kinds.literal(preference.kind, preference.value))


def to_plain_values(tree: Any) -> Any:
    """Return the values of ``tree`` as plain ``dict``/``list``/scalars."""
    if isinstance(tree, Preference):
        return _plain(tree)
    if isinstance(tree, PreferenceGroup):
        return {pref.name: _plain(pref) for pref in tree}
    if isinstance(tree, PreferenceStore):
        out: Dict[str, Any] = {}
        for name, item in tree.items():
            if item.kind in (StoreItemKind.GROUP_ARRAY, StoreItemKind.STORE_ARRAY):
                out[name] = [to_plain_values(c) for c in item.payload]
            else:
                out[name] = to_plain_values(item.payload)
        return out
    if isinstance(tree, (list, tuple)):
        return [to_plain_values(t) for t in tree]
    raise TypeError(f"cannot export a {type(tree).__name__}")


def _drop_nulls(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _drop_nulls(v) for k, v in data.items() if v is not None}
    if isinstance(data, list):
        return [_drop_nulls(v) for v in data if v is not None]
    return data


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    return {"yml": "yaml", "yaml": "yaml", "toml": "toml"}.get(ext, "json")


def _dump_plain(data: Any, fmt: str) -> str:
    if fmt == "yaml":
        try:
            import yaml
        except ImportError as e:
            raise ImportError(
                "YAML support requires PyYAML. Install with 'pip install preference-groups[yaml]'"
            ) from e
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    if fmt == "toml":
        try:
            import tomli_w
        except ImportError as e:
            raise ImportError(
                "TOML write support requires tomli-w. Install with 'pip install preference-groups[toml]'"
            ) from e
        if not isinstance(data, dict):
            raise TypeError("a TOML document needs a group or store at the top level")
        return tomli_w.dumps(_drop_nulls(data))
    return jsonc.stringify(data)


# --------------------------------------------------------------------------- #
#                              PreferenceFile                                  #
# --------------------------------------------------------------------------- #


class PreferenceFile:
    """
    One annotated preference file on disk.

    Parameters
    ----------
    path : str | Path
        Location of the file; ``~`` is expanded.
    encoding, indent_char, indent_depth, write_on_parse_error : optional
        Override the matching :class:`PreferenceFileSettings` value.
    settings : PreferenceFileSettings, optional
        Defaults for the options above; read from the environment when
        omitted.
    """

    def __init__(
        self,
        path: Union[str, Path],
        *,
        encoding: Optional[str] = None,
        indent_char: Optional[str] = None,
        indent_depth: Optional[int] = None,
        write_on_parse_error: Optional[bool] = None,
        settings: Optional[PreferenceFileSettings] = None,
    ):
        if path is None or not str(path).strip():
            raise ValueError("path must not be empty")
        overrides = {
            k: v
            for k, v in {
                "encoding": encoding,
                "indent_char": indent_char,
                "indent_depth": indent_depth,
                "write_on_parse_error": write_on_parse_error,
            }.items()
            if v is not None
        }
        base = settings or PreferenceFileSettings()
        # overrides go through the same field constraints
        self.settings = PreferenceFileSettings.model_validate({**base.model_dump(), **overrides})
        self.path = Path(path).expanduser()

    @property
    def encoding(self) -> str:
        return self.settings.encoding

    @property
    def indent_char(self) -> str:
        return self.settings.indent_char

    @property
    def indent_depth(self) -> int:
        return self.settings.indent_depth

    # ------------ text helpers ------------------------------------------ #

    def write_to_string(self, tree: Any) -> str:
        return write_to_string(tree, self.indent_char, self.indent_depth)

    def update_from_string(self, tree: Any, text: Optional[str]) -> Optional[List[str]]:
        return update_from_string(tree, text, indent_char=self.indent_char, indent_depth=self.indent_depth)

    # ------------ disk -------------------------------------------------- #

    def _write_text(self, text: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding=self.encoding)
        log.info("Preferences written to %s", self.path)

    def read_as_string(self) -> str:
        """Return the file's text; raises :class:`FileNotFoundError` if missing."""
        return self.path.read_text(encoding=self.encoding)

    def read_as_tree(self) -> Any:
        """Parse the file into plain values (comments dropped)."""
        return jsonc.parse(self.read_as_string())

    def write(self, tree: Any):
        """Render ``tree`` and overwrite the file."""
        self._write_text(self.write_to_string(tree))

    def update(self, tree: Any, *, write_if_file_not_found: bool = True) -> Optional[List[str]]:
        """Reconcile the file into ``tree`` and rewrite it when needed.

        Returns
        -------
        list[str] | None
            The dotted paths of the preferences whose value was changed by
            the file, or ``None`` when no value changed.  The file is
            rewritten only when its text differs from the rendered tree.

        Raises
        ------
        PreferenceParseError
            The file is malformed and ``write_on_parse_error`` is off.
        """
        try:
            text = self.read_as_string()
        except FileNotFoundError:
            if not write_if_file_not_found:
                raise
            log.debug("%s does not exist yet; writing it", self.path)
            self.write(tree)
            return None

        try:
            result = reconcile(tree, text, indent_char=self.indent_char, indent_depth=self.indent_depth)
        except PreferenceParseError as e:
            if not self.settings.write_on_parse_error:
                raise
            log.warning("Could not parse %s (%s); rewriting it", self.path, e)
            self.write(tree)
            return None

        if result.text_changed:
            self._write_text(result.text)
        else:
            log.debug("%s is up to date", self.path)
        return list(result.changed) or None

    def save_as(self, path: Union[str, Path], tree: Any, file_format: Optional[str] = None) -> Path:
        """Export the plain values of ``tree`` (no comments) as JSON, YAML or TOML.

        The format is taken from ``file_format`` or the file suffix; TOML
        cannot express nulls, so null values are left out.
        """
        path = Path(path).expanduser()
        fmt = (file_format or _detect_format(path)).lower()
        text = _dump_plain(to_plain_values(tree), fmt)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding=self.encoding)
        log.info("Preferences exported to %s (%s)", path, fmt)
        return path
