# =============================================================
#  preference_groups/settings.py
# =============================================================
"""Defaults for reading and writing preference files.

Values can be overridden through ``PREFERENCE_GROUPS_*`` environment
variables, e.g. ``PREFERENCE_GROUPS_INDENT_DEPTH=2``.
"""

from __future__ import annotations

import codecs

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["PreferenceFileSettings"]


class PreferenceFileSettings(BaseSettings):
    """Formatting and I/O options used by :class:`~preference_groups.file.PreferenceFile`."""

    indent_char: str = Field(
        default=" ",
        min_length=1,
        max_length=1,
        description="Character repeated for one indentation unit.",
    )
    indent_depth: int = Field(
        default=4,
        ge=0,
        description="Number of indent characters per nesting level.",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of preference files.",
    )
    write_on_parse_error: bool = Field(
        default=False,
        description="Rewrite a file from the live tree when it cannot be parsed.",
    )

    model_config = SettingsConfigDict(
        env_prefix="PREFERENCE_GROUPS_",
        extra="ignore",
        str_strip_whitespace=False,
    )

    @field_validator("encoding")
    @classmethod
    def check_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v!r}") from e
        return v
