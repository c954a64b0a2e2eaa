# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Translator configuration model and its YAML loader."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".indentproto.yaml"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class GrammarProfile(BaseModel):
    """Which block constructs the translator accepts."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    nested_messages: bool = Field(alias="nested-messages", default=True)
    enums: bool = True
    oneofs: bool = True


class TranslatorConfig(BaseModel):
    """Settings that shape the generated schema text.

    Attributes:
        indent_width: Spaces written per nesting depth.
        syntax: When set, a ``syntax = "<value>";`` header is written first.
        type_aliases: Extra DSL-to-protobuf type names, merged over the
            builtin alias table.
        grammar: The grammar profile.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    indent_width: int = Field(alias="indent-width", default=2, ge=1)
    syntax: str | None = None
    type_aliases: dict[str, str] = Field(alias="type-aliases", default_factory=dict)
    grammar: GrammarProfile = Field(default_factory=GrammarProfile)


def load_config(path: Path) -> TranslatorConfig:
    """Load and validate a configuration file.

    An empty file yields the default configuration.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A validated TranslatorConfig instance.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    return parse_config(text, source_label=str(path))


def parse_config(text: str, source_label: str = "<string>") -> TranslatorConfig:
    """Parse configuration YAML text into a TranslatorConfig.

    Raises:
        ConfigError: If the YAML is invalid or does not match the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: config must be a YAML mapping")

    try:
        return TranslatorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {source_label}: {exc}") from exc


def find_config(input_path: Path) -> Path | None:
    """Return the configuration file next to *input_path*, if there is one."""
    candidate = input_path.parent / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None
