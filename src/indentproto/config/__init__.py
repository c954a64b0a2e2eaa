# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration for IndentProto."""

from indentproto.config.settings import (
    CONFIG_FILE_NAME,
    ConfigError,
    GrammarProfile,
    TranslatorConfig,
    find_config,
    load_config,
    parse_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "GrammarProfile",
    "TranslatorConfig",
    "find_config",
    "load_config",
    "parse_config",
]
