# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of DSL field types into protobuf declaration types."""

from __future__ import annotations

from collections.abc import Mapping

# ###############
# Public Interface
# ###############

BUILTIN_ALIASES: Mapping[str, str] = {"str": "string"}


def to_builtin(name: str, aliases: Mapping[str, str] | None = None) -> str:
    """Map a DSL type name to its protobuf name.

    Names missing from the alias table, including user message and enum
    names, are returned unchanged.
    """
    table = BUILTIN_ALIASES if aliases is None else aliases
    return table.get(name, name)


def convert_type(raw: str, aliases: Mapping[str, str] | None = None) -> str:
    """Convert a raw DSL field type into a labelled protobuf field type.

    ``map[K]V`` becomes ``map<K, V>``, ``[]T`` becomes ``repeated T`` and any
    other name ``T`` becomes ``optional T``. Element, key and value types go
    through :func:`to_builtin`.

    Args:
        raw: The field type exactly as written in the DSL.
        aliases: Alias table to use instead of :data:`BUILTIN_ALIASES`.

    Returns:
        The declaration type text.

    Raises:
        ValueError: If *raw* is not a well-formed field type.
    """
    if raw.startswith("map["):
        key, value = _split_map(raw)
        return f"map<{to_builtin(key, aliases)}, {to_builtin(value, aliases)}>"
    if raw.startswith("[]"):
        return f"repeated {to_builtin(_require_name(raw[2:], raw), aliases)}"
    return f"optional {to_builtin(_require_name(raw, raw), aliases)}"


def convert_oneof_type(raw: str, aliases: Mapping[str, str] | None = None) -> str:
    """Convert the type of a oneof member, which takes no label.

    Raises:
        ValueError: If *raw* is malformed, repeated, or a map.
    """
    if raw.startswith("map[") or raw.startswith("[]"):
        raise ValueError(f"oneof members cannot be repeated or maps: {raw!r}")
    return to_builtin(_require_name(raw, raw), aliases)


def merge_aliases(extra: Mapping[str, str]) -> dict[str, str]:
    """Return the builtin alias table overlaid with *extra*."""
    return {**BUILTIN_ALIASES, **extra}


# ################
# Implementation
# ################


def _split_map(raw: str) -> tuple[str, str]:
    close = raw.find("]", len("map["))
    if close == -1:
        raise ValueError(f"Unclosed map key type: {raw!r}")
    key = _require_name(raw[len("map[") : close], raw)
    value = _require_name(raw[close + 1 :], raw)
    return key, value


def _require_name(name: str, raw: str) -> str:
    if not name or "[" in name or "]" in name:
        raise ValueError(f"Malformed field type: {raw!r}")
    return name
