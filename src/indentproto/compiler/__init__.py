# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Translation pipeline for schema DSL files: scanning, type conversion, and emission."""

from indentproto.compiler.errors import LexerError, StructuralError, TranslationError, UnsupportedConstructError
from indentproto.compiler.pipeline import dump_tokens, translate, translate_text
from indentproto.compiler.scanner import Token, TokenKind, scan
from indentproto.compiler.translator import translate_tokens
from indentproto.compiler.types import BUILTIN_ALIASES, convert_oneof_type, convert_type, to_builtin

__all__ = [
    "BUILTIN_ALIASES",
    "LexerError",
    "StructuralError",
    "Token",
    "TokenKind",
    "TranslationError",
    "UnsupportedConstructError",
    "convert_oneof_type",
    "convert_type",
    "dump_tokens",
    "scan",
    "to_builtin",
    "translate",
    "translate_text",
    "translate_tokens",
]
