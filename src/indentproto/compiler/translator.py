# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Streaming translator from DSL tokens to protobuf schema text.

Parsing and emission are fused: output is written as soon as each line is
recognized, and no syntax tree is built. Nesting is recovered from
indentation widths alone. Every open block has a frame on an explicit scope
stack. The first child line of a block fixes the block's indentation, and a
shallower line closes it.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from indentproto.compiler.errors import StructuralError, UnsupportedConstructError
from indentproto.compiler.scanner import Token, TokenKind
from indentproto.compiler.types import convert_oneof_type, convert_type, merge_aliases
from indentproto.config.settings import TranslatorConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Sink(Protocol):
    """Anything translated text can be appended to."""

    def write(self, text: str, /) -> object: ...


def translate_tokens(
    tokens: Iterable[Token],
    sink: Sink,
    config: TranslatorConfig | None = None,
) -> None:
    """Translate a token stream and write the schema text to *sink*.

    Tokens are pulled one at a time, with a single token of lookahead.
    Translation ends at the END_OF_STREAM token or when *tokens* runs out.

    Args:
        tokens: Tokens in document order, as produced by
            :func:`~indentproto.compiler.scanner.scan`.
        sink: Output target; only its ``write`` method is used.
        config: Output and grammar settings. Defaults to
            ``TranslatorConfig()``.

    Raises:
        LexerError: Propagated from the token source.
        StructuralError: If the tokens do not form a valid document.
        UnsupportedConstructError: If the grammar profile disables a
            construct that appears in the input.
    """
    _Translator(iter(tokens), sink, config or TranslatorConfig()).translate()


# ################
# Implementation
# ################


class _BlockKind(enum.Enum):
    MESSAGE = "message"
    ENUM = "enum"
    ONEOF = "oneof"


_BLOCK_HEADERS: dict[TokenKind, _BlockKind] = {
    TokenKind.MESSAGE_START: _BlockKind.MESSAGE,
    TokenKind.ENUM_START: _BlockKind.ENUM,
    TokenKind.ONEOF_START: _BlockKind.ONEOF,
}

_DESCRIPTIONS: dict[TokenKind, str] = {
    TokenKind.PACKAGE: "package declaration",
    TokenKind.OPTION: "option declaration",
    TokenKind.OPTION_VALUE: "option value",
    TokenKind.MESSAGE_START: "message declaration",
    TokenKind.ENUM_START: "enum declaration",
    TokenKind.ONEOF_START: "oneof declaration",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.FIELD_TYPE: "field type",
    TokenKind.FIELD_NUM: "field number",
    TokenKind.FIELD_OPTION: "field option",
    TokenKind.COMMENT: "comment",
    TokenKind.WHITESPACE: "indentation",
    TokenKind.NEWLINE: "end of line",
    TokenKind.END_OF_STREAM: "end of input",
}


def _describe(tok: Token) -> str:
    description = _DESCRIPTIONS[tok.kind]
    if tok.kind in (TokenKind.NEWLINE, TokenKind.END_OF_STREAM, TokenKind.WHITESPACE):
        return description
    return f"{description} {tok.text!r}"


def _comment_text(tok: Token) -> str:
    """Render a '#' comment as '//' with the '#' and one following space removed."""
    body = tok.text[1:] if tok.text.startswith("#") else tok.text
    if body.startswith(" "):
        body = body[1:]
    body = body.rstrip()
    return f"// {body}" if body else "//"


@dataclass
class _Scope:
    """An open block on the scope stack.

    ``indent`` stays None until the first non-comment child line is seen.
    """

    kind: _BlockKind
    name: str
    parent_indent: int
    indent: int | None = None


class _Translator:
    """Indentation-aware recursive translator over a token iterator."""

    def __init__(self, tokens: Iterator[Token], sink: Sink, config: TranslatorConfig) -> None:
        self._tokens = tokens
        self._sink = sink
        self._config = config
        self._aliases = merge_aliases(config.type_aliases)
        self._indent_unit = " " * config.indent_width
        self._lookahead: Token | None = None
        self._last: Token | None = None
        self._scopes: list[_Scope] = []
        self._pending_blank_lines = 0

    def translate(self) -> None:
        """Translate the whole stream."""
        if self._config.syntax is not None:
            self._write_line(0, f'syntax = "{self._config.syntax}";')
            # Leading blank lines of the input already separate the header.
            self._skip_blank_lines()
            self._pending_blank_lines = max(self._pending_blank_lines, 1)
        while not self._check(TokenKind.END_OF_STREAM):
            self._translate_top_level()
        self._flush_blank_lines()

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        """Return the lookahead token, pulling one from the stream if needed."""
        if self._lookahead is None:
            tok = next(self._tokens, None)
            if tok is None:
                line = self._last.line + 1 if self._last is not None else 1
                tok = Token(TokenKind.END_OF_STREAM, "", line, 1)
            self._lookahead = tok
        return self._lookahead

    def _advance(self) -> Token:
        """Consume and return the lookahead token. END_OF_STREAM is never consumed."""
        tok = self._peek()
        if tok.kind is not TokenKind.END_OF_STREAM:
            self._lookahead = None
        self._last = tok
        return tok

    def _check(self, *kinds: TokenKind) -> bool:
        return self._peek().kind in kinds

    def _expect(self, kind: TokenKind, what: str) -> Token:
        tok = self._peek()
        if tok.kind is not kind:
            raise StructuralError(f"Expected {what}, got {_describe(tok)}", tok.line, tok.column)
        return self._advance()

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def _write_line(self, depth: int, text: str, flush: bool = True) -> None:
        if flush:
            self._flush_blank_lines()
        self._sink.write(f"{self._indent_unit * depth}{text}\n")

    def _flush_blank_lines(self) -> None:
        if self._pending_blank_lines:
            self._sink.write("\n" * self._pending_blank_lines)
            self._pending_blank_lines = 0

    def _skip_blank_lines(self) -> None:
        # Held back so that blank lines before a dedent land after the closing brace.
        while self._check(TokenKind.NEWLINE):
            self._advance()
            self._pending_blank_lines += 1

    def _finish_line(self, depth: int, text: str) -> None:
        """Write *text* with any trailing comment, consuming the line's newline."""
        comment = self._advance() if self._check(TokenKind.COMMENT) else None
        self._expect(TokenKind.NEWLINE, "end of line")
        if comment is not None:
            text = f"{text} {_comment_text(comment)}"
        self._write_line(depth, text)

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def _translate_top_level(self) -> None:
        tok = self._peek()
        if tok.kind is TokenKind.NEWLINE:
            self._skip_blank_lines()
        elif tok.kind is TokenKind.COMMENT:
            self._advance()
            self._expect(TokenKind.NEWLINE, "end of line")
            self._write_line(0, _comment_text(tok))
        elif tok.kind is TokenKind.PACKAGE:
            self._advance()
            self._finish_line(0, f"package {tok.text};")
        elif tok.kind is TokenKind.OPTION:
            self._advance()
            value = self._peek()
            if value.kind is not TokenKind.OPTION_VALUE:
                raise StructuralError(
                    f"Expected value for option {tok.text!r}, got {_describe(value)}",
                    value.line,
                    value.column,
                )
            self._advance()
            self._finish_line(0, f"option {tok.text} = {value.text};")
        elif tok.kind is TokenKind.MESSAGE_START:
            self._parse_block(parent_indent=0)
        elif tok.kind is TokenKind.ENUM_START:
            if not self._config.grammar.enums:
                raise UnsupportedConstructError(
                    "Enum declarations are not supported by the grammar profile",
                    tok.line,
                    tok.column,
                )
            self._parse_block(parent_indent=0)
        elif tok.kind is TokenKind.ONEOF_START:
            raise StructuralError("oneof is only allowed inside a message", tok.line, tok.column)
        elif tok.kind is TokenKind.WHITESPACE:
            raise StructuralError("Unexpected indentation outside of a block", tok.line, tok.column)
        elif tok.kind is TokenKind.IDENTIFIER:
            raise StructuralError(f"Field {tok.text!r} is outside of a message", tok.line, tok.column)
        else:
            raise StructuralError(f"Unexpected {_describe(tok)}", tok.line, tok.column)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _parse_block(self, parent_indent: int) -> None:
        """Translate a block header and every child line indented below it."""
        header = self._advance()
        kind = _BLOCK_HEADERS[header.kind]
        depth = len(self._scopes)
        scope = _Scope(kind, header.text, parent_indent)
        self._scopes.append(scope)
        logger.debug("Opened %s %s at depth %d", kind.value, header.text, depth)

        self._finish_line(depth, f"{kind.value} {header.text} {{")
        while self._enter_child_line(scope):
            self._translate_child(scope, depth + 1)

        self._scopes.pop()
        self._write_line(depth, "}", flush=False)
        logger.debug("Closed %s %s", kind.value, header.text)

    def _enter_child_line(self, scope: _Scope) -> bool:
        """Consume the indentation of the next child line of *scope*.

        Returns False, consuming nothing but blank lines, when the next line
        does not belong to *scope*.
        """
        self._skip_blank_lines()
        tok = self._peek()
        if tok.kind is not TokenKind.WHITESPACE:
            return False
        width = len(tok.text)
        if scope.indent is None:
            if width <= scope.parent_indent:
                return False
        elif width < scope.indent:
            return False

        self._advance()
        if self._check(TokenKind.COMMENT):
            return True
        if scope.indent is None:
            scope.indent = width
        elif width > scope.indent:
            raise StructuralError(
                f"Unexpected indentation of {width} in {scope.kind.value} {scope.name!r}, "
                f"expected {scope.indent}",
                tok.line,
                tok.column,
            )
        return True

    def _translate_child(self, scope: _Scope, depth: int) -> None:
        tok = self._peek()
        if tok.kind is TokenKind.COMMENT:
            self._advance()
            self._expect(TokenKind.NEWLINE, "end of line")
            self._write_line(depth, _comment_text(tok))
        elif tok.kind is TokenKind.IDENTIFIER:
            if scope.kind is _BlockKind.ENUM:
                self._translate_enum_value(depth)
            else:
                self._translate_field(depth, in_oneof=scope.kind is _BlockKind.ONEOF)
        elif tok.kind in _BLOCK_HEADERS:
            self._check_nested_block(scope, tok)
            assert scope.indent is not None
            self._parse_block(parent_indent=scope.indent)
        elif tok.kind in (TokenKind.PACKAGE, TokenKind.OPTION):
            raise StructuralError(
                f"{_DESCRIPTIONS[tok.kind].capitalize()} is only allowed at top level",
                tok.line,
                tok.column,
            )
        else:
            raise StructuralError(
                f"Unexpected {_describe(tok)} in {scope.kind.value} {scope.name!r}",
                tok.line,
                tok.column,
            )

    def _check_nested_block(self, scope: _Scope, tok: Token) -> None:
        nested = _BLOCK_HEADERS[tok.kind]
        if scope.kind is not _BlockKind.MESSAGE:
            raise StructuralError(
                f"{scope.kind.value} {scope.name!r} cannot contain a nested {nested.value}",
                tok.line,
                tok.column,
            )
        grammar = self._config.grammar
        allowed = {
            _BlockKind.MESSAGE: grammar.nested_messages,
            _BlockKind.ENUM: grammar.enums,
            _BlockKind.ONEOF: grammar.oneofs,
        }[nested]
        if not allowed:
            raise UnsupportedConstructError(
                f"Nested {nested.value} declarations are not supported by the grammar profile",
                tok.line,
                tok.column,
            )

    # ------------------------------------------------------------------
    # Lines inside blocks
    # ------------------------------------------------------------------

    def _translate_field(self, depth: int, in_oneof: bool = False) -> None:
        """Field line: name, type and tag in that order, then option and comment."""
        name = self._advance()
        tok = self._peek()
        if tok.kind is TokenKind.FIELD_NUM:
            raise StructuralError(f"Missing field type for field {name.text!r}", tok.line, tok.column)
        field_type = self._expect(TokenKind.FIELD_TYPE, f"field type for field {name.text!r}")
        tok = self._peek()
        if tok.kind is not TokenKind.FIELD_NUM:
            raise StructuralError(f"Missing field tag for field {name.text!r}", tok.line, tok.column)
        tag = self._advance()

        try:
            if in_oneof:
                declared = convert_oneof_type(field_type.text, self._aliases)
            else:
                declared = convert_type(field_type.text, self._aliases)
        except ValueError as exc:
            raise StructuralError(str(exc), field_type.line, field_type.column) from exc

        text = f"{declared} {name.text} = {tag.text}"
        if self._check(TokenKind.FIELD_OPTION):
            text = f"{text} [{self._advance().text}]"
        self._finish_line(depth, f"{text};")

    def _translate_enum_value(self, depth: int) -> None:
        name = self._advance()
        tok = self._peek()
        if tok.kind is TokenKind.FIELD_TYPE:
            raise StructuralError(f"Enum value {name.text!r} cannot have a type", tok.line, tok.column)
        tag = self._expect(TokenKind.FIELD_NUM, f"number for enum value {name.text!r}")
        tok = self._peek()
        if tok.kind is TokenKind.FIELD_OPTION:
            raise StructuralError(f"Enum value {name.text!r} cannot have options", tok.line, tok.column)
        self._finish_line(depth, f"{name.text} = {tag.text};")
