# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for the indentation-based schema DSL.

Reads the source one character at a time and lazily yields tokens in
document order. The scanner is a finite-state machine: every state is a
generator that yields the tokens it recognizes and returns the next state.
"""

from __future__ import annotations

import enum
import io
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from typing import Any, TextIO

from indentproto.compiler.errors import LexerError

# ###############
# Public Interface
# ###############


class TokenKind(enum.Enum):
    """All token kinds produced by the scanner."""

    # Top-level declarations
    PACKAGE = "PACKAGE"
    OPTION = "OPTION"
    OPTION_VALUE = "OPTION_VALUE"

    # Block headers
    MESSAGE_START = "MESSAGE_START"
    ENUM_START = "ENUM_START"
    ONEOF_START = "ONEOF_START"

    # Field lines
    IDENTIFIER = "IDENTIFIER"
    FIELD_TYPE = "FIELD_TYPE"
    FIELD_NUM = "FIELD_NUM"
    FIELD_OPTION = "FIELD_OPTION"

    # Layout
    COMMENT = "COMMENT"
    WHITESPACE = "WHITESPACE"
    NEWLINE = "NEWLINE"

    # End of input
    END_OF_STREAM = "END_OF_STREAM"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        kind: The kind of token.
        text: The raw lexeme. For WHITESPACE its length is the indentation
            width; OPTION_VALUE keeps its double quotes; FIELD_OPTION holds the
            text between the brackets; COMMENT keeps its leading '#'.
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    kind: TokenKind
    text: str
    line: int
    column: int


def scan(source: str | TextIO) -> Iterator[Token]:
    """Lazily tokenize schema DSL source.

    The returned iterator is finite and not restartable. Its last token is
    always END_OF_STREAM.

    Args:
        source: The DSL text, or a text stream to read it from.

    Yields:
        Token objects in document order.

    Raises:
        LexerError: On the first character that the current scanner state
            cannot accept. Tokenization stops at that point.
    """
    stream = io.StringIO(source) if isinstance(source, str) else source
    return _Scanner(stream).run()


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenKind] = {
    "package": TokenKind.PACKAGE,
    "option": TokenKind.OPTION,
    "msg": TokenKind.MESSAGE_START,
    "enum": TokenKind.ENUM_START,
    "oneof": TokenKind.ONEOF_START,
}

_HEADER_NAMES: dict[TokenKind, str] = {
    TokenKind.PACKAGE: "package name",
    TokenKind.MESSAGE_START: "message name",
    TokenKind.ENUM_START: "enum name",
    TokenKind.ONEOF_START: "oneof name",
}

# Characters that end the meaningful part of a line.
_LINE_END = ("", "\n", "\r", "#")

_State = Callable[[], Generator[Token, None, Any]]


def _is_blank(ch: str) -> bool:
    return ch == " " or ch == "\t"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return _is_letter(ch) or _is_digit(ch)


def _is_dotted_char(ch: str) -> bool:
    return _is_ident_char(ch) or ch == "."


def _is_option_key_char(ch: str) -> bool:
    return _is_dotted_char(ch) or ch == "(" or ch == ")"


class _Scanner:
    """Internal scanner state machine."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._line = 1
        self._column = 1
        self._last = ""
        self._saved = (1, 1)
        self._pushback: str | None = None

    def run(self) -> Iterator[Token]:
        """Drive the state machine until input is exhausted."""
        state: _State | None = self._scan_line_start
        while state is not None:
            state = yield from state()
        yield Token(TokenKind.END_OF_STREAM, "", self._line, self._column)

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _read(self) -> str:
        """Consume one character and return it, or '' at end of input."""
        if self._pushback is not None:
            ch = self._pushback
            self._pushback = None
        else:
            ch = self._stream.read(1)
        self._last = ch
        self._saved = (self._line, self._column)
        if ch == "\n":
            self._line += 1
            self._column = 1
        elif ch:
            self._column += 1
        return ch

    def _unread(self) -> None:
        """Push the last character back. Only one character of pushback exists."""
        self._pushback = self._last
        self._line, self._column = self._saved

    def _peek(self) -> str:
        ch = self._read()
        self._unread()
        return ch

    def _read_while(self, ok: Callable[[str], bool]) -> str:
        chars: list[str] = []
        while True:
            ch = self._read()
            if not ch or not ok(ch):
                self._unread()
                return "".join(chars)
            chars.append(ch)

    def _skip_blanks(self) -> str:
        return self._read_while(_is_blank)

    def _skip_carriage_return(self) -> None:
        """Consume a '\\r' that belongs to a '\\r\\n' line ending."""
        if self._peek() != "\r":
            return
        line, col = self._line, self._column
        self._read()
        if self._peek() not in ("", "\n"):
            raise LexerError("Unexpected carriage return", line, col)

    def _expect_char(self, expected: str, message: str) -> None:
        line, col = self._line, self._column
        ch = self._read()
        if ch != expected:
            raise LexerError(f"{message}, got {ch!r}", line, col)

    def _read_identifier(self, what: str) -> str:
        line, col = self._line, self._column
        ch = self._peek()
        if not _is_letter(ch):
            raise LexerError(f"Expected {what}, got {ch!r}", line, col)
        return self._read_while(_is_ident_char)

    def _read_type_name(self) -> str:
        line, col = self._line, self._column
        ch = self._peek()
        if not (_is_letter(ch) or ch == "."):
            raise LexerError(f"Expected type name, got {ch!r}", line, col)
        return self._read_while(_is_dotted_char)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _scan_line_start(self) -> Generator[Token, None, _State | None]:
        """At column 1: blank line, comment, end of input, or a content line."""
        line, col = self._line, self._column
        ch = self._read()
        if not ch:
            return None
        if ch == "\n":
            yield Token(TokenKind.NEWLINE, "\n", line, col)
            return self._scan_line_start
        self._unread()
        if ch == "#":
            return self._scan_comment
        return self._scan_indented_line

    def _scan_indented_line(self) -> Generator[Token, None, _State | None]:
        """Leading indentation followed by a comment, a header, or a field name."""
        line, col = self._line, self._column
        indent = self._skip_blanks()
        self._skip_carriage_return()
        ch = self._peek()
        if not ch:
            return None
        if ch == "\n":
            # A whitespace-only line counts as a blank line.
            nl_line, nl_col = self._line, self._column
            self._read()
            yield Token(TokenKind.NEWLINE, "\n", nl_line, nl_col)
            return self._scan_line_start
        if indent:
            yield Token(TokenKind.WHITESPACE, indent, line, col)
        if ch == "#":
            return self._scan_comment

        line, col = self._line, self._column
        word = self._read_identifier("identifier")
        kind = _KEYWORDS.get(word)
        if kind is TokenKind.OPTION:
            return self._scan_option
        if kind is not None:
            self._skip_blanks()
            yield self._read_header_name(kind)
            return self._scan_line_end
        yield Token(TokenKind.IDENTIFIER, word, line, col)
        return self._scan_field_body

    def _read_header_name(self, kind: TokenKind) -> Token:
        line, col = self._line, self._column
        what = _HEADER_NAMES[kind]
        if kind is TokenKind.PACKAGE:
            if not _is_letter(self._peek()):
                raise LexerError(f"Expected {what}, got {self._peek()!r}", line, col)
            name = self._read_while(_is_dotted_char)
        else:
            name = self._read_identifier(what)
        return Token(kind, name, line, col)

    def _scan_option(self) -> Generator[Token, None, _State | None]:
        """File option: a dotted or parenthesized key followed by a quoted string."""
        self._skip_blanks()
        line, col = self._line, self._column
        key = self._read_while(_is_option_key_char)
        if not key:
            raise LexerError(f"Expected option name, got {self._peek()!r}", line, col)
        yield Token(TokenKind.OPTION, key, line, col)
        self._skip_blanks()
        yield self._read_string()
        return self._scan_line_end

    def _read_string(self) -> Token:
        """Read a double-quoted string, keeping the quotes and any escapes verbatim."""
        line, col = self._line, self._column
        self._expect_char('"', "Expected opening quote for option value")
        chars = ['"']
        while True:
            ch = self._read()
            if not ch or ch == "\n":
                raise LexerError("Unterminated string literal", line, col)
            chars.append(ch)
            if ch == "\\":
                escaped = self._read()
                if not escaped or escaped == "\n":
                    raise LexerError("Unterminated string literal", line, col)
                chars.append(escaped)
            elif ch == '"':
                return Token(TokenKind.OPTION_VALUE, "".join(chars), line, col)

    def _scan_field_body(self) -> Generator[Token, None, _State | None]:
        """Field type expression, or straight to the tag for an enum value line."""
        self._skip_blanks()
        ch = self._peek()
        if ch in _LINE_END:
            return self._scan_line_end
        if _is_digit(ch):
            return self._scan_field_num
        yield self._read_field_type()
        self._skip_blanks()
        return self._scan_field_num

    def _read_field_type(self) -> Token:
        """Read ``[]T``, ``map[K]V`` or a bare type name exactly as written."""
        line, col = self._line, self._column
        if self._peek() == "[":
            self._read()
            self._expect_char("]", "Expected ']' in repeated field type")
            text = "[]" + self._read_type_name()
        else:
            text = self._read_type_name()
            if text == "map" and self._peek() == "[":
                self._read()
                key = self._read_type_name()
                self._expect_char("]", "Expected ']' after map key type")
                value = self._read_type_name()
                text = f"map[{key}]{value}"
        ch = self._peek()
        if not (_is_blank(ch) or ch in _LINE_END):
            raise LexerError(f"Unexpected character in field type: {ch!r}", self._line, self._column)
        return Token(TokenKind.FIELD_TYPE, text, line, col)

    def _scan_field_num(self) -> Generator[Token, None, _State | None]:
        """Decimal field tag, optionally followed by a bracketed option."""
        ch = self._peek()
        if ch in _LINE_END:
            # Missing tag; reported by the translator as a structural error.
            return self._scan_line_end
        line, col = self._line, self._column
        digits = self._read_while(_is_digit)
        if not digits:
            raise LexerError(f"Expected field number, got {ch!r}", line, col)
        ch = self._peek()
        if not (_is_blank(ch) or ch in _LINE_END or ch == "["):
            raise LexerError(f"Unexpected character after field number: {ch!r}", self._line, self._column)
        yield Token(TokenKind.FIELD_NUM, digits, line, col)
        self._skip_blanks()
        if self._peek() == "[":
            return self._scan_field_option
        return self._scan_line_end

    def _scan_field_option(self) -> Generator[Token, None, _State | None]:
        """Everything between '[' and the next ']' on the same line."""
        line, col = self._line, self._column
        self._read()  # [
        chars: list[str] = []
        while True:
            ch = self._read()
            if not ch or ch == "\n":
                raise LexerError("Unterminated field option, expected ']'", line, col)
            if ch == "]":
                break
            chars.append(ch)
        yield Token(TokenKind.FIELD_OPTION, "".join(chars), line, col)
        return self._scan_line_end

    def _scan_comment(self) -> Generator[Token, None, _State | None]:
        """The rest of the physical line, verbatim, followed by its newline."""
        line, col = self._line, self._column
        chars: list[str] = []
        while True:
            ch = self._read()
            if not ch or ch == "\n":
                break
            chars.append(ch)
        yield Token(TokenKind.COMMENT, "".join(chars).rstrip("\r"), line, col)
        yield Token(TokenKind.NEWLINE, "\n", self._saved[0], self._saved[1])
        return self._scan_line_start

    def _scan_line_end(self) -> Generator[Token, None, _State | None]:
        """Trailing whitespace, then a comment, a newline, or end of input."""
        self._skip_blanks()
        self._skip_carriage_return()
        line, col = self._line, self._column
        ch = self._read()
        if ch == "#":
            self._unread()
            return self._scan_comment
        if ch == "\n" or not ch:
            yield Token(TokenKind.NEWLINE, "\n", line, col)
            return self._scan_line_start
        raise LexerError(f"Unexpected character at end of line: {ch!r}", line, col)
