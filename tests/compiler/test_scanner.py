# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the schema DSL scanner."""

import io

import pytest

from indentproto.compiler.errors import LexerError
from indentproto.compiler.scanner import Token, TokenKind, scan

# ###############
# Test Helpers
# ###############


def _tokens(source: str) -> list[Token]:
    """Return all tokens including the terminal END_OF_STREAM."""
    return list(scan(source))


def _tokens_no_eos(source: str) -> list[Token]:
    """Return all tokens except the terminal END_OF_STREAM token."""
    result = _tokens(source)
    assert result[-1].kind == TokenKind.END_OF_STREAM
    return result[:-1]


def _kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in _tokens_no_eos(source)]


def _texts(source: str) -> list[str]:
    return [tok.text for tok in _tokens_no_eos(source)]


K = TokenKind


# ###############
# End of Stream
# ###############


class TestEndOfStream:
    def test_empty_input_produces_only_end_of_stream(self) -> None:
        tokens = _tokens("")
        assert len(tokens) == 1
        assert tokens[0].kind == K.END_OF_STREAM
        assert tokens[0].text == ""

    def test_end_of_stream_is_last_and_unique(self) -> None:
        tokens = _tokens("package a\nmsg B\n")
        assert [t.kind for t in tokens].count(K.END_OF_STREAM) == 1
        assert tokens[-1].kind == K.END_OF_STREAM

    def test_missing_final_newline_still_terminates_line(self) -> None:
        assert _kinds("package a") == [K.PACKAGE, K.NEWLINE]

    def test_scan_is_lazy(self) -> None:
        # The second line is malformed, but the first token is available first.
        tokens = scan("package a\n  foo st-r 1\n")
        first = next(tokens)
        assert first.kind == K.PACKAGE
        with pytest.raises(LexerError):
            list(tokens)

    def test_scan_accepts_text_stream(self) -> None:
        tokens = list(scan(io.StringIO("package a\n")))
        assert [t.kind for t in tokens] == [K.PACKAGE, K.NEWLINE, K.END_OF_STREAM]


# ###############
# Blank Lines and Comments
# ###############


class TestLayout:
    def test_blank_line_is_newline(self) -> None:
        assert _kinds("\n\n") == [K.NEWLINE, K.NEWLINE]

    def test_whitespace_only_line_is_blank(self) -> None:
        assert _kinds("msg A\n   \n") == [K.MESSAGE_START, K.NEWLINE, K.NEWLINE]

    def test_comment_line_keeps_hash(self) -> None:
        tokens = _tokens_no_eos("# hello world\n")
        assert [t.kind for t in tokens] == [K.COMMENT, K.NEWLINE]
        assert tokens[0].text == "# hello world"

    def test_indented_comment_has_whitespace_first(self) -> None:
        tokens = _tokens_no_eos("    # note\n")
        assert [t.kind for t in tokens] == [K.WHITESPACE, K.COMMENT, K.NEWLINE]
        assert tokens[0].text == "    "
        assert tokens[1].text == "# note"

    def test_comment_without_final_newline(self) -> None:
        assert _kinds("# end") == [K.COMMENT, K.NEWLINE]

    def test_crlf_line_endings(self) -> None:
        assert _kinds("package a\r\nmsg B\r\n") == [K.PACKAGE, K.NEWLINE, K.MESSAGE_START, K.NEWLINE]
        assert _texts("package a\r\n")[0] == "a"

    def test_crlf_comment_strips_carriage_return(self) -> None:
        assert _texts("# hi\r\n")[0] == "# hi"

    def test_tab_indentation_width_counts_characters(self) -> None:
        tokens = _tokens_no_eos("\t\tfoo str 1\n")
        assert tokens[0].kind == K.WHITESPACE
        assert len(tokens[0].text) == 2


# ###############
# Declarations
# ###############


class TestDeclarations:
    def test_package(self) -> None:
        tokens = _tokens_no_eos("package example\n")
        assert tokens[0].kind == K.PACKAGE
        assert tokens[0].text == "example"

    def test_dotted_package(self) -> None:
        assert _texts("package com.example.v1\n")[0] == "com.example.v1"

    def test_option_key_and_value(self) -> None:
        tokens = _tokens_no_eos('option go_package "example.com/pb"\n')
        assert [t.kind for t in tokens] == [K.OPTION, K.OPTION_VALUE, K.NEWLINE]
        assert tokens[0].text == "go_package"
        assert tokens[1].text == '"example.com/pb"'

    def test_option_parenthesized_dotted_key(self) -> None:
        assert _texts('option (my.ext).field "x"\n')[0] == "(my.ext).field"

    def test_option_value_keeps_escapes(self) -> None:
        assert _texts('option note "say \\"hi\\""\n')[1] == '"say \\"hi\\""'

    @pytest.mark.parametrize(
        ("source", "expected_kind"),
        [
            ("msg Order\n", K.MESSAGE_START),
            ("enum Status\n", K.ENUM_START),
            ("oneof choice\n", K.ONEOF_START),
        ],
    )
    def test_block_headers(self, source: str, expected_kind: TokenKind) -> None:
        tokens = _tokens_no_eos(source)
        assert tokens[0].kind == expected_kind
        assert tokens[0].text == source.split()[1]
        assert tokens[1].kind == K.NEWLINE

    def test_header_with_trailing_comment(self) -> None:
        assert _kinds("msg A  # the A\n") == [K.MESSAGE_START, K.COMMENT, K.NEWLINE]

    def test_keyword_prefix_is_field_name(self) -> None:
        tokens = _tokens_no_eos("  messages str 1\n")
        assert tokens[1].kind == K.IDENTIFIER
        assert tokens[1].text == "messages"


# ###############
# Field Lines
# ###############


class TestFieldLines:
    def test_simple_field(self) -> None:
        tokens = _tokens_no_eos("  foo str 1\n")
        assert [t.kind for t in tokens] == [K.WHITESPACE, K.IDENTIFIER, K.FIELD_TYPE, K.FIELD_NUM, K.NEWLINE]
        assert [t.text for t in tokens[1:4]] == ["foo", "str", "1"]

    @pytest.mark.parametrize("field_type", ["[]int", "map[str]int", "google.protobuf.Timestamp", "[]Order"])
    def test_field_type_kept_as_written(self, field_type: str) -> None:
        tokens = _tokens_no_eos(f"  foo {field_type} 7\n")
        assert tokens[2].kind == K.FIELD_TYPE
        assert tokens[2].text == field_type

    def test_field_option_is_verbatim(self) -> None:
        tokens = _tokens_no_eos("  bar int 2 [deprecated = true]\n")
        assert tokens[4].kind == K.FIELD_OPTION
        assert tokens[4].text == "deprecated = true"

    def test_field_option_directly_after_tag(self) -> None:
        assert _kinds("  bar int 2[deprecated]\n")[4] == K.FIELD_OPTION

    def test_field_with_trailing_comment(self) -> None:
        tokens = _tokens_no_eos("  foo str 1  # note\n")
        assert tokens[4].kind == K.COMMENT
        assert tokens[4].text == "# note"
        assert tokens[5].kind == K.NEWLINE

    def test_enum_value_line_has_no_type(self) -> None:
        assert _kinds("  RED 0\n") == [K.WHITESPACE, K.IDENTIFIER, K.FIELD_NUM, K.NEWLINE]

    def test_missing_tag_is_left_to_translator(self) -> None:
        assert _kinds("  foo str\n") == [K.WHITESPACE, K.IDENTIFIER, K.FIELD_TYPE, K.NEWLINE]

    def test_token_positions(self) -> None:
        tokens = _tokens_no_eos("msg A\n  foo str 12\n")
        ws, name, ftype, num = tokens[2:6]
        assert (ws.line, ws.column) == (2, 1)
        assert (name.line, name.column) == (2, 3)
        assert (ftype.line, ftype.column) == (2, 7)
        assert (num.line, num.column) == (2, 11)


# ###############
# Lexical Errors
# ###############


class TestLexicalErrors:
    @pytest.mark.parametrize(
        "source",
        [
            "  foo st-r 1\n",
            "  foo str 1 extra\n",
            "  foo str 1x\n",
            "  foo str 1 [deprecated\n",
            "  foo [int 1\n",
            "  foo map[str 1\n",
            "  1foo str 1\n",
            'option foo "bar\n',
            "option foo bar\n",
            "option\n",
            "msg\n",
            "package 9lives\n",
            "msg A!\n",
        ],
    )
    def test_malformed_line_raises(self, source: str) -> None:
        with pytest.raises(LexerError):
            _tokens(source)

    def test_error_reports_line_and_column(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            _tokens("package a\n  foo st-r 1\n")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 9
        assert "Line 2, column 9" in str(exc_info.value)

    def test_unterminated_string_reports_string_start(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            _tokens('option foo "bar')
        assert exc_info.value.line == 1
        assert exc_info.value.column == 12
