# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error types raised while translating schema DSL documents."""

# ###############
# Public Interface
# ###############


class TranslationError(Exception):
    """Base class for all errors that stop a translation.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


class LexerError(TranslationError):
    """Raised when the scanner meets a character the current state cannot accept."""


class StructuralError(TranslationError):
    """Raised when tokens arrive in an order that does not form a valid construct."""


class UnsupportedConstructError(TranslationError):
    """Raised when a construct is disabled by the active grammar profile."""
