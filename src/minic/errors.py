"""
minic Error Hierarchy
=====================

This module defines the exception hierarchy for the minic compiler.
All exceptions inherit from MiniCError, allowing callers to catch every
compiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
MiniCError (base)
└── CompileError - positioned error raised by the compiler core
    ├── CLexicalError - source text cannot be tokenized
    ├── CSyntaxError - token present but grammatically unexpected
    └── CCodeGenError - internal code generator inconsistency

Error Message Format
--------------------
``str(error)`` is the short, uniform form used by every stage:

    Line 3, col 12: unterminated string literal

``error.report()`` gives the long diagnostic printed by the command line
tool, with the offending source line and a caret under the column:

    hello.c:3:12: error: unterminated string literal
        return "abc;
                   ^
    hint: add closing '"' to complete the string
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MiniCError(Exception):
    """
    Base exception for all minic errors.

        try:
            compile_c(source)
        except MiniCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class ErrorKind(Enum):
    """The stage of the pipeline an error belongs to."""
    LEXICAL = "lexical"
    SYNTAX = "syntax"
    CODEGEN = "codegen"


# =============================================================================
# Compiler Errors
# =============================================================================

class CompileError(MiniCError):
    """
    Base exception for errors raised while compiling a source text.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    kind: ErrorKind = ErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> int:
        return self.location.line if self.location else 0

    @property
    def column(self) -> int:
        return self.location.column if self.location else 0

    def _format_message(self) -> str:
        if self.location is None:
            return self.message
        return f"Line {self.location.line}, col {self.location.column}: {self.message}"

    def report(self) -> str:
        """
        Format the error with location, source context, and hint.

        Example output:
            hello.c:1:12: error: expected KEYWORD, found IDENTIFIER 'retrun'
                int main(){retrun 1;}
                           ^
            hint: statements start with 'return'
        """
        parts = []

        # Location prefix
        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class CLexicalError(CompileError):
    """
    Lexical error in source code.

    Raised when the lexer meets input it cannot turn into a token.

    Examples:
        - Unrecognized character (``@``, ``$``)
        - Unterminated string or character literal
        - Numeric literal with more than one '.'
    """

    kind = ErrorKind.LEXICAL


class CSyntaxError(CompileError):
    """
    Syntax error in source code.

    Raised when the parser meets a token that does not fit the grammar,
    including a keyword other than the one the rule requires.
    """

    kind = ErrorKind.SYNTAX


class CCodeGenError(CompileError):
    """
    Error during code generation.

    Only raised for trees the parser cannot build, such as a foreign
    node type handed to the generator directly.
    """

    kind = ErrorKind.CODEGEN
