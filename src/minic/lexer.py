"""
minic Lexer (Tokenizer)
=======================

This module implements the lexer for the minic language. It converts
source text into a lazy stream of tokens that the parser pulls one at a
time.

Token Categories
----------------
- Keywords: return, int, float
- Identifiers: function names (letters, digits, '_', ':', '<', '>')
- Numbers: decimal digits with at most one '.'
- Strings: "double quoted" (no escape processing)
- Characters: 'x' (exactly one character, no escape processing)
- Operators: + - * / ~ !
- Delimiters: ( ) { } ; =

'+' and '-' are always operator tokens; a signed literal such as ``-5``
lexes as OPERATOR '-' followed by INT_LITERAL '5' and the parser builds
the negation.

Example Usage
-------------
>>> from minic.lexer import Lexer
>>> for token in Lexer('int main() { return 42; }').tokenize():
...     print(token)
Token(KEYWORD, 'int', 1:1)
Token(IDENTIFIER, 'main', 1:5)
Token(OPEN_PAREN, '(', 1:9)
Token(CLOSE_PAREN, ')', 1:10)
Token(OPEN_BRACE, '{', 1:12)
Token(KEYWORD, 'return', 1:14)
Token(INT_LITERAL, '42', 1:21)
Token(SEMICOLON, ';', 1:23)
Token(CLOSE_BRACE, '}', 1:25)
Token(EOF, 1:26)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import string

from minic.errors import SourceLocation, CLexicalError


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds for the minic language.

    The set is closed: the parser's error messages name these kinds
    directly, e.g. "expected CLOSE_BRACE, found end of input".
    """

    KEYWORD = auto()         # return, int, float
    IDENTIFIER = auto()      # function names
    OPEN_PAREN = auto()      # (
    CLOSE_PAREN = auto()     # )
    OPEN_BRACE = auto()      # {
    CLOSE_BRACE = auto()     # }
    SEMICOLON = auto()       # ;
    ASSIGN = auto()          # =
    INT_LITERAL = auto()     # 42, 3.5
    CHAR_LITERAL = auto()    # 'a'
    STRING_LITERAL = auto()  # "abc"
    OPERATOR = auto()        # + - * / ~ !
    EOF = auto()             # end of input


KEYWORDS = frozenset({"return", "int", "float"})

OPERATORS = frozenset("+-*/~!")

DELIMITERS: dict[str, TokenKind] = {
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    "{": TokenKind.OPEN_BRACE,
    "}": TokenKind.CLOSE_BRACE,
    ";": TokenKind.SEMICOLON,
    "=": TokenKind.ASSIGN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from minic source code.

    Attributes:
        kind: The TokenKind classification
        lexeme: The exact source text of the token ("" for EOF)
        line: Line number of the first character (1-indexed)
        column: Column number of the first character (1-indexed)
        filename: Name of the source file
    """
    kind: TokenKind
    lexeme: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.kind is TokenKind.EOF:
            return f"Token({self.kind.name}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Human-readable form used in parser error messages."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        return f"{self.kind.name} '{self.lexeme}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes minic source code on demand.

    The lexer owns line/column tracking. Every consumed character
    advances the column; a newline bumps the line and resets the column
    to 1. Errors report the position at the point of failure.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()      # pull one token
        tokens = list(lexer.tokenize()) # or drain the rest

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"

    IDENT_CHARS = string.ascii_letters + string.digits + "_:<>"

    DIGITS = string.digits

    WHITESPACE = " \t\r"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate the remaining tokens, ending with (and including) EOF.

        Raises:
            CLexicalError: If invalid input is encountered
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Once the input is exhausted every call returns an EOF token.

        Raises:
            CLexicalError: If the next character cannot start a token
        """
        self._skip_whitespace()

        start_line = self._line
        start_column = self._column
        char = self._peek()

        if not char:
            return self._make_token(TokenKind.EOF, "", start_line, start_column)

        if char in DELIMITERS:
            self._advance()
            return self._make_token(DELIMITERS[char], char, start_line, start_column)

        if char in OPERATORS:
            self._advance()
            return self._make_token(TokenKind.OPERATOR, char, start_line, start_column)

        if char == "'":
            return self._scan_char(start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in self.DIGITS:
            return self._scan_number(start_line, start_column)

        raise self._error(
            f"unrecognized character '{char}'",
            hint="remove the character or check for a typo",
        )

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking for error reporting.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _skip_whitespace(self) -> None:
        while not self._at_end():
            char = self._peek()
            if char in self.WHITESPACE or char == "\n":
                self._advance()
            else:
                break

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        kind: TokenKind,
        lexeme: str,
        start_line: int,
        start_column: int,
    ) -> Token:
        return Token(
            kind=kind,
            lexeme=lexeme,
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    def _error(self, message: str, hint: str = None) -> CLexicalError:
        """Create a lexical error at the current position."""
        location = SourceLocation(self.filename, self._line, self._column)
        return CLexicalError(
            message,
            location,
            hint=hint,
            source_line=self._get_current_line(),
        )

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """Scan an identifier and classify it against the keyword set."""
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        kind = TokenKind.KEYWORD if name in KEYWORDS else TokenKind.IDENTIFIER
        return self._make_token(kind, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal: digits with at most one '.' separator.

        Raises:
            CLexicalError: On a second '.'
        """
        chars = []
        seen_separator = False
        while self._peek() and self._peek() in self.DIGITS + ".":
            if self._peek() == ".":
                if seen_separator:
                    raise self._error(
                        "too many separators in numeric literal",
                        hint="a numeric literal may contain at most one '.'",
                    )
                seen_separator = True
            chars.append(self._advance())

        return self._make_token(
            TokenKind.INT_LITERAL, "".join(chars), start_line, start_column
        )

    def _scan_char(self, start_line: int, start_column: int) -> Token:
        """Scan a character literal: quote, one character, quote."""
        self._advance()  # consume opening '

        char = self._peek()
        if not char or char == "\n":
            raise self._error(
                "unterminated character literal",
                hint="add closing ' to complete the character literal",
            )
        self._advance()

        if self._peek() != "'":
            raise self._error(
                "character literal too long or missing closing quote",
                hint="character literals can only contain a single character",
            )
        self._advance()  # consume closing '

        return self._make_token(
            TokenKind.CHAR_LITERAL, f"'{char}'", start_line, start_column
        )

    def _scan_string(self, start_line: int, start_column: int) -> Token:
        """Scan a string literal; it must close on the line it opens."""
        chars = [self._advance()]  # opening "

        while True:
            char = self._peek()
            if not char or char == "\n":
                raise self._error(
                    "unterminated string literal",
                    hint="add closing '\"' to complete the string",
                )
            chars.append(self._advance())
            if char == '"':
                break

        return self._make_token(
            TokenKind.STRING_LITERAL, "".join(chars), start_line, start_column
        )
