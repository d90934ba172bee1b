"""
minic Recursive Descent Parser
==============================

This module implements a recursive descent parser for the minic
language. It pulls tokens from a Lexer on demand, holding exactly one
token of lookahead, and builds the AST for the single function of the
program.

Grammar (EBNF)
--------------
program    ::= function EOF
function   ::= 'int' IDENTIFIER '(' ')' '{' statement '}'
statement  ::= 'return' expression ';'
expression ::= term (('+' | '-') term)*
term       ::= factor (('*' | '/') factor)*
factor     ::= '(' expression ')' | unary_op factor | INT_LITERAL
unary_op   ::= '-' | '~' | '!'

Expression Precedence (lowest to highest)
-----------------------------------------
1. additive       + -       (left-associative)
2. multiplicative * /       (left-associative)
3. unary          - ~ !     (right-associative, stackable: !-5)
4. primary        INT_LITERAL, '(' expression ')'

The first error aborts parsing; there is no recovery.

Example Usage
-------------
>>> from minic.parser import parse_source
>>> tree = parse_source('int main() { return 2 + 3 * 4; }')
>>> tree.name
'main'
"""

from typing import Callable

from minic.lexer import Lexer, Token, TokenKind
from minic.ast import (
    Function,
    Return,
    Expression,
    BinaryOperation,
    UnaryOperation,
    IntLiteral,
    BinaryOperator,
    UnaryOperator,
)
from minic.errors import CSyntaxError


ADDITIVE_OPERATORS = {
    "+": BinaryOperator.ADD,
    "-": BinaryOperator.SUBTRACT,
}

MULTIPLICATIVE_OPERATORS = {
    "*": BinaryOperator.MULTIPLY,
    "/": BinaryOperator.DIVIDE,
}

UNARY_OPERATORS = {
    "-": UnaryOperator.NEGATE,
    "~": UnaryOperator.BITWISE_NOT,
    "!": UnaryOperator.LOGICAL_NOT,
}


class Parser:
    """
    Recursive descent parser for minic.

    The parser drives the lexer: ``lookahead`` always holds the next
    unconsumed token, and consuming it pulls a new one.

    Attributes:
        lexer: The token source
        lookahead: The next unconsumed token
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.lookahead: Token = lexer.next_token()

    def parse(self) -> Function:
        """
        Parse the whole program.

        Returns:
            The Function root of the AST

        Raises:
            CSyntaxError: On the first token that does not fit the grammar
            CLexicalError: If the lexer fails while a token is pulled
        """
        function = self._parse_function()
        self._expect(TokenKind.EOF)
        return function

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _advance(self) -> Token:
        """Consume the lookahead and pull the next token."""
        token = self.lookahead
        if token.kind is not TokenKind.EOF:
            self.lookahead = self.lexer.next_token()
        return token

    def _check(self, kind: TokenKind, lexemes=None) -> bool:
        """Check the lookahead's kind and, optionally, its lexeme."""
        if self.lookahead.kind is not kind:
            return False
        return lexemes is None or self.lookahead.lexeme in lexemes

    def _expect(self, kind: TokenKind) -> Token:
        """
        Consume a token of the given kind.

        Raises:
            CSyntaxError: If the lookahead is of another kind
        """
        if self._check(kind):
            return self._advance()
        raise self._error(f"expected {kind.name}, found {self.lookahead.describe()}")

    def _expect_keyword(self, keyword: str) -> Token:
        """Consume a KEYWORD token whose lexeme is exactly keyword."""
        token = self._expect(TokenKind.KEYWORD)
        if token.lexeme != keyword:
            raise CSyntaxError(
                f"unexpected keyword '{token.lexeme}', expected '{keyword}'",
                token.location,
                source_line=self._get_source_line(token.line),
            )
        return token

    def _error(self, message: str, hint: str = None) -> CSyntaxError:
        """Create a syntax error at the lookahead's position."""
        return CSyntaxError(
            message,
            self.lookahead.location,
            hint=hint,
            source_line=self._get_source_line(self.lookahead.line),
        )

    def _get_source_line(self, line: int):
        lines = self.lexer.source.split("\n")
        if 0 < line <= len(lines):
            return lines[line - 1]
        return None

    # =========================================================================
    # Declarations and Statements
    # =========================================================================

    def _parse_function(self) -> Function:
        start = self._expect_keyword("int")
        name = self._expect(TokenKind.IDENTIFIER)
        self._expect(TokenKind.OPEN_PAREN)
        self._expect(TokenKind.CLOSE_PAREN)
        self._expect(TokenKind.OPEN_BRACE)
        body = self._parse_statement()
        self._expect(TokenKind.CLOSE_BRACE)
        return Function(location=start.location, name=name.lexeme, body=body)

    def _parse_statement(self) -> Return:
        start = self._expect_keyword("return")
        expression = self._parse_expression()
        self._expect(TokenKind.SEMICOLON)
        return Return(location=start.location, expression=expression)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse additive expression (+ -)."""
        return self._parse_binary(self._parse_term, ADDITIVE_OPERATORS)

    def _parse_term(self) -> Expression:
        """Parse multiplicative expression (* /)."""
        return self._parse_binary(self._parse_factor, MULTIPLICATIVE_OPERATORS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[str, BinaryOperator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Function to parse operands
            operators: Map of operator lexemes to binary operators
        """
        expr = operand_parser()

        while self._check(TokenKind.OPERATOR, operators):
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryOperation(
                location=op_token.location,
                operator=operators[op_token.lexeme],
                left=expr,
                right=right,
            )

        return expr

    def _parse_factor(self) -> Expression:
        """Parse a parenthesized expression, a unary operation or a literal."""
        token = self.lookahead

        if self._check(TokenKind.OPEN_PAREN):
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenKind.CLOSE_PAREN)
            return expr

        if self._check(TokenKind.OPERATOR, UNARY_OPERATORS):
            self._advance()
            operand = self._parse_factor()  # Right-associative
            return UnaryOperation(
                location=token.location,
                operator=UNARY_OPERATORS[token.lexeme],
                operand=operand,
            )

        if self._check(TokenKind.INT_LITERAL):
            if "." in token.lexeme:
                raise self._error(
                    f"floating-point literals are not supported: '{token.lexeme}'",
                    hint="only integer literals are allowed",
                )
            self._advance()
            return IntLiteral(location=token.location, value=token.lexeme)

        raise self._error(f"expected expression, found {token.describe()}")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> Function:
    """
    Lex and parse source text into an AST.

    Raises:
        CompileError: On the first lexical or syntax error
    """
    return Parser(Lexer(source, filename)).parse()
