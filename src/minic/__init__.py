"""
minic - A Minimal C Compiler
============================

This package compiles a tiny subset of C, a single ``int`` function
whose body returns an integer expression, to x86 assembly for the GNU
assembler.

Language Subset
---------------
    int main() {
        return !(2 + 3 * 4) - ~(10 / 3);
    }

- integer literals
- unary operators: - ~ !
- binary operators: + - * / with the usual precedence
- parentheses

Pipeline
--------
    Source → Lexer → Parser → AST → Code Generator → Assembly

Quick Start
-----------
    >>> from minic import compile_c
    >>> asm = compile_c("int main() { return 42; }")

Or use the command-line tool:
    $ mcc return_42.c          # writes return_42.s
    $ cc return_42.s -o ret && ./ret; echo $?
    42
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from minic.compiler import (
    MiniCCompiler,
    CompilerOptions,
    CompilerResult,
    compile_c,
    compile_file,
)
from minic.errors import (
    MiniCError,
    CompileError,
    CLexicalError,
    CSyntaxError,
    CCodeGenError,
    ErrorKind,
    SourceLocation,
)
from minic.lexer import Lexer, Token, TokenKind, KEYWORDS
from minic.parser import Parser, parse_source
from minic.codegen import CodeGenerator, AssemblyWriter
from minic.ast import (
    ASTNode,
    Function,
    Return,
    BinaryOperation,
    UnaryOperation,
    IntLiteral,
    BinaryOperator,
    UnaryOperator,
    ASTPrinter,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "MiniCCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_c",
    "compile_file",
    # Errors
    "MiniCError",
    "CompileError",
    "CLexicalError",
    "CSyntaxError",
    "CCodeGenError",
    "ErrorKind",
    "SourceLocation",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "KEYWORDS",
    # Parser
    "Parser",
    "parse_source",
    # Code Generator
    "CodeGenerator",
    "AssemblyWriter",
    # AST Nodes
    "ASTNode",
    "Function",
    "Return",
    "BinaryOperation",
    "UnaryOperation",
    "IntLiteral",
    "BinaryOperator",
    "UnaryOperator",
    "ASTPrinter",
]
