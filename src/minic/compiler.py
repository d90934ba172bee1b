"""
minic Compiler Main Module
==========================

This module provides the main compiler interface for minic.
It runs the complete compilation process:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ mcc return_2.c -o return_2.s

Programmatic:
    >>> from minic import compile_c
    >>> print(compile_c('int main() { return 2; }'), end="")
            .globl main
    main:
            movl    $2, %eax
            ret

Compilation Pipeline
--------------------
1. **Lexical Analysis**: the parser pulls tokens from the lexer on demand
2. **Parsing**: build the whole AST before any code is generated
3. **Code Generation**: walk the AST once, post-order

Error Handling
--------------
The first lexical or syntax error aborts compilation. The compiler
never collects more than one error per run, and no partial assembly is
ever returned alongside an error.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from minic.lexer import Lexer
from minic.parser import Parser
from minic.codegen import CodeGenerator, TARGETS
from minic.ast import Function
from minic.errors import CompileError, CSyntaxError

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        target: Stack convention of the output, "x86_64" or "i386"
        symbol_prefix: Prepended to the function symbol; use "_" for
                       Mach-O (macOS) assemblers
        emit_comments: Annotate the generated assembly with comments
    """
    target: str = "x86_64"
    symbol_prefix: str = ""
    emit_comments: bool = False

    def __post_init__(self):
        if self.target not in TARGETS:
            raise ValueError(
                f"unknown target '{self.target}' "
                f"(expected one of: {', '.join(sorted(TARGETS))})"
            )


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Exactly one of ``assembly`` and ``error`` is meaningful, as told by
    ``success``.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        assembly: Generated assembly code (if successful)
        ast: Abstract syntax tree (if parsing succeeded)
        token_count: Number of tokens pulled from the lexer
        error: The error that aborted compilation (if any)
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    ast: Optional[Function] = None
    token_count: int = 0
    error: Optional[CompileError] = None

    def unwrap(self) -> str:
        """Return the assembly, or raise the error that stopped compilation."""
        if self.error is not None:
            raise self.error
        return self.assembly


class _CountingLexer(Lexer):
    """Lexer that counts the tokens it hands out."""

    def __init__(self, source: str, filename: str):
        super().__init__(source, filename)
        self.count = 0

    def next_token(self):
        token = super().next_token()
        self.count += 1
        return token


class MiniCCompiler:
    """
    The minic compiler.

    Example:
        compiler = MiniCCompiler()
        result = compiler.compile_source("int main() { return 2; }")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile source text to assembly.

        Compile errors are returned in the result rather than raised.

        Args:
            source: minic source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the assembly or the error
        """
        result = CompilerResult(filename=filename)
        lexer = _CountingLexer(source, filename)
        parser = None

        try:
            logger.debug("parsing %s", filename)
            parser = Parser(lexer)
            result.ast = parser.parse()

            logger.debug("generating %s code for %s", self.options.target, filename)
            generator = CodeGenerator(
                target=self.options.target,
                symbol_prefix=self.options.symbol_prefix,
                emit_comments=self.options.emit_comments,
            )
            result.assembly = generator.generate(result.ast)
            result.success = True
        except CompileError as e:
            self._fail(result, e)
        except RecursionError:
            # Parser and generator recurse once per nesting level
            self._fail(result, self._nesting_error(parser))

        result.token_count = lexer.count
        return result

    def _fail(self, result: CompilerResult, error: CompileError) -> None:
        logger.debug("compilation of %s failed: %s", result.filename, error)
        result.error = error
        result.ast = None
        result.assembly = ""

    def _nesting_error(self, parser: Optional[Parser]) -> CSyntaxError:
        """Syntax error at the token where nesting exceeded the recursion limit."""
        location = None
        source_line = None
        if parser is not None:
            location = parser.lookahead.location
            source_line = parser._get_source_line(location.line)
        return CSyntaxError(
            "expression nested too deeply",
            location,
            hint="reduce the nesting of parentheses and unary operators",
            source_line=source_line,
        )

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a source file to assembly.

        Raises:
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_c(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile minic source code to assembly.

    Raises:
        CompileError: If compilation fails
    """
    return MiniCCompiler(options).compile_source(source, filename).unwrap()


def compile_file(
    filepath: str,
    output_path: Optional[str] = None,
    options: Optional[CompilerOptions] = None,
) -> str:
    """
    Compile a source file, optionally writing the assembly to output_path.

    Raises:
        CompileError: If compilation fails
        FileNotFoundError: If source file not found

    Example:
        >>> asm = compile_file("return_2.c", "return_2.s")
    """
    assembly = MiniCCompiler(options).compile_file(filepath).unwrap()

    if output_path:
        Path(output_path).write_text(assembly, encoding="utf-8")
        logger.debug("wrote %d bytes to %s", len(assembly), output_path)

    return assembly
