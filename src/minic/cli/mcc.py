"""
mcc - minic Compiler Command-Line Interface
===========================================

This module implements the command-line interface for the minic
compiler.

Usage Examples
--------------
Basic compilation (writes hello.s):
    $ mcc hello.c

With output file:
    $ mcc hello.c -o out.s

For a macOS assembler:
    $ mcc --symbol-prefix _ hello.c

Inspect the front end:
    $ mcc --tokens hello.c
    $ mcc --ast hello.c
"""

import logging
from pathlib import Path
from typing import Optional

import click

from minic import __version__
from minic.ast import ASTPrinter
from minic.codegen import TARGETS
from minic.compiler import MiniCCompiler, CompilerOptions
from minic.lexer import Lexer
from minic.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def _validate_source_path(ctx: click.Context, param: click.Parameter, value: Path) -> Path:
    """Only .c files are accepted as input."""
    if value.suffix != ".c":
        raise click.BadParameter(f"'{value}' is not a .c file")
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    callback=_validate_source_path,
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: input with .s extension)",
)
@click.option(
    "-t", "--target",
    type=click.Choice(sorted(TARGETS)),
    default="x86_64",
    show_default=True,
    help="Stack convention of the generated code",
)
@click.option(
    "--symbol-prefix",
    default="",
    help="Prefix for the function symbol ('_' for macOS)",
)
@click.option(
    "--comments",
    is_flag=True,
    help="Annotate the generated assembly with comments",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="mcc")
def main(
    input_file: Path,
    output: Optional[Path],
    target: str,
    symbol_prefix: str,
    comments: bool,
    tokens: bool,
    ast: bool,
    verbose: bool,
) -> None:
    """
    Compile a minic source file to x86 assembly.

    INPUT_FILE is the C source file (.c) to compile.

    \b
    Examples:
        mcc return_2.c               # Outputs return_2.s
        mcc return_2.c -o out.s      # Specify output file
        mcc --ast return_2.c         # Show the parse tree
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".s")

    try:
        source = input_file.read_text(encoding="utf-8")

        if tokens:
            for token in Lexer(source, str(input_file)).tokenize():
                click.echo(repr(token))
            return

        options = CompilerOptions(
            target=target,
            symbol_prefix=symbol_prefix,
            emit_comments=comments,
        )
        result = MiniCCompiler(options).compile_source(source, str(input_file))
        assembly = result.unwrap()

        if ast:
            click.echo(ASTPrinter().print(result.ast))
            return

        output.write_text(assembly, encoding="utf-8")
        logger.debug("tokenized: %d tokens", result.token_count)
        logger.debug("wrote %d bytes to %s", len(assembly), output)

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
