"""
minic Command-Line Interface
============================

- **mcc**: compile a ``.c`` file to a ``.s`` assembly file

The tool is a Click-based CLI application; exit codes are shared
through ``minic.cli.errors.ExitCode``.
"""

__all__ = ["mcc"]
