"""
minic Compiler Test Suite
=========================

End-to-end tests: source text in, program result out. Generated
assembly is executed on the interpreter from conftest.py; when a native
x86-64 toolchain is available the same programs are also assembled,
linked and run for real.
"""

import logging
import platform
import shutil
import subprocess
import sys

import pytest
from minic import (
    MiniCCompiler,
    CompilerOptions,
    CompilerResult,
    compile_c,
    compile_file,
    CompileError,
    CLexicalError,
    CSyntaxError,
)
from minic.ast import Function
from minic.errors import ErrorKind


# =============================================================================
# Program Result Tests
# =============================================================================

class TestProgramResults:
    """Compiled programs return the value of their expression."""

    @pytest.mark.parametrize("source,expected", [
        ("int main(){return 2;}", 2),
        ("int main(){return 0;}", 0),
        ("int main(){return -5;}", -5),
        ("int main(){return ~0;}", -1),
        ("int main(){return !0;}", 1),
        ("int main(){return !5;}", 0),
        ("int main(){return !-5;}", 0),
        ("int main(){return --5;}", 5),
        ("int main(){return ~~7;}", 7),
    ])
    def test_literals_and_unary(self, run_program, source, expected):
        assert run_program(source) == expected

    @pytest.mark.parametrize("expr,expected", [
        ("2 + 3 * 4", 14),
        ("(2 + 3) * 4", 20),
        ("1 - 2 - 3", -4),
        ("8 / 4 / 2", 1),
        ("2 * 3 + 4 * 5", 26),
        ("10 - 2 * 3", 4),
        ("(1 + 2) * (3 + 4) / 7", 3),
        ("-2 * 3", -6),
        ("~(1 + 2)", -4),
        ("!(3 - 3) + 1", 2),
    ])
    def test_precedence_and_associativity(self, run_program, expr, expected):
        assert run_program(f"int main() {{ return {expr}; }}") == expected

    @pytest.mark.parametrize("a,b", [
        (7, 2), (-7, 2), (7, -2), (-7, -2), (6, 3), (1, 5), (0, 9), (100, -7),
    ])
    def test_arithmetic_matches_host(self, run_program, a, b):
        """Each operator agrees with 32-bit C arithmetic, truncating division."""
        quotient = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            quotient = -quotient
        cases = {"+": a + b, "-": a - b, "*": a * b, "/": quotient}
        for op, expected in cases.items():
            source = f"int main() {{ return ({a}) {op} ({b}); }}"
            assert run_program(source) == expected, op

    def test_nested_division(self, run_program):
        assert run_program("int main(){ return (100 / 5) / (8 / 4); }") == 10
        assert run_program("int main(){ return -100 / (2 / 1); }") == -50

    def test_multiplication_wraps_at_32_bits(self, run_program):
        assert run_program("int main(){ return 65536 * 65536; }") == 0
        assert run_program("int main(){ return 2147483647 + 1; }") == -2147483648

    @pytest.mark.parametrize("target", ["x86_64", "i386"])
    def test_every_target_computes_the_same_result(self, run_program, target):
        source = "int main(){ return (1 - 10) * 3 / ~1 + !0; }"
        assert run_program(source, CompilerOptions(target=target)) == 14

    def test_comments_are_ignored_by_the_machine(self, run_program):
        options = CompilerOptions(emit_comments=True)
        assert run_program("int main(){ return 6 * 7; }", options) == 42


# =============================================================================
# Result Object Tests
# =============================================================================

class TestCompilerResult:
    """Tests for MiniCCompiler.compile_source and CompilerResult."""

    def test_success(self):
        result = MiniCCompiler().compile_source("int main(){return 2;}", "ok.c")
        assert result.success
        assert result.error is None
        assert result.filename == "ok.c"
        assert isinstance(result.ast, Function)
        assert "movl    $2, %eax" in result.assembly
        assert result.unwrap() == result.assembly

    def test_token_count_includes_eof(self):
        result = MiniCCompiler().compile_source("int main(){return 2;}")
        assert result.token_count == 10

    def test_syntax_error_is_returned_not_raised(self):
        result = MiniCCompiler().compile_source("int main(){return 1;")
        assert not result.success
        assert isinstance(result.error, CSyntaxError)
        assert result.error.kind == ErrorKind.SYNTAX
        assert result.assembly == ""
        assert result.ast is None

    def test_lexical_error_is_returned(self):
        result = MiniCCompiler().compile_source("int main(){return 1 @ 2;}")
        assert isinstance(result.error, CLexicalError)
        assert result.error.kind == ErrorKind.LEXICAL
        assert (result.error.line, result.error.column) == (1, 21)

    def test_unwrap_raises_the_error(self):
        result = MiniCCompiler().compile_source("int main(){retrun 1;}")
        with pytest.raises(CSyntaxError, match="retrun"):
            result.unwrap()

    def test_very_long_literal_compiles(self):
        result = MiniCCompiler().compile_source("int main(){return " + "1" * 5000 + ";}")
        assert result.success
        assert f"${(10 ** 5000 - 1) // 9 % 2 ** 32}, %eax" in result.assembly

    def test_deeply_nested_parentheses_are_a_syntax_error(self):
        source = "int main(){return " + "(" * 5000 + "1" + ")" * 5000 + ";}"
        result = MiniCCompiler().compile_source(source)
        assert not result.success
        assert isinstance(result.error, CSyntaxError)
        assert "nested too deeply" in result.error.message
        assert result.error.line == 1
        assert result.ast is None

    def test_deeply_nested_unary_operators_are_a_syntax_error(self):
        result = MiniCCompiler().compile_source("int main(){return " + "-" * 5000 + "1;}")
        assert isinstance(result.error, CSyntaxError)
        assert "nested too deeply" in result.error.message

    def test_default_result(self):
        result = CompilerResult()
        assert not result.success
        assert result.unwrap() == ""

    def test_compilation_is_deterministic(self):
        source = "int main(){ return !(1 + 2) * -3 / ~4; }"
        compiler = MiniCCompiler()
        assert compiler.compile_source(source).assembly == compiler.compile_source(source).assembly


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestConvenienceFunctions:
    """Tests for compile_c and compile_file."""

    def test_compile_c(self):
        assert compile_c("int main(){return 2;}").startswith("        .globl main\n")

    def test_compile_c_raises(self):
        with pytest.raises(CompileError) as exc_info:
            compile_c("int main(){return 1;", "broken.c")
        report = exc_info.value.report()
        assert report.startswith("broken.c:1:21: error: expected CLOSE_BRACE")

    def test_compile_c_with_options(self):
        asm = compile_c("int main(){return 1;}", options=CompilerOptions(symbol_prefix="_"))
        assert "_main:" in asm

    def test_compile_file(self, tmp_path):
        source = tmp_path / "return_2.c"
        source.write_text("int main() {\n    return 2;\n}\n")
        output = tmp_path / "return_2.s"

        asm = compile_file(str(source), str(output))

        assert output.read_text() == asm
        assert "movl    $2, %eax" in asm

    def test_compile_file_without_output(self, tmp_path):
        source = tmp_path / "prog.c"
        source.write_text("int main(){return 3;}")
        compile_file(str(source))
        assert not (tmp_path / "prog.s").exists()

    def test_compile_file_error_names_the_file(self, tmp_path):
        source = tmp_path / "bad.c"
        source.write_text("int main() {\n    return 1 $ 2;\n}\n")
        with pytest.raises(CLexicalError) as exc_info:
            compile_file(str(source))
        assert exc_info.value.location.filename == str(source)
        assert exc_info.value.line == 2

    def test_compile_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compile_file(str(tmp_path / "missing.c"))


# =============================================================================
# Options and Logging Tests
# =============================================================================

class TestOptionsAndLogging:

    def test_default_options(self):
        options = CompilerOptions()
        assert options.target == "x86_64"
        assert options.symbol_prefix == ""
        assert not options.emit_comments

    def test_invalid_target(self):
        with pytest.raises(ValueError, match="unknown target 'sparc'"):
            CompilerOptions(target="sparc")

    def test_debug_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="minic.compiler"):
            MiniCCompiler().compile_source("int main(){return 2;}", "log.c")
        messages = [r.getMessage() for r in caplog.records]
        assert "parsing log.c" in messages
        assert "generating x86_64 code for log.c" in messages

    def test_failure_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="minic.compiler"):
            MiniCCompiler().compile_source("int main(){return;}", "bad.c")
        assert any("compilation of bad.c failed" in r.getMessage() for r in caplog.records)


# =============================================================================
# Native Execution Tests
# =============================================================================

def _native_toolchain_available() -> bool:
    return (
        sys.platform.startswith("linux")
        and platform.machine() in ("x86_64", "AMD64")
        and shutil.which("cc") is not None
    )


@pytest.mark.skipif(not _native_toolchain_available(), reason="needs cc on x86-64 Linux")
@pytest.mark.parametrize("expr", ["2", "2 + 3 * 4", "!-5", "(-7) / 2", "~(10 - 3)", "100 / -7"])
def test_native_exit_status(tmp_path, run_program, expr):
    """The assembled program exits with the low byte of its result."""
    source = f"int main() {{ return {expr}; }}"
    asm_path = tmp_path / "prog.s"
    exe_path = tmp_path / "prog"
    asm_path.write_text(compile_c(source))

    subprocess.run(["cc", str(asm_path), "-o", str(exe_path)], check=True)
    completed = subprocess.run([str(exe_path)])

    assert completed.returncode == run_program(source) & 0xFF
