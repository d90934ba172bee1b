"""
minic Test Configuration
========================

Fixtures shared by the test suite.

The ``run_assembly`` and ``run_program`` fixtures execute generated
assembly on a tiny interpreter for the x86 instruction subset the code
generator emits, so return values can be checked without an assembler
or an x86 host.
"""

import pytest

from minic.compiler import compile_c, CompilerOptions


MASK32 = 0xFFFFFFFF

REGISTER_ALIASES = {
    "%eax": "eax", "%rax": "eax",
    "%ecx": "ecx", "%rcx": "ecx",
    "%edx": "edx", "%rdx": "edx",
}


def to_signed32(value: int) -> int:
    """Interpret the low 32 bits of value as a two's complement integer."""
    value &= MASK32
    return value - (1 << 32) if value & 0x80000000 else value


class X86Machine:
    """
    Interpreter for the instructions emitted by minic.

    Registers hold 32-bit values; spill slots hold whatever was pushed,
    whatever the push width of the target.
    """

    def __init__(self):
        self.registers = {"eax": 0, "ecx": 0, "edx": 0}
        self.stack: list[int] = []
        self.zero_flag = False
        self.executed = 0

    def _read(self, operand: str) -> int:
        if operand.startswith("$"):
            return int(operand[1:]) & MASK32
        return self.registers[REGISTER_ALIASES[operand]]

    def _write(self, operand: str, value: int) -> None:
        self.registers[REGISTER_ALIASES[operand]] = value & MASK32

    def run(self, assembly: str) -> int:
        """Execute from the first instruction to ``ret``; return signed %eax."""
        for raw in assembly.splitlines():
            line = raw.strip()
            if not line or line.startswith(("#", ".")) or line.endswith(":"):
                continue

            mnemonic, _, rest = line.partition(" ")
            operands = [o.strip() for o in rest.split(",")] if rest.strip() else []
            self.executed += 1

            if mnemonic == "ret":
                assert not self.stack, "unbalanced stack at ret"
                return to_signed32(self.registers["eax"])
            self._execute(mnemonic, operands)

        raise AssertionError("program fell off the end without ret")

    def _execute(self, mnemonic: str, operands: list[str]) -> None:
        if mnemonic == "movl":
            self._write(operands[1], self._read(operands[0]))
        elif mnemonic == "negl":
            self._write(operands[0], -self._read(operands[0]))
        elif mnemonic == "notl":
            self._write(operands[0], ~self._read(operands[0]))
        elif mnemonic == "cmpl":
            self.zero_flag = (self._read(operands[1]) - self._read(operands[0])) & MASK32 == 0
        elif mnemonic == "sete":
            assert operands == ["%al"]
            eax = self.registers["eax"] & ~0xFF
            self.registers["eax"] = eax | int(self.zero_flag)
        elif mnemonic in ("pushq", "pushl"):
            self.stack.append(self._read(operands[0]))
        elif mnemonic in ("popq", "popl"):
            self._write(operands[0], self.stack.pop())
        elif mnemonic == "addl":
            self._write(operands[1], self._read(operands[1]) + self._read(operands[0]))
        elif mnemonic == "subl":
            self._write(operands[1], self._read(operands[1]) - self._read(operands[0]))
        elif mnemonic == "imull":
            product = to_signed32(self._read(operands[1])) * to_signed32(self._read(operands[0]))
            self._write(operands[1], product)
        elif mnemonic == "cdq":
            negative = self.registers["eax"] & 0x80000000
            self.registers["edx"] = MASK32 if negative else 0
        elif mnemonic == "idivl":
            dividend = (self.registers["edx"] << 32) | self.registers["eax"]
            if dividend & (1 << 63):
                dividend -= 1 << 64
            divisor = to_signed32(self._read(operands[0]))
            quotient = abs(dividend) // abs(divisor)
            if (dividend < 0) != (divisor < 0):
                quotient = -quotient
            self.registers["eax"] = quotient & MASK32
            self.registers["edx"] = (dividend - quotient * divisor) & MASK32
        else:
            raise AssertionError(f"unexpected instruction {mnemonic!r}")


@pytest.fixture
def run_assembly():
    """Execute an assembly text and return the program's result."""
    def _run(assembly: str) -> int:
        return X86Machine().run(assembly)
    return _run


@pytest.fixture
def run_program(run_assembly):
    """Compile a source text and return the program's result."""
    def _run(source: str, options: CompilerOptions = None) -> int:
        return run_assembly(compile_c(source, "test.c", options))
    return _run
