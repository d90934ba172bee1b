"""
x86 Code Generator for minic
============================

This module generates GNU assembler (AT&T syntax) text from the minic
AST.

Code Generation Strategy
------------------------
The generator uses a simple accumulator/stack evaluation model:

1. Every expression leaves its value in the accumulator (%eax)
2. For a binary operation, one operand is spilled to the stack while
   the other is evaluated, then popped into the scratch register (%ecx)
3. Emission is post-order: children first, then the node's own
   instructions

Register Usage
--------------
| Register | Usage                                        |
|----------|----------------------------------------------|
| %eax     | Accumulator, expression results, return value |
| %ecx     | Scratch: the operand popped off the stack     |
| %edx     | High half of the dividend for idivl           |
| %rsp     | Stack pointer (spilled operands)              |

Operand Order
-------------
Non-commutative operators evaluate their right operand first so that
the left operand ends up in %eax:

    a - b:  <b>  push  <a>  pop %ecx  subl %ecx, %eax
    a / b:  <b>  push  <a>  pop %ecx  cdq  idivl %ecx

Generated Assembly Format
-------------------------
        .globl main
main:
        movl    $2, %eax
        ret

Usage
-----
>>> from minic.parser import parse_source
>>> from minic.codegen import CodeGenerator
>>> asm = CodeGenerator().generate(parse_source('int main() { return 2; }'))
"""

from dataclasses import dataclass
from typing import Optional

from minic.ast import (
    ASTNode,
    Function,
    Return,
    BinaryOperation,
    UnaryOperation,
    IntLiteral,
    BinaryOperator,
    UnaryOperator,
)
from minic.errors import CCodeGenError


# =============================================================================
# Output Sink
# =============================================================================

class AssemblyWriter:
    """
    Accumulating text sink for generated assembly.

    The writer only ever appends; nothing in the generator reads back
    what has been written.
    """

    def __init__(self):
        self.lines: list[str] = []

    def emit(self, line: str = "") -> None:
        """Emit a raw line of assembly."""
        self.lines.append(line)

    def comment(self, text: str) -> None:
        self.emit(f"        # {text}")

    def label(self, name: str) -> None:
        self.emit(f"{name}:")

    def directive(self, name: str, *args: str) -> None:
        if args:
            self.emit(f"        {name} {', '.join(args)}")
        else:
            self.emit(f"        {name}")

    def instruction(self, mnemonic: str, *operands: str) -> None:
        """Emit an instruction with optional operands."""
        if operands:
            self.emit(f"        {mnemonic:<8}{', '.join(operands)}")
        else:
            self.emit(f"        {mnemonic}")

    def getvalue(self) -> str:
        """Return everything written so far as one newline-terminated text."""
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


# =============================================================================
# Target Conventions
# =============================================================================

@dataclass(frozen=True)
class Target:
    """
    Register and stack conventions of a target.

    Arithmetic is always 32-bit; only the width of the spill slots
    differs between targets.

    Attributes:
        name: Target name as accepted by CompilerOptions
        push: Push mnemonic for a spill
        pop: Pop mnemonic for a reload
        spill_register: Full-width name of the accumulator
        reload_register: Full-width name of the scratch register
    """
    name: str
    push: str
    pop: str
    spill_register: str
    reload_register: str


TARGETS: dict[str, Target] = {
    "x86_64": Target("x86_64", "pushq", "popq", "%rax", "%rcx"),
    "i386": Target("i386", "pushl", "popl", "%eax", "%ecx"),
}

ACCUMULATOR = "%eax"
SCRATCH = "%ecx"

BINARY_INSTRUCTIONS = {
    BinaryOperator.ADD: "addl",
    BinaryOperator.SUBTRACT: "subl",
    BinaryOperator.MULTIPLY: "imull",
}


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates x86 assembly from the minic AST.

    Attributes:
        target: The Target conventions in use
        symbol_prefix: Prepended to global symbol names ("_" on Mach-O)
        emit_comments: Annotate the output with source-level comments
        writer: The AssemblyWriter receiving the output
    """

    def __init__(
        self,
        target: str = "x86_64",
        symbol_prefix: str = "",
        emit_comments: bool = False,
        writer: Optional[AssemblyWriter] = None,
    ):
        if target not in TARGETS:
            raise CCodeGenError(
                f"unknown target '{target}'",
                hint=f"choose one of: {', '.join(sorted(TARGETS))}",
            )
        self.target = TARGETS[target]
        self.symbol_prefix = symbol_prefix
        self.emit_comments = emit_comments
        self.writer = writer if writer is not None else AssemblyWriter()

    def generate(self, program: Function) -> str:
        """
        Generate assembly for a whole program.

        Args:
            program: The Function root of the AST

        Returns:
            The assembly text, newline-terminated
        """
        self.emit_node(program)
        return self.writer.getvalue()

    def emit_node(self, node: ASTNode) -> None:
        """
        Emit code for node and its subtree, children first.

        Raises:
            CCodeGenError: If node is not one of the minic node types
        """
        if isinstance(node, IntLiteral):
            self._generate_int(node)
        elif isinstance(node, UnaryOperation):
            self._generate_unary(node)
        elif isinstance(node, BinaryOperation):
            self._generate_binary(node)
        elif isinstance(node, Return):
            self._generate_return(node)
        elif isinstance(node, Function):
            self._generate_function(node)
        else:
            location = getattr(node, "location", None)
            raise CCodeGenError(
                f"cannot generate code for {type(node).__name__}", location
            )

    # =========================================================================
    # Declarations and Statements
    # =========================================================================

    def _generate_function(self, func: Function) -> None:
        symbol = f"{self.symbol_prefix}{func.name}"
        if self.emit_comments:
            self.writer.comment(f"Function: {func.name}")
        self.writer.directive(".globl", symbol)
        self.writer.label(symbol)
        self.emit_node(func.body)

    def _generate_return(self, stmt: Return) -> None:
        self.emit_node(stmt.expression)
        if self.emit_comments:
            self.writer.comment("return value in %eax")
        self.writer.instruction("ret")

    # =========================================================================
    # Expressions
    # =========================================================================

    def _generate_int(self, expr: IntLiteral) -> None:
        """Load a literal, wrapped to the 32-bit register width."""
        # Reduce digit by digit; int() refuses very long digit strings
        value = 0
        for digit in expr.value:
            value = (value * 10 + int(digit)) & 0xFFFFFFFF
        self.writer.instruction("movl", f"${value}", ACCUMULATOR)

    def _generate_unary(self, expr: UnaryOperation) -> None:
        self.emit_node(expr.operand)
        op = expr.operator

        if op is UnaryOperator.NEGATE:
            self.writer.instruction("negl", ACCUMULATOR)
        elif op is UnaryOperator.BITWISE_NOT:
            self.writer.instruction("notl", ACCUMULATOR)
        elif op is UnaryOperator.LOGICAL_NOT:
            # movl leaves the flags from cmpl intact for sete
            self.writer.instruction("cmpl", "$0", ACCUMULATOR)
            self.writer.instruction("movl", "$0", ACCUMULATOR)
            self.writer.instruction("sete", "%al")
        else:
            raise CCodeGenError(f"unsupported unary operator {op!r}", expr.location)

    def _generate_binary(self, expr: BinaryOperation) -> None:
        op = expr.operator

        if self.emit_comments:
            self.writer.comment(f"binary {op.value}")

        if op in (BinaryOperator.ADD, BinaryOperator.MULTIPLY):
            self._generate_spilled(expr.left, expr.right)
            self.writer.instruction(BINARY_INSTRUCTIONS[op], SCRATCH, ACCUMULATOR)
        elif op is BinaryOperator.SUBTRACT:
            self._generate_spilled(expr.right, expr.left)
            self.writer.instruction("subl", SCRATCH, ACCUMULATOR)
        elif op is BinaryOperator.DIVIDE:
            # Dividend in %eax, divisor in %ecx; cdq sign-extends into %edx
            self._generate_spilled(expr.right, expr.left)
            self.writer.instruction("cdq")
            self.writer.instruction("idivl", SCRATCH)
        else:
            raise CCodeGenError(f"unsupported binary operator {op!r}", expr.location)

    def _generate_spilled(self, first: ASTNode, second: ASTNode) -> None:
        """
        Evaluate first, spill it, evaluate second, reload first into %ecx.

        Leaves second in %eax and first in %ecx.
        """
        self.emit_node(first)
        self.writer.instruction(self.target.push, self.target.spill_register)
        self.emit_node(second)
        self.writer.instruction(self.target.pop, self.target.reload_register)
