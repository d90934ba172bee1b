"""
minic Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types built by the minic parser.

Node Hierarchy
--------------
ASTNode (base)
├── Function - root node: a single function definition
├── Return - return statement
└── Expressions
    ├── BinaryOperation - + - * /
    ├── UnaryOperation - - ~ !
    └── IntLiteral - integer constant

Design Notes
------------
- All nodes are frozen dataclasses; the tree is immutable after parsing
  and each child is owned by exactly one parent
- Each node stores its source location, excluded from equality so that
  trees compare structurally
- The node set is closed: the code generator dispatches over exactly
  these five classes and rejects anything else
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union, TYPE_CHECKING

from minic.errors import SourceLocation

if TYPE_CHECKING:
    from minic.codegen import AssemblyWriter


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def emit(self, sink: "AssemblyWriter") -> None:
        """
        Append this subtree's assembly to sink, children first.

        After the call the value of the subtree is in the accumulator.
        """
        from minic.codegen import CodeGenerator

        CodeGenerator(writer=sink).emit_node(self)


# =============================================================================
# Operators
# =============================================================================

class UnaryOperator(Enum):
    """Unary operator types, valued by their source lexeme."""
    NEGATE = "-"        # -x
    BITWISE_NOT = "~"   # ~x
    LOGICAL_NOT = "!"   # !x


class BinaryOperator(Enum):
    """Binary operator types, valued by their source lexeme."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class IntLiteral(ASTNode):
    """
    Integer constant.

    Attributes:
        value: The decimal digits as written in the source
    """
    value: str = "0"


@dataclass(frozen=True)
class UnaryOperation(ASTNode):
    """
    Unary operation expression (op x).

    Attributes:
        operator: The unary operator
        operand: The operand expression
    """
    operator: UnaryOperator = None
    operand: "Expression" = None


@dataclass(frozen=True)
class BinaryOperation(ASTNode):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: "Expression" = None
    right: "Expression" = None


Expression = Union[IntLiteral, UnaryOperation, BinaryOperation]


# =============================================================================
# Statement and Function Nodes
# =============================================================================

@dataclass(frozen=True)
class Return(ASTNode):
    """
    Return statement.

    Attributes:
        expression: The value returned from the function
    """
    expression: Expression = None


@dataclass(frozen=True)
class Function(ASTNode):
    """
    Function definition; the root of every tree.

    Attributes:
        name: Function name
        body: The single return statement of the body
    """
    name: str = ""
    body: Return = None


# =============================================================================
# Visitor Pattern Support
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about.

    Example:
        class LiteralCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_IntLiteral(self, node):
                self.count += 1
    """

    def visit(self, node: ASTNode):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node in field order."""
        for name in node.__dataclass_fields__:
            value = getattr(node, name)
            if isinstance(value, ASTNode):
                self.visit(value)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(tree))

    Output for ``int main() { return -(1 + 2); }``:
        Function: main
          Return
            Unary -
              Binary +
                Int 1
                Int 2
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _nested(self, text: str, node: ASTNode) -> None:
        self._emit(text)
        self.indent_level += 1
        self.generic_visit(node)
        self.indent_level -= 1

    def visit_Function(self, node: Function):
        self._nested(f"Function: {node.name}", node)

    def visit_Return(self, node: Return):
        self._nested("Return", node)

    def visit_BinaryOperation(self, node: BinaryOperation):
        self._nested(f"Binary {node.operator.value}", node)

    def visit_UnaryOperation(self, node: UnaryOperation):
        self._nested(f"Unary {node.operator.value}", node)

    def visit_IntLiteral(self, node: IntLiteral):
        self._emit(f"Int {node.value}")
