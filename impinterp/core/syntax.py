"""Abstract syntax trees for the Imp language. Trees are built by the parser in lexical.py and are immutable afterwards:
every node exclusively owns its children (no sharing, no cycles).

Two families of nodes exist:
    - Expressions: Const, Var, BinOp
    - Instructions: ExprStmt, Let, LetMut, Mutate, IfElse, While, Block, Sequence

str(node) renders a node back to Imp source (fully parenthesized for binary operations), and node.display() renders
it as an indented tree.
"""

from dataclasses import dataclass
from typing import Tuple

from impinterp.core.value import Value


class Node:
    """Superclass of every AST node."""

    @property
    def nodes(self):
        """Child nodes, in evaluation order."""
        return []

    def display(self, indents=0):
        """Recursively displays AST with readable format.

        Format:
        <Node>(expr='<expr>', nodes=[
            <Node>(expr='<expr>', nodes=[
                ...
                <Node>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


class Expression(Node):
    """Superclass of Const, Var and BinOp."""


@dataclass(frozen=True)
class Const(Expression):
    value: Value

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Var(Expression):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class BinOp(Expression):
    left: Expression
    operator: str
    right: Expression

    @property
    def nodes(self):
        return [self.left, self.right]

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


class Instruction(Node):
    """Superclass of every statement."""

    @property
    def label(self):
        """Name printed in front of this instruction's result: the declared name, or '-' if nothing is bound."""
        return "-"


@dataclass(frozen=True)
class ExprStmt(Instruction):
    expr: Expression

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return str(self.expr)


@dataclass(frozen=True)
class _Binding(Instruction):
    name: str
    expr: Expression

    keyword = None

    @property
    def nodes(self):
        return [self.expr]

    @property
    def label(self):
        return self.name

    def __str__(self):
        return f"{self.keyword}{self.name} = {self.expr}"


@dataclass(frozen=True)
class Let(_Binding):
    """let <name> = <expr>"""
    keyword = "let "


@dataclass(frozen=True)
class LetMut(_Binding):
    """let mut <name> = <expr>"""
    keyword = "let mut "


@dataclass(frozen=True)
class Mutate(_Binding):
    """<name> = <expr>"""
    keyword = ""


@dataclass(frozen=True)
class Block(Instruction):
    """Braced sequence of instructions evaluated in its own scope."""
    instructions: Tuple[Instruction, ...] = ()

    @property
    def nodes(self):
        return list(self.instructions)

    def __str__(self):
        if not self.instructions:
            return "{}"
        return "{ " + "; ".join(str(instruction) for instruction in self.instructions) + " }"


@dataclass(frozen=True)
class Sequence(Instruction):
    """Several top-level instructions written on one input. Unlike Block, does not open a scope."""
    instructions: Tuple[Instruction, ...] = ()

    @property
    def nodes(self):
        return list(self.instructions)

    def __str__(self):
        return "; ".join(str(instruction) for instruction in self.instructions)


@dataclass(frozen=True)
class IfElse(Instruction):
    cond: Expression
    then: Instruction
    otherwise: Instruction

    @property
    def nodes(self):
        return [self.cond, self.then, self.otherwise]

    def __str__(self):
        return f"if {self.cond} {self.then} else {self.otherwise}"


@dataclass(frozen=True)
class While(Instruction):
    cond: Expression
    body: Instruction

    @property
    def nodes(self):
        return [self.cond, self.body]

    def __str__(self):
        return f"while {self.cond} {self.body}"
