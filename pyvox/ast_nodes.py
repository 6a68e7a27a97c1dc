"""
Syntax Tree Node Definitions for Vox

Defines the structure of the nodes the front end hands to the IR generator.
The tree is assumed to be syntactically well-formed; no node validates itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class ASTNode:
    """Base class for all syntax tree nodes"""
    # Location fields (line/column) are required constructor arguments
    # so subclasses' non-default fields don't follow defaults.
    line: int
    column: int


# ============== Statement Nodes ==============

@dataclass
class Statement(ASTNode):
    """Base class for statements"""
    pass


@dataclass
class VariableDeclaration(Statement):
    """`declare <datatype> <name> = <expression>`"""
    name: str
    datatype: str
    expression: 'Expression'


@dataclass
class Assignment(Statement):
    """`<name> = <expression>`"""
    name: str
    expression: 'Expression'


@dataclass
class IfStmt(Statement):
    """If statement without an else branch"""
    condition: 'Expression'
    body: List[Statement] = field(default_factory=list)


@dataclass
class IfElseStmt(Statement):
    """If statement with an else branch.

    The IR generator only looks at the concatenation of both bodies; see
    `IRGenerator._gen_if_else`.
    """
    condition: 'Expression'
    then_body: List[Statement] = field(default_factory=list)
    else_body: List[Statement] = field(default_factory=list)


@dataclass
class WhileStmt(Statement):
    """While loop"""
    condition: 'Expression'
    body: List[Statement] = field(default_factory=list)


@dataclass
class ForStmt(Statement):
    """For loop: `for (<init>; <condition>; <update>) { body }`"""
    init: VariableDeclaration
    condition: 'Expression'
    update: Assignment
    body: List[Statement] = field(default_factory=list)


@dataclass
class FunctionDef(Statement):
    """Function definition. Arguments are visible as arg0, arg1, ..."""
    name: str
    body: List[Statement] = field(default_factory=list)


@dataclass
class MainDef(Statement):
    """The program's main definition"""
    body: List[Statement] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "main"


@dataclass
class ReturnStmt(Statement):
    """Return statement"""
    value: 'Expression'


@dataclass
class PrintStmt(Statement):
    """Print statement; arguments are printed with no separator"""
    arguments: List['Expression'] = field(default_factory=list)


@dataclass
class ExpressionStmt(Statement):
    """Expression evaluated for its side effects (a bare call)"""
    expression: 'Expression'


# ============== Expression Nodes ==============

@dataclass
class Expression(ASTNode):
    """Base class for expressions"""
    pass


@dataclass
class Identifier(Expression):
    """Identifier (variable name)"""
    name: str


@dataclass
class IntLiteral(Expression):
    """Integer literal, kept as source text"""
    text: str


@dataclass
class FloatLiteral(Expression):
    """Floating-point literal, kept as source text"""
    text: str


@dataclass
class BoolLiteral(Expression):
    """`true` / `false`"""
    text: str


@dataclass
class StringLiteral(Expression):
    """Quoted text literal, including the surrounding quotes"""
    text: str


@dataclass
class InputExpr(Expression):
    """`input`: reads one line from the console"""
    pass


@dataclass
class NotOp(Expression):
    """Unary `not`"""
    operand: Expression


@dataclass
class BinaryOp(Expression):
    """Binary operation; `op` is the operator as written, e.g. "added to"."""
    op: str
    left: Expression
    right: Expression


@dataclass
class FunctionCall(Expression):
    """Function call"""
    name: str
    arguments: List[Expression] = field(default_factory=list)


# ============== Program ==============

@dataclass
class Program(ASTNode):
    """Root node: top-level statements and definitions in source order"""
    statements: List[Statement] = field(default_factory=list)
