"""pyvox.ir

Intermediate Representation (IR) for Vox.

The IR is a flat list of instructions in three-address style. Each opcode
family is its own frozen record so the executor can dispatch on the record
type instead of re-splitting text:

- `func_start` / `func_end`
- `label`, `goto`, `if_false`
- `set`, `input`, `print`, `not`
- binary ops (`add`, `lt`, `and`, ...)
- `call`, `return`

Operands are plain strings: variable names, temporaries like %t0, and literal
text exactly as written in the source (`3`, `4.0`, `true`, `"hi"`). Literal
text is interpreted by the executor, never here.

A line-oriented text form (`encode_program` / `decode_program`) lets IR be
handed to the command-line runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Tuple

from pyvox.ast_nodes import (
    Program,
    Statement,
    Expression,
    VariableDeclaration,
    Assignment,
    IfStmt,
    IfElseStmt,
    WhileStmt,
    ForStmt,
    FunctionDef,
    MainDef,
    ReturnStmt,
    PrintStmt,
    ExpressionStmt,
    Identifier,
    IntLiteral,
    FloatLiteral,
    BoolLiteral,
    StringLiteral,
    InputExpr,
    NotOp,
    BinaryOp,
    FunctionCall,
)


class IRError(Exception):
    """Malformed IR text or a syntax tree node the generator cannot lower"""
    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        if line is not None:
            super().__init__(f"{message} at line {line}")
        else:
            super().__init__(message)


ARITHMETIC_OPS = ("add", "sub", "mul", "div", "power", "mod")
COMPARISON_OPS = ("eq", "ne", "lt", "gt", "le", "ge")
LOGIC_OPS = ("and", "or")
BINARY_OPS = ARITHMETIC_OPS + COMPARISON_OPS + LOGIC_OPS

# Source-language operator spellings (spaces already replaced by '_').
OPERATOR_ALIASES: Dict[str, str] = {
    "added_to": "add",
    "plus": "add",
    "minus": "sub",
    "multiplied_by": "mul",
    "times": "mul",
    "divided_by": "div",
    "to_the_power_of": "power",
    "raised_to": "power",
    "modulo": "mod",
    "is_equal_to": "eq",
    "is_not_equal_to": "ne",
    "is_less_than": "lt",
    "is_greater_than": "gt",
    "is_less_than_or_equal_to": "le",
    "is_greater_than_or_equal_to": "ge",
}


def canonical_opcode(name: str) -> Optional[str]:
    """Map an operator name to its binary opcode, or None if it is not one."""
    if name in BINARY_OPS:
        return name
    return OPERATOR_ALIASES.get(name)


# -------------
# Instructions
# -------------

@dataclass(frozen=True)
class IRInstruction:
    """Base record. Subclasses set `op` and list their operands in order."""
    op: ClassVar[str] = ""

    def operands(self) -> List[str]:
        raise NotImplementedError

    def __str__(self) -> str:
        return " ".join([self.opname] + self.operands())

    @property
    def opname(self) -> str:
        return self.op


@dataclass(frozen=True)
class FuncStart(IRInstruction):
    op: ClassVar[str] = "func_start"
    name: str

    def operands(self) -> List[str]:
        return [self.name]


@dataclass(frozen=True)
class FuncEnd(IRInstruction):
    op: ClassVar[str] = "func_end"
    name: str

    def operands(self) -> List[str]:
        return [self.name]


@dataclass(frozen=True)
class Set(IRInstruction):
    op: ClassVar[str] = "set"
    dest: str
    value: str

    def operands(self) -> List[str]:
        return [self.dest, self.value]


@dataclass(frozen=True)
class Input(IRInstruction):
    op: ClassVar[str] = "input"
    dest: str

    def operands(self) -> List[str]:
        return [self.dest]


@dataclass(frozen=True)
class Print(IRInstruction):
    op: ClassVar[str] = "print"
    values: Tuple[str, ...] = ()

    def operands(self) -> List[str]:
        return list(self.values)


@dataclass(frozen=True)
class Not(IRInstruction):
    op: ClassVar[str] = "not"
    dest: str
    operand: str

    def operands(self) -> List[str]:
        return [self.dest, self.operand]


@dataclass(frozen=True)
class Binary(IRInstruction):
    """`<opcode> <dest> <left> <right>`; `opcode` is one of BINARY_OPS."""
    opcode: str
    dest: str
    left: str
    right: str

    @property
    def opname(self) -> str:
        return self.opcode

    def operands(self) -> List[str]:
        return [self.dest, self.left, self.right]


@dataclass(frozen=True)
class IfFalse(IRInstruction):
    op: ClassVar[str] = "if_false"
    cond: str
    label: str

    def operands(self) -> List[str]:
        return [self.cond, "goto", self.label]


@dataclass(frozen=True)
class Goto(IRInstruction):
    op: ClassVar[str] = "goto"
    label: str

    def operands(self) -> List[str]:
        return [self.label]


@dataclass(frozen=True)
class Label(IRInstruction):
    op: ClassVar[str] = "label"
    name: str

    def operands(self) -> List[str]:
        return [self.name]


@dataclass(frozen=True)
class Call(IRInstruction):
    op: ClassVar[str] = "call"
    function: str
    args: Tuple[str, ...] = ()
    dest: str = ""

    def operands(self) -> List[str]:
        return [self.function] + list(self.args) + ["->", self.dest]


@dataclass(frozen=True)
class Return(IRInstruction):
    op: ClassVar[str] = "return"
    value: str

    def operands(self) -> List[str]:
        return [self.value]


# -------------
# Text form
# -------------

def split_tokens(line: str) -> List[str]:
    """Split on whitespace, keeping quoted text (with its quotes) as one token.

    Inside quotes a backslash escapes the following character; escapes are
    kept verbatim and only interpreted by the executor.
    """
    out: List[str] = []
    cur: List[str] = []
    in_quote = False
    escaped = False
    for ch in line:
        if in_quote:
            cur.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_quote = False
            continue
        if ch == '"':
            cur.append(ch)
            in_quote = True
        elif ch.isspace():
            if cur:
                out.append("".join(cur))
                cur = []
        else:
            cur.append(ch)
    if in_quote:
        raise IRError("unterminated quoted operand")
    if cur:
        out.append("".join(cur))
    return out


_FIXED_ARITY: Dict[str, int] = {
    "func_start": 1,
    "func_end": 1,
    "set": 2,
    "input": 1,
    "not": 2,
    "goto": 1,
    "label": 1,
    "return": 1,
}


def decode_instruction(text: str, line: Optional[int] = None) -> IRInstruction:
    """Parse one line of IR text into an instruction record."""
    try:
        toks = split_tokens(text)
    except IRError as e:
        raise IRError(e.message, line) from None
    if not toks:
        raise IRError("empty instruction", line)
    op, args = toks[0], toks[1:]

    if op in _FIXED_ARITY and len(args) != _FIXED_ARITY[op]:
        raise IRError(f"malformed {op}: expected {_FIXED_ARITY[op]} operand(s), got {len(args)}", line)

    if op == "func_start":
        return FuncStart(args[0])
    if op == "func_end":
        return FuncEnd(args[0])
    if op == "set":
        return Set(args[0], args[1])
    if op == "input":
        return Input(args[0])
    if op == "not":
        return Not(args[0], args[1])
    if op == "goto":
        return Goto(args[0])
    if op == "label":
        return Label(args[0])
    if op == "return":
        return Return(args[0])
    if op == "print":
        if not args:
            raise IRError("malformed print: expected at least one operand", line)
        return Print(tuple(args))
    if op == "if_false":
        if len(args) != 3 or args[1] != "goto":
            raise IRError("malformed if_false: expected 'if_false <cond> goto <label>'", line)
        return IfFalse(args[0], args[2])
    if op == "call":
        if "->" not in args:
            raise IRError("malformed call: missing ->", line)
        arrow = len(args) - 1 - args[::-1].index("->")
        if arrow < 1 or arrow != len(args) - 2:
            raise IRError("malformed call: expected 'call <fn> [args...] -> <dest>'", line)
        return Call(args[0], tuple(args[1:arrow]), args[arrow + 1])

    opcode = canonical_opcode(op)
    if opcode is not None:
        if len(args) != 3:
            raise IRError(f"malformed {op}: expected 3 operands, got {len(args)}", line)
        return Binary(opcode, args[0], args[1], args[2])

    raise IRError(f"unknown instruction: {op}", line)


def decode_program(text: str) -> List[IRInstruction]:
    """Parse IR text. Blank lines and `#` comment lines are skipped."""
    instructions: List[IRInstruction] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        instructions.append(decode_instruction(stripped, lineno))
    return instructions


def encode_program(instructions: List[IRInstruction]) -> str:
    return "".join(f"{instr}\n" for instr in instructions)


# -------------
# Generator
# -------------

class IRGenerator:
    """Generates intermediate representation (3-Address Code)"""

    def __init__(self):
        self.instructions: List[IRInstruction] = []
        self.temp_counter = 0
        self.label_counter = 0

    def generate(self, program: Program) -> List[IRInstruction]:
        """Generate IR from a syntax tree"""
        self.instructions = []
        self.temp_counter = 0
        self.label_counter = 0
        for stmt in program.statements:
            self._gen_stmt(stmt)
        return self.instructions

    # -------------
    # Helpers
    # -------------

    def _new_temp(self) -> str:
        t = f"%t{self.temp_counter}"
        self.temp_counter += 1
        return t

    def _new_label(self, base: str) -> str:
        l = f"{base}_{self.label_counter}"
        self.label_counter += 1
        return l

    def _emit(self, instr: IRInstruction) -> None:
        self.instructions.append(instr)

    # -------------
    # Statements
    # -------------

    def _gen_body(self, stmts: List[Statement]) -> None:
        for s in stmts:
            self._gen_stmt(s)

    def _gen_stmt(self, stmt: Statement) -> None:
        if isinstance(stmt, (VariableDeclaration, Assignment)):
            v = self._gen_expr(stmt.expression)
            self._emit(Set(stmt.name, v))
            return

        if isinstance(stmt, IfStmt):
            cond = self._gen_expr(stmt.condition)
            then_label = self._new_label("if_then")
            end_label = self._new_label("if_end")
            self._emit(IfFalse(cond, end_label))
            self._emit(Label(then_label))
            self._gen_body(stmt.body)
            self._emit(Label(end_label))
            return

        if isinstance(stmt, IfElseStmt):
            self._gen_if_else(stmt)
            return

        if isinstance(stmt, WhileStmt):
            self._gen_loop("while", stmt.condition, stmt.body)
            return

        if isinstance(stmt, ForStmt):
            self._gen_stmt(stmt.init)
            self._gen_loop("for", stmt.condition, list(stmt.body) + [stmt.update])
            return

        if isinstance(stmt, (FunctionDef, MainDef)):
            self._emit(FuncStart(stmt.name))
            self._gen_body(stmt.body)
            self._emit(FuncEnd(stmt.name))
            return

        if isinstance(stmt, ReturnStmt):
            v = self._gen_expr(stmt.value)
            self._emit(Return(v))
            return

        if isinstance(stmt, PrintStmt):
            vals = [self._gen_expr(a) for a in stmt.arguments]
            self._emit(Print(tuple(vals)))
            return

        if isinstance(stmt, ExpressionStmt):
            self._gen_expr(stmt.expression)
            return

        raise IRError(f"unsupported statement: {type(stmt).__name__}", getattr(stmt, "line", None))

    def _gen_if_else(self, stmt: IfElseStmt) -> None:
        # Both bodies are flattened and cut at the statement-count midpoint,
        # regardless of where the then-branch actually ended.
        cond = self._gen_expr(stmt.condition)
        then_label = self._new_label("if_then")
        else_label = self._new_label("if_else")
        end_label = self._new_label("if_end")

        stmts = list(stmt.then_body) + list(stmt.else_body)
        mid = len(stmts) // 2

        self._emit(IfFalse(cond, else_label))
        self._emit(Label(then_label))
        self._gen_body(stmts[:mid])
        self._emit(Goto(end_label))
        self._emit(Label(else_label))
        self._gen_body(stmts[mid:])
        self._emit(Label(end_label))

    def _gen_loop(self, kind: str, condition: Expression, body: List[Statement]) -> None:
        cond_label = self._new_label(f"{kind}_cond")
        end_label = self._new_label(f"{kind}_end")
        self._emit(Label(cond_label))
        cond = self._gen_expr(condition)
        self._emit(IfFalse(cond, end_label))
        self._gen_body(body)
        self._emit(Goto(cond_label))
        self._emit(Label(end_label))

    # -------------
    # Expressions
    # -------------

    def _gen_expr(self, expr: Expression) -> str:
        if isinstance(expr, (IntLiteral, FloatLiteral, BoolLiteral, StringLiteral)):
            return expr.text
        if isinstance(expr, Identifier):
            return expr.name

        if isinstance(expr, InputExpr):
            t = self._new_temp()
            self._emit(Input(t))
            return t

        if isinstance(expr, NotOp):
            v = self._gen_expr(expr.operand)
            t = self._new_temp()
            self._emit(Not(t, v))
            return t

        if isinstance(expr, BinaryOp):
            name = expr.op.strip().replace(" ", "_")
            opcode = canonical_opcode(name)
            if opcode is None:
                raise IRError(f"unsupported operator: {expr.op!r}", expr.line)
            l = self._gen_expr(expr.left)
            r = self._gen_expr(expr.right)
            t = self._new_temp()
            self._emit(Binary(opcode, t, l, r))
            return t

        if isinstance(expr, FunctionCall):
            args = [self._gen_expr(a) for a in expr.arguments]
            t = self._new_temp()
            self._emit(Call(expr.name, tuple(args), t))
            return t

        raise IRError(f"unsupported expression: {type(expr).__name__}", getattr(expr, "line", None))
