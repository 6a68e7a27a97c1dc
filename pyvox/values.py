"""
Runtime values for the Vox executor.

A value is a plain Python `int`, `float`, `bool` or `str`; `None` stands for
an unbound name. `bool` is a subclass of `int` in Python, so every numeric
check here excludes it explicitly.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Optional, Union

Value = Union[int, float, bool, str]

_INT_RE = re.compile(r"-?\d+")
_FLOAT_RE = re.compile(r"-?\d*\.\d+")

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

_UNESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class OperandTypeError(Exception):
    """Operand combination an operator does not support"""
    pass


def _unescape(inner: str) -> str:
    out = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner) and inner[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[inner[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def classify_literal(token: str) -> Optional[Value]:
    """Interpret operand text as a literal.

    Returns None when the token is not a literal (and so names a variable).
    No literal ever evaluates to None.
    """
    token = token.strip()
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        return _unescape(token[1:-1])
    low = token.lower()
    if low == "true":
        return True
    if low == "false":
        return False
    if _INT_RE.fullmatch(token):
        # Integer text outside 32-bit range is not a literal.
        n = int(token)
        return n if INT_MIN <= n <= INT_MAX else None
    if _FLOAT_RE.fullmatch(token):
        return float(token)
    return None


def sniff_input(line: str) -> Value:
    """Type a line read from the console: int, float, boolean, else text."""
    if _INT_RE.fullmatch(line):
        n = int(line)
        if INT_MIN <= n <= INT_MAX:
            return n
        return line
    if _FLOAT_RE.fullmatch(line):
        return float(line)
    low = line.lower()
    if low == "true":
        return True
    if low == "false":
        return False
    return line


def is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def truthy(v: Optional[Value]) -> bool:
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if is_number(v):
        return v != 0
    if isinstance(v, str):
        return v != ""
    return True


def format_value(v: Optional[Value]) -> str:
    """Text shown by `print` and used for concatenation."""
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "Infinity" if v > 0 else "-Infinity"
        return _format_float(v)
    return str(v)


def _format_float(v: float) -> str:
    # Plain notation inside [1e-3, 1e7), otherwise d.dddE<exp>.
    if v == 0 or 1e-3 <= abs(v) < 1e7:
        return repr(v)
    _, digits, exp = Decimal(repr(abs(v))).as_tuple()
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exp += 1
    sci = len(digits) - 1 + exp
    rest = "".join(str(d) for d in digits[1:]) or "0"
    sign = "-" if v < 0 else ""
    return f"{sign}{digits[0]}.{rest}E{sci}"


# -------------
# Arithmetic
# -------------

def _ln(x: float) -> float:
    if x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    return math.log(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _float_arith(op: str, l: float, r: float) -> float:
    if op == "add":
        return l + r
    if op == "sub":
        return l - r
    if op == "mul":
        return l * r
    if op == "div":
        return 0.0 if r == 0 else l / r
    if op == "mod":
        if r == 0:
            return l
        try:
            return math.remainder(l, r)
        except ValueError:
            # infinite dividend
            return math.nan
    if op == "power":
        if l == 0 and r == 0:
            return 1.0
        if l < 0 and not r.is_integer():
            return math.nan
        return _exp(r * _ln(l))
    raise OperandTypeError(f"unknown numeric op: {op}")


def _trunc_div(l: int, r: int) -> int:
    q = abs(l) // abs(r)
    return q if (l < 0) == (r < 0) else -q


def _wrap32(x: int) -> int:
    return ((x + 2 ** 31) & 0xFFFFFFFF) - 2 ** 31


def _int_arith(op: str, l: int, r: int) -> int:
    """Integer arithmetic with signed 32-bit wraparound."""
    if op == "add":
        return _wrap32(l + r)
    if op == "sub":
        return _wrap32(l - r)
    if op == "mul":
        return _wrap32(l * r)
    if op == "div":
        return 0 if r == 0 else _wrap32(_trunc_div(l, r))
    if op == "mod":
        if r == 0:
            return l
        return _wrap32(l - r * _trunc_div(l, r))
    if op == "power":
        result = 1
        for _ in range(r):
            result = _wrap32(result * l)
        return result
    raise OperandTypeError(f"unknown numeric op: {op}")


def arithmetic(op: str, left: Optional[Value], right: Optional[Value]) -> Value:
    """Evaluate add/sub/mul/div/power/mod with Vox coercions."""
    if left is None:
        left = 0
    if right is None:
        right = 0

    if is_number(left) and is_number(right):
        if isinstance(left, float) or isinstance(right, float):
            return _float_arith(op, float(left), float(right))
        return _int_arith(op, left, right)

    if isinstance(left, str) or isinstance(right, str):
        if op == "add":
            return format_value(left) + format_value(right)
        raise OperandTypeError(
            f"non-numeric operands for op {op}: {format_value(left)}, {format_value(right)}"
        )

    raise OperandTypeError(
        f"unsupported operands for arithmetic op {op}: {format_value(left)}, {format_value(right)}"
    )


# -------------
# Comparison
# -------------

def _ordered(op: str, l, r) -> bool:
    if op == "eq":
        return l == r
    if op == "ne":
        return l != r
    if op == "lt":
        return l < r
    if op == "gt":
        return l > r
    if op == "le":
        return l <= r
    if op == "ge":
        return l >= r
    raise OperandTypeError(f"unknown comparison op: {op}")


def compare(op: str, left: Optional[Value], right: Optional[Value]) -> bool:
    """Evaluate eq/ne/lt/gt/le/ge. Never fails on mismatched types."""
    if left is None and right is None:
        return op in ("eq", "le", "ge")
    if left is None or right is None:
        # An absent value sorts before any present one, and equals nothing.
        if op in ("lt", "le"):
            return left is None
        if op in ("gt", "ge"):
            return right is None
        return False

    if is_number(left) and is_number(right):
        return _ordered(op, float(left), float(right))
    if isinstance(left, str) and isinstance(right, str):
        return _ordered(op, left, right)
    if isinstance(left, bool) and isinstance(right, bool):
        # False < True holds for Python bools as well.
        return _ordered(op, left, right)
    return _ordered(op, format_value(left), format_value(right))


def logic(op: str, left: Optional[Value], right: Optional[Value]) -> bool:
    lv = truthy(left)
    rv = truthy(right)
    if op == "and":
        return lv and rv
    if op == "or":
        return lv or rv
    raise OperandTypeError(f"unknown logic op: {op}")
