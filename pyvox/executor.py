"""
IR Executor

Interprets the instruction list produced by `pyvox.ir.IRGenerator` directly,
with a program counter, a stack of variable scopes and a call stack.

Name lookup is dynamic: a name is searched in every live scope, most recent
first, with no stop at the current function's frame. A callee therefore sees
any caller variable it does not shadow, while its own writes always land in
its own (topmost) scope.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, TextIO

from pyvox.ir import (
    IRInstruction,
    FuncStart,
    FuncEnd,
    Set,
    Input,
    Print,
    Not,
    Binary,
    IfFalse,
    Goto,
    Label,
    Call,
    Return,
    ARITHMETIC_OPS,
    COMPARISON_OPS,
    LOGIC_OPS,
)
from pyvox.values import (
    Value,
    OperandTypeError,
    arithmetic,
    classify_literal,
    compare,
    format_value,
    logic,
    sniff_input,
    truthy,
)

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Fatal runtime error; aborts the whole run"""
    def __init__(self, message: str, pc: Optional[int] = None, instruction: Optional[IRInstruction] = None):
        self.message = message
        self.pc = pc
        self.instruction = instruction
        if pc is not None and instruction is not None:
            super().__init__(f"{message} at instruction {pc} ({instruction})")
        else:
            super().__init__(message)


class StructuralError(ExecutionError):
    """Unknown label, unknown function or unknown instruction"""
    pass


class RuntimeTypeError(ExecutionError):
    """Operand combination an operator does not support"""
    pass


@dataclass
class CallFrame:
    return_pc: int
    dest: str
    function: str


class IRExecutor:
    """Executes a list of IR instructions"""

    def __init__(
        self,
        instructions: List[IRInstruction],
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        prompt: str = "> ",
    ):
        self.instructions: List[IRInstruction] = list(instructions)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.prompt = prompt

        self.label_to_index: Dict[str, int] = {}
        self.function_to_index: Dict[str, int] = {}
        # scopes[-1] is the innermost (current) scope
        self.scopes: List[Dict[str, Optional[Value]]] = []
        self.call_stack: List[CallFrame] = []

        self._preprocess()
        self._push_scope()

    # -------------
    # Setup
    # -------------

    def _preprocess(self) -> None:
        for i, instr in enumerate(self.instructions):
            if isinstance(instr, Label):
                self.label_to_index[instr.name] = i
            elif isinstance(instr, FuncStart):
                self.function_to_index[instr.name] = i
        logger.debug(
            "indexed %d label(s), %d function(s)",
            len(self.label_to_index),
            len(self.function_to_index),
        )

    def check_references(self) -> List[str]:
        """List branch targets and callees that are missing from the index.

        Execution reports these lazily, only when the branch or call runs.
        """
        problems: List[str] = []
        for i, instr in enumerate(self.instructions):
            if isinstance(instr, (IfFalse, Goto)) and instr.label not in self.label_to_index:
                problems.append(f"unknown label: {instr.label} (instruction {i})")
            elif isinstance(instr, Call) and instr.function not in self.function_to_index:
                problems.append(f"unknown function: {instr.function} (instruction {i})")
        return problems

    # -------------
    # Scopes
    # -------------

    def _push_scope(self) -> None:
        self.scopes.append({})

    def _pop_scope(self) -> None:
        if self.scopes:
            self.scopes.pop()
        if not self.scopes:
            self._push_scope()

    def store(self, name: str, value: Optional[Value]) -> None:
        self.scopes[-1][name] = value

    def lookup(self, name: str) -> Optional[Value]:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return None

    def resolve(self, token: str) -> Optional[Value]:
        """Value of an operand: a literal, else the nearest binding, else None."""
        lit = classify_literal(token)
        if lit is not None:
            return lit
        return self.lookup(token.strip())

    # -------------
    # Execution
    # -------------

    def _jump_target(self, label: str, pc: int, instr: IRInstruction) -> int:
        target = self.label_to_index.get(label)
        if target is None:
            raise StructuralError(f"Unknown label: {label}", pc, instr)
        return target + 1

    def _read_line(self) -> str:
        self.stdout.write(self.prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        return line.rstrip("\r\n")

    def _return(self, value: Optional[Value]) -> int:
        frame = self.call_stack.pop()
        self._pop_scope()
        self.store(frame.dest, value)
        logger.debug("return from %s -> %s = %s", frame.function, frame.dest, format_value(value))
        return frame.return_pc

    def execute(self) -> None:
        """Run until the end of the instruction list or a top-level return."""
        pc = 0
        while pc < len(self.instructions):
            instr = self.instructions[pc]

            if isinstance(instr, (Label, FuncStart)):
                pc += 1
                continue

            if isinstance(instr, FuncEnd):
                # Falling off the end of a called function returns null.
                if self.call_stack and self.call_stack[-1].function == instr.name:
                    pc = self._return(None)
                else:
                    pc += 1
                continue

            if isinstance(instr, Set):
                self.store(instr.dest, self.resolve(instr.value))
                pc += 1
                continue

            if isinstance(instr, Input):
                self.store(instr.dest, sniff_input(self._read_line()))
                pc += 1
                continue

            if isinstance(instr, Print):
                text = "".join(format_value(self.resolve(v)) for v in instr.values)
                self.stdout.write(text + "\n")
                pc += 1
                continue

            if isinstance(instr, Not):
                self.store(instr.dest, not truthy(self.resolve(instr.operand)))
                pc += 1
                continue

            if isinstance(instr, Binary):
                left = self.resolve(instr.left)
                right = self.resolve(instr.right)
                try:
                    if instr.opcode in ARITHMETIC_OPS:
                        result = arithmetic(instr.opcode, left, right)
                    elif instr.opcode in COMPARISON_OPS:
                        result = compare(instr.opcode, left, right)
                    elif instr.opcode in LOGIC_OPS:
                        result = logic(instr.opcode, left, right)
                    else:
                        raise StructuralError(f"Unknown instruction: {instr.opcode}", pc, instr)
                except OperandTypeError as e:
                    raise RuntimeTypeError(str(e), pc, instr) from e
                self.store(instr.dest, result)
                pc += 1
                continue

            if isinstance(instr, IfFalse):
                if not truthy(self.resolve(instr.cond)):
                    pc = self._jump_target(instr.label, pc, instr)
                else:
                    pc += 1
                continue

            if isinstance(instr, Goto):
                pc = self._jump_target(instr.label, pc, instr)
                continue

            if isinstance(instr, Call):
                # Arguments are resolved in the caller's scope chain.
                values = [self.resolve(a) for a in instr.args]
                target = self.function_to_index.get(instr.function)
                if target is None:
                    raise StructuralError(f"Unknown function: {instr.function}", pc, instr)
                self.call_stack.append(CallFrame(pc + 1, instr.dest, instr.function))
                self._push_scope()
                for i, v in enumerate(values):
                    self.store(f"arg{i}", v)
                logger.debug("call %s with %d argument(s)", instr.function, len(values))
                pc = target + 1
                continue

            if isinstance(instr, Return):
                value = self.resolve(instr.value)
                if not self.call_stack:
                    logger.debug("top-level return at instruction %d; halting", pc)
                    return
                pc = self._return(value)
                continue

            raise StructuralError(f"Unknown instruction: {type(instr).__name__}", pc, instr)
