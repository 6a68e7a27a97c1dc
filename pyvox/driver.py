"""
Main Interpreter Driver

Orchestrates the pipeline: syntax tree -> IR -> execution, or IR text ->
execution for programs handed over by an external front end.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from pyvox.ast_nodes import Program
from pyvox.executor import IRExecutor
from pyvox.ir import IRInstruction, IRGenerator, decode_program, encode_program

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "> "


@dataclass
class RunResult:
    """Result of a run"""
    success: bool
    errors: List[str] = None
    ir: Optional[List[IRInstruction]] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []


class Interpreter:
    """Runs Vox programs"""

    def __init__(
        self,
        *,
        prompt: Optional[str] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        if prompt is None:
            prompt = os.environ.get("PYVOX_PROMPT", DEFAULT_PROMPT)
        self.prompt = prompt
        self.stdin = stdin
        self.stdout = stdout

    def get_ir(self, program: Program) -> List[IRInstruction]:
        """Generate IR from a syntax tree"""
        generator = IRGenerator()
        return generator.generate(program)

    def make_executor(self, ir: List[IRInstruction]) -> IRExecutor:
        return IRExecutor(ir, stdin=self.stdin, stdout=self.stdout, prompt=self.prompt)

    def run_program(self, program: Program) -> RunResult:
        """Lower a syntax tree to IR and execute it"""
        logger.info("generating IR")
        try:
            ir = self.get_ir(program)
        except Exception as e:
            logger.info("IR generation failed: %s", e)
            return RunResult(success=False, errors=[f"IR generation failed: {e}"])
        return self.run_ir(ir)

    def run_ir(self, ir: List[IRInstruction]) -> RunResult:
        logger.info("executing %d instruction(s)", len(ir))
        try:
            self.make_executor(ir).execute()
        except Exception as e:
            logger.info("execution failed: %s", e)
            return RunResult(success=False, errors=[f"Execution failed: {e}"], ir=ir)
        return RunResult(success=True, ir=ir)

    def load_ir_text(self, text: str) -> RunResult:
        """Decode IR text; `ir` is set on success."""
        try:
            ir = decode_program(text)
        except Exception as e:
            logger.info("IR decoding failed: %s", e)
            return RunResult(success=False, errors=[f"IR decoding failed: {e}"])
        return RunResult(success=True, ir=ir)

    def check_ir_text(self, text: str) -> RunResult:
        """Decode IR text and verify every branch target and callee exists"""
        res = self.load_ir_text(text)
        if not res.success:
            return res
        return self.check_ir(res.ir)

    def check_ir(self, ir: List[IRInstruction]) -> RunResult:
        problems = self.make_executor(ir).check_references()
        return RunResult(success=not problems, errors=problems, ir=ir)

    def run_ir_text(self, text: str) -> RunResult:
        res = self.load_ir_text(text)
        if not res.success:
            return res
        return self.run_ir(res.ir)

    def read_file(self, path: str) -> RunResult:
        """Read IR text from `path` and decode it."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            return RunResult(success=False, errors=[f"Failed to read IR file: {e}"])
        return self.load_ir_text(text)

    def run_file(self, path: str) -> RunResult:
        res = self.read_file(path)
        if not res.success:
            return res
        return self.run_ir(res.ir)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("pyvox")
    root.handlers[:] = [handler]
    root.setLevel(level)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="pyvox", description="Vox IR interpreter")
    ap.add_argument("source", help="Input IR file (one instruction per line)")
    ap.add_argument("--check", action="store_true", help="Verify labels and functions without running")
    ap.add_argument("--dump", action="store_true", help="Print the decoded IR instead of running it")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    args = ap.parse_args(argv)

    _configure_logging(args.verbose)

    interp = Interpreter()
    if args.check or args.dump:
        result = interp.read_file(args.source)
        if result.success and args.check:
            result = interp.check_ir(result.ir)
        if result.ir is not None and args.dump:
            sys.stdout.write(encode_program(result.ir))
    else:
        result = interp.run_file(args.source)

    if not result.success:
        for e in result.errors:
            print("Error:", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
