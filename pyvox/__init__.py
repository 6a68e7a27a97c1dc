"""
PyVox - IR builder and interpreter for the Vox language

Lowers a Vox syntax tree to a flat three-address IR and runs that IR on a
stack-based interpreter.
"""

__version__ = "0.1.0"
__author__ = "PyVox Contributors"
__license__ = "MIT"

from .ir import IRGenerator, IRInstruction, IRError, decode_program, encode_program
from .executor import IRExecutor, ExecutionError, StructuralError, RuntimeTypeError
from .driver import Interpreter, RunResult

__all__ = [
    'IRGenerator',
    'IRInstruction',
    'IRError',
    'decode_program',
    'encode_program',
    'IRExecutor',
    'ExecutionError',
    'StructuralError',
    'RuntimeTypeError',
    'Interpreter',
    'RunResult',
]
