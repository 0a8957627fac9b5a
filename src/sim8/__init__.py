"""
sim8 - Assembler for an 8-bit Teaching CPU
==========================================

This package assembles programs for the SMS32 teaching processor: four
general purpose registers (AL, BL, CL, DL), 256 bytes of RAM and
relative jumps. It is meant to sit behind a simulator or an editor that
highlights the statement being executed.

Main Components
---------------
- **assembler**: lexer, parser, two address passes and the Assembler
  front end
- **isa**: mnemonics, opcodes, registers and operand signatures
- **errors**: the assembly error taxonomy, each error carrying a source
  range
- **cli**: the sim8asm command-line tool

Quick Start
-----------
    >>> from sim8 import assemble
    >>> machine_code, statements = assemble('''
    ... start:
    ...     mov al, 01
    ...     jmp start
    ... end
    ... ''')
    >>> sorted(machine_code.items())
    [(0, 208), (1, 0), (2, 1), (3, 192), (4, 253)]

Or use the command-line tool:
    $ sim8asm hello.asm -o hello.bin -l hello.lst
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sim8.assembler import (
    Assembler,
    AssemblyOutcome,
    AssemblyResult,
    assemble,
    assemble_file,
    try_assemble,
)
from sim8.config import AssemblerConfig
from sim8.errors import (
    Sim8Error,
    SourceLocation,
    SourceRange,
    AssemblerError,
    AssemblySyntaxError,
    LabelError,
    ValueRangeError,
    OperandTypeError,
)
from sim8.isa import DEFAULT_INSTRUCTION_SET, InstructionSet

__all__ = [
    # Version
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyOutcome",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    "try_assemble",
    "AssemblerConfig",
    # Instruction set
    "DEFAULT_INSTRUCTION_SET",
    "InstructionSet",
    # Errors
    "Sim8Error",
    "SourceLocation",
    "SourceRange",
    "AssemblerError",
    "AssemblySyntaxError",
    "LabelError",
    "ValueRangeError",
    "OperandTypeError",
]
