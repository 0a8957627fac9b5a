"""
Two-Pass Assembler for the SMS32 Teaching CPU
=============================================

This package converts assembly source text into the machine code of an
8-bit teaching processor with 256 bytes of RAM, together with a map from
each address back to the statement that produced it (used by simulators
to highlight the executing line).

Main Components
---------------
- **Assembler**: Orchestrates the stages and writes output files
- **Lexer**: Tokenizes assembly source into tokens
- **Parser**: Parses tokens into statements and selects opcodes
- **resolve_labels**: Pass 1, computes the address of every label
- **CodeGenerator**: Pass 2, resolves jump distances and lays out memory

Assembly Process
----------------
1. **Lexing**: source -> tokens (stops after END)
2. **Parsing**: tokens -> statements with partial machine code
3. **Pass 1**: statements -> label addresses
4. **Pass 2**: statements + labels -> machine code map, statement map

The first error stops assembly and is raised as an AssemblerError
subclass carrying the source range to underline.

Example Usage
-------------
>>> from sim8.assembler import assemble
>>> machine_code, statements = assemble("mov al, 01\\nend")
>>> machine_code
{0: 208, 1: 0, 2: 1}
"""

from sim8.assembler.assembler import (
    Assembler,
    AssemblyOutcome,
    AssemblyResult,
    assemble,
    assemble_file,
    try_assemble,
)
from sim8.assembler.lexer import Lexer, Token, TokenType, tokenize
from sim8.assembler.parser import Parser, Statement, Instruction, Operand, Label, parse
from sim8.assembler.labels import LabelToAddressMap, resolve_labels
from sim8.assembler.codegen import (
    AddressToMachineCodeMap,
    AddressToStatementMap,
    CodeGenerator,
    generate,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyOutcome",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    "try_assemble",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "Statement",
    "Instruction",
    "Operand",
    "Label",
    "parse",
    # Pass 1
    "LabelToAddressMap",
    "resolve_labels",
    # Pass 2
    "AddressToMachineCodeMap",
    "AddressToStatementMap",
    "CodeGenerator",
    "generate",
]
