"""
sim8 Instruction Set Package
============================

Instruction-set tables consulted by the assembler: mnemonics, opcodes,
registers, and the operand signatures that choose an opcode.

Usage:
    from sim8.isa import (
        DEFAULT_INSTRUCTION_SET,
        Mnemonic,
        Opcode,
        OperandType,
    )
"""

from sim8.isa.sms32 import (
    # Core types
    Mnemonic,
    Opcode,
    Register,
    OperandType,
    Signature,
    InstructionSet,
    # Tables
    SIGNATURES,
    OPERAND_COUNTS,
    REGISTERS,
    DEFAULT_INSTRUCTION_SET,
    # Lookup functions
    get_opcode,
)

__all__ = [
    # Core types
    "Mnemonic",
    "Opcode",
    "Register",
    "OperandType",
    "Signature",
    "InstructionSet",
    # Tables
    "SIGNATURES",
    "OPERAND_COUNTS",
    "REGISTERS",
    "DEFAULT_INSTRUCTION_SET",
    # Lookup functions
    "get_opcode",
]
