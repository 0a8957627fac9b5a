"""
SMS32 Teaching CPU Instruction Set Definition
=============================================

This module defines the instruction set of the 8-bit teaching processor
targeted by the assembler: its mnemonics, opcodes, registers, and the
operand signatures that select an opcode for each combination of
operand types.

Machine Model
-------------
- Four general purpose registers: AL, BL, CL, DL
- 256 bytes of RAM, addresses 00-FF
- All numeric literals are hexadecimal
- Jumps are relative, with a signed 8-bit distance

Operand Types
-------------
The assembler distinguishes six operand types:

| Type             | Syntax   | Example       |
|------------------|----------|---------------|
| NUMBER           | hex      | MOV AL, 15    |
| REGISTER         | name     | INC BL        |
| ADDRESS          | [hex]    | MOV AL, [C0]  |
| REGISTER_ADDRESS | [reg]    | MOV AL, [BL]  |
| STRING           | "text"   | DB "Hello"    |
| LABEL            | name     | JMP start     |

Encoding
--------
Every executable instruction is one opcode byte followed by one byte
per NUMBER/ADDRESS/REGISTER/REGISTER_ADDRESS operand, in source order.
Jumps store one byte of signed distance. ORG and DB carry no opcode, and
END assembles to nothing at all.

Example: MOV AL, 15 -> $D0 $00 $15
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional
import re


# =============================================================================
# Mnemonics
# =============================================================================

class Mnemonic(str, Enum):
    """Instruction and directive names, as written in source (uppercase)."""

    # No operand
    END = "END"
    HALT = "HALT"
    RET = "RET"
    IRET = "IRET"
    PUSHF = "PUSHF"
    POPF = "POPF"
    STI = "STI"
    CLI = "CLI"
    CLO = "CLO"
    NOP = "NOP"

    # One operand
    INC = "INC"
    DEC = "DEC"
    NOT = "NOT"
    ROL = "ROL"
    ROR = "ROR"
    SHL = "SHL"
    SHR = "SHR"
    JMP = "JMP"
    JZ = "JZ"
    JNZ = "JNZ"
    JS = "JS"
    JNS = "JNS"
    JO = "JO"
    JNO = "JNO"
    PUSH = "PUSH"
    POP = "POP"
    CALL = "CALL"
    INT = "INT"
    IN = "IN"
    OUT = "OUT"
    ORG = "ORG"
    DB = "DB"

    # Two operands
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    MOD = "MOD"
    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    MOV = "MOV"
    CMP = "CMP"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Opcodes
# =============================================================================

class Opcode(IntEnum):
    """Numeric encoding of each mnemonic and addressing-mode combination."""

    ADD_REG_TO_REG = 0xA0
    SUB_REG_FROM_REG = 0xA1
    MUL_REG_BY_REG = 0xA2
    DIV_REG_BY_REG = 0xA3
    INC_REG = 0xA4
    DEC_REG = 0xA5
    MOD_REG_BY_REG = 0xA6
    AND_REG_WITH_REG = 0xAA
    OR_REG_WITH_REG = 0xAB
    XOR_REG_WITH_REG = 0xAC
    NOT_REG = 0xAD
    ROL_REG = 0x9A
    ROR_REG = 0x9B
    SHL_REG = 0x9C
    SHR_REG = 0x9D

    ADD_NUM_TO_REG = 0xB0
    SUB_NUM_FROM_REG = 0xB1
    MUL_REG_BY_NUM = 0xB2
    DIV_REG_BY_NUM = 0xB3
    MOD_REG_BY_NUM = 0xB6
    AND_REG_WITH_NUM = 0xBA
    OR_REG_WITH_NUM = 0xBB
    XOR_REG_WITH_NUM = 0xBC

    JMP = 0xC0
    JZ = 0xC1
    JNZ = 0xC2
    JS = 0xC3
    JNS = 0xC4
    JO = 0xC5
    JNO = 0xC6

    MOV_NUM_TO_REG = 0xD0
    MOV_ADDR_TO_REG = 0xD1
    MOV_REG_TO_ADDR = 0xD2
    MOV_REG_ADDR_TO_REG = 0xD3
    MOV_REG_TO_REG_ADDR = 0xD4

    CMP_REG_WITH_REG = 0xDA
    CMP_REG_WITH_NUM = 0xDB
    CMP_REG_WITH_ADDR = 0xDC

    PUSH_FROM_REG = 0xE0
    POP_TO_REG = 0xE1
    PUSHF = 0xEA
    POPF = 0xEB

    CALL_ADDR = 0xCA
    RET = 0xCB
    INT_ADDR = 0xCC
    IRET = 0xCD

    IN_FROM_PORT_TO_AL = 0xF0
    OUT_FROM_AL_TO_PORT = 0xF1

    HALT = 0x00
    STI = 0xFC
    CLI = 0xFD
    CLO = 0xFE
    NOP = 0xFF

    def __repr__(self) -> str:
        return f"Opcode.{self.name}(${self.value:02X})"


# =============================================================================
# Registers and Operand Types
# =============================================================================

class Register(IntEnum):
    """General purpose registers and their index in the register file."""
    AL = 0
    BL = 1
    CL = 2
    DL = 3


class OperandType(Enum):
    """Operand kinds the parser can produce."""
    NUMBER = "Number"
    REGISTER = "Register"
    ADDRESS = "Address"
    REGISTER_ADDRESS = "RegisterAddress"
    STRING = "String"
    LABEL = "Label"

    def __str__(self) -> str:
        return self.value


_NUM = OperandType.NUMBER
_REG = OperandType.REGISTER
_ADDR = OperandType.ADDRESS
_REG_ADDR = OperandType.REGISTER_ADDRESS
_STR = OperandType.STRING
_LABEL = OperandType.LABEL


# A signature pairs the operand types of one addressing form with the
# opcode it assembles to (None for directives without an encoding).
Signature = tuple[tuple[OperandType, ...], Optional[Opcode]]


def _arithmetic(by_register: Opcode, by_number: Opcode) -> tuple[Signature, ...]:
    return (
        ((_REG, _REG), by_register),
        ((_REG, _NUM), by_number),
    )


# =============================================================================
# Signature Table
# =============================================================================
# Key: mnemonic
# Value: ordered signatures; the order of first appearance of each operand
#        type is the order used when reporting what was expected.
# =============================================================================

SIGNATURES: Mapping[Mnemonic, tuple[Signature, ...]] = MappingProxyType({
    # Control
    Mnemonic.END: (((), None),),
    Mnemonic.HALT: (((), Opcode.HALT),),
    Mnemonic.RET: (((), Opcode.RET),),
    Mnemonic.IRET: (((), Opcode.IRET),),
    Mnemonic.PUSHF: (((), Opcode.PUSHF),),
    Mnemonic.POPF: (((), Opcode.POPF),),
    Mnemonic.STI: (((), Opcode.STI),),
    Mnemonic.CLI: (((), Opcode.CLI),),
    Mnemonic.CLO: (((), Opcode.CLO),),
    Mnemonic.NOP: (((), Opcode.NOP),),

    # Register operations
    Mnemonic.INC: (((_REG,), Opcode.INC_REG),),
    Mnemonic.DEC: (((_REG,), Opcode.DEC_REG),),
    Mnemonic.NOT: (((_REG,), Opcode.NOT_REG),),
    Mnemonic.ROL: (((_REG,), Opcode.ROL_REG),),
    Mnemonic.ROR: (((_REG,), Opcode.ROR_REG),),
    Mnemonic.SHL: (((_REG,), Opcode.SHL_REG),),
    Mnemonic.SHR: (((_REG,), Opcode.SHR_REG),),

    # Relative jumps
    Mnemonic.JMP: (((_LABEL,), Opcode.JMP),),
    Mnemonic.JZ: (((_LABEL,), Opcode.JZ),),
    Mnemonic.JNZ: (((_LABEL,), Opcode.JNZ),),
    Mnemonic.JS: (((_LABEL,), Opcode.JS),),
    Mnemonic.JNS: (((_LABEL,), Opcode.JNS),),
    Mnemonic.JO: (((_LABEL,), Opcode.JO),),
    Mnemonic.JNO: (((_LABEL,), Opcode.JNO),),

    # Stack
    Mnemonic.PUSH: (((_REG,), Opcode.PUSH_FROM_REG),),
    Mnemonic.POP: (((_REG,), Opcode.POP_TO_REG),),

    # Procedures, interrupts and ports
    Mnemonic.CALL: (((_NUM,), Opcode.CALL_ADDR),),
    Mnemonic.INT: (((_NUM,), Opcode.INT_ADDR),),
    Mnemonic.IN: (((_NUM,), Opcode.IN_FROM_PORT_TO_AL),),
    Mnemonic.OUT: (((_NUM,), Opcode.OUT_FROM_AL_TO_PORT),),

    # Directives
    Mnemonic.ORG: (((_NUM,), None),),
    Mnemonic.DB: (((_NUM,), None), ((_STR,), None)),

    # Arithmetic and logic
    Mnemonic.ADD: _arithmetic(Opcode.ADD_REG_TO_REG, Opcode.ADD_NUM_TO_REG),
    Mnemonic.SUB: _arithmetic(Opcode.SUB_REG_FROM_REG, Opcode.SUB_NUM_FROM_REG),
    Mnemonic.MUL: _arithmetic(Opcode.MUL_REG_BY_REG, Opcode.MUL_REG_BY_NUM),
    Mnemonic.DIV: _arithmetic(Opcode.DIV_REG_BY_REG, Opcode.DIV_REG_BY_NUM),
    Mnemonic.MOD: _arithmetic(Opcode.MOD_REG_BY_REG, Opcode.MOD_REG_BY_NUM),
    Mnemonic.AND: _arithmetic(Opcode.AND_REG_WITH_REG, Opcode.AND_REG_WITH_NUM),
    Mnemonic.OR: _arithmetic(Opcode.OR_REG_WITH_REG, Opcode.OR_REG_WITH_NUM),
    Mnemonic.XOR: _arithmetic(Opcode.XOR_REG_WITH_REG, Opcode.XOR_REG_WITH_NUM),

    # Data movement
    Mnemonic.MOV: (
        ((_REG, _NUM), Opcode.MOV_NUM_TO_REG),
        ((_REG, _ADDR), Opcode.MOV_ADDR_TO_REG),
        ((_ADDR, _REG), Opcode.MOV_REG_TO_ADDR),
        ((_REG, _REG_ADDR), Opcode.MOV_REG_ADDR_TO_REG),
        ((_REG_ADDR, _REG), Opcode.MOV_REG_TO_REG_ADDR),
    ),
    Mnemonic.CMP: (
        ((_REG, _REG), Opcode.CMP_REG_WITH_REG),
        ((_REG, _NUM), Opcode.CMP_REG_WITH_NUM),
        ((_REG, _ADDR), Opcode.CMP_REG_WITH_ADDR),
    ),
})

OPERAND_COUNTS: Mapping[Mnemonic, int] = MappingProxyType({
    mnemonic: len(signatures[0][0]) for mnemonic, signatures in SIGNATURES.items()
})

REGISTERS: Mapping[str, int] = MappingProxyType(
    {register.name: register.value for register in Register}
)


# =============================================================================
# Instruction Set Value
# =============================================================================

@dataclass(frozen=True)
class InstructionSet:
    """
    Immutable description of an instruction set.

    The lexer and parser receive one of these at construction rather
    than consulting module globals, so an alternative table can be
    swapped in or a reduced one used in tests.

    Attributes:
        signatures: Mnemonic name -> ordered operand signatures
        registers: Register name -> register index
        terminator: Mnemonic that ends the program (END)
        origin: Directive that moves the address cursor (ORG)
        data: Directive that places raw bytes (DB)
    """
    signatures: Mapping[str, tuple[Signature, ...]] = field(
        default_factory=lambda: MappingProxyType(
            {str(m): s for m, s in SIGNATURES.items()}
        )
    )
    registers: Mapping[str, int] = field(default_factory=lambda: REGISTERS)
    terminator: str = Mnemonic.END.value
    origin: str = Mnemonic.ORG.value
    data: str = Mnemonic.DB.value

    def __post_init__(self) -> None:
        for name, signatures in self.signatures.items():
            if not signatures:
                raise ValueError(f"mnemonic '{name}' has no operand signature")
            counts = {len(types) for types, _ in signatures}
            if len(counts) != 1:
                raise ValueError(f"mnemonic '{name}' mixes operand counts {sorted(counts)}")
            if counts.pop() > 2:
                raise ValueError(f"mnemonic '{name}' takes more than two operands")
        for name in (self.terminator, self.origin):
            if name not in self.signatures:
                raise ValueError(f"directive '{name}' is not in the signature table")

    def is_mnemonic(self, name: str) -> bool:
        return name in self.signatures

    def operand_count(self, mnemonic: str) -> int:
        return len(self.signatures[mnemonic][0][0])

    def signatures_for(self, mnemonic: str) -> tuple[Signature, ...]:
        return self.signatures[mnemonic]

    def is_register(self, name: str) -> bool:
        return name in self.registers

    def register_index(self, name: str) -> int:
        return self.registers[name]

    def register_pattern(self) -> str:
        """Regex alternation matching any register name, case-insensitively."""
        names = sorted(self.registers, key=len, reverse=True)
        return "|".join(re.escape(name) for name in names)


DEFAULT_INSTRUCTION_SET = InstructionSet()


def get_opcode(mnemonic: str, operand_types: tuple[OperandType, ...],
               instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET) -> Optional[Opcode]:
    """
    Look up the opcode for a mnemonic and its operand types.

    Returns:
        The opcode, or None when the combination carries no encoding.

    Raises:
        KeyError: If the combination is not a valid addressing form.
    """
    for types, opcode in instruction_set.signatures_for(mnemonic):
        if types == operand_types:
            return opcode
    raise KeyError((mnemonic, operand_types))
