"""
Code Generation (Pass 2)
========================

The second address-computation pass. Re-walks the statements with a
fresh address cursor, resolves each jump's label into a signed relative
distance, and lays the machine code out in memory.

Relative Distances
------------------
A jump stores `target - address`, where `address` is the address of the
jump's own opcode byte, as a two's-complement byte:

    start:              ; address 00
        MOV AL, 01      ; 00: D0 00 01
        JMP start       ; 03: C0 FD      (00 - 03 = -3 = $FD)
    END

Distances outside -128..+127 cannot be encoded and are rejected.

Output
------
- machine code map: address -> byte, only for addresses written
- statement map: address -> the statement that starts there. ORG and END
  emit no bytes; they get an entry only where no code starts at that
  address, so a lookup by program counter always finds the instruction
"""

import difflib
import logging

from sim8.errors import JumpDistanceError, LabelNotFoundError
from sim8.assembler.labels import LabelToAddressMap
from sim8.assembler.parser import Statement
from sim8.isa import DEFAULT_INSTRUCTION_SET, InstructionSet
from sim8.utils import unsign8

logger = logging.getLogger(__name__)

MIN_DISTANCE = -128
MAX_DISTANCE = 127

AddressToMachineCodeMap = dict[int, int]
AddressToStatementMap = dict[int, Statement]


class CodeGenerator:
    """
    Lays out machine code and resolves jump distances.

    Usage:
        labels = resolve_labels(statements)
        machine_code, statement_map = CodeGenerator(labels).generate(statements)
    """

    def __init__(
        self,
        labels: LabelToAddressMap,
        instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET,
    ):
        self._labels = labels
        self._isa = instruction_set
        self._address = 0

    def generate(
        self,
        statements: list[Statement],
    ) -> tuple[AddressToMachineCodeMap, AddressToStatementMap]:
        """
        Generate the address maps.

        Raises:
            LabelNotFoundError: If a jump names an undeclared label
            JumpDistanceError: If a jump target is out of range
        """
        machine_code: AddressToMachineCodeMap = {}
        statement_map: AddressToStatementMap = {}
        self._address = 0

        for statement in statements:
            start = self._address

            if statement.mnemonic == self._isa.origin:
                statement_map.setdefault(start, statement)
                self._address = statement.operands[0].value
                continue

            if statement.has_label_operand():
                self._resolve_distance(statement)

            # Zero-byte statements never displace code placed at the same address
            if statement.machine_code:
                statement_map[start] = statement
            else:
                statement_map.setdefault(start, statement)

            for offset, byte in enumerate(statement.machine_code):
                machine_code[start + offset] = byte
            self._address = start + len(statement.machine_code)

        logger.debug(
            f"Generated {len(machine_code)} bytes for {len(statements)} statements"
        )
        return machine_code, statement_map

    def _resolve_distance(self, statement: Statement) -> None:
        """Store the jump distance in the label operand and its machine code."""
        operand = statement.operands[0]
        identifier = operand.raw_value

        if identifier not in self._labels:
            similar = difflib.get_close_matches(identifier, self._labels, n=3)
            raise LabelNotFoundError(identifier, operand.range, similar_labels=similar)

        distance = self._labels[identifier] - self._address
        if distance < MIN_DISTANCE or distance > MAX_DISTANCE:
            raise JumpDistanceError(identifier, distance, operand.range)

        operand.value = unsign8(distance)
        statement.machine_code.append(operand.value)


def generate(
    statements: list[Statement],
    labels: LabelToAddressMap,
    instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET,
) -> tuple[AddressToMachineCodeMap, AddressToStatementMap]:
    """Convenience function: run pass 2 with a fresh CodeGenerator."""
    return CodeGenerator(labels, instruction_set).generate(statements)
