"""
Label Resolution (Pass 1)
=========================

The first address-computation pass. Walks the statements with an address
cursor starting at 0, binding each label to the address of the statement
it precedes.

- ORG moves the cursor to its operand and occupies no space itself.
- Every other statement advances the cursor by its machine code length,
  plus one byte for a jump whose distance is not yet known.
- Running past address FF is only tolerated once no statement is left to
  place.
"""

import logging

from sim8.errors import DuplicateLabelError, EndOfMemoryError, SourceRange
from sim8.assembler.parser import Statement
from sim8.isa import DEFAULT_INSTRUCTION_SET, InstructionSet

logger = logging.getLogger(__name__)

MAX_ADDRESS = 0xFF

LabelToAddressMap = dict[str, int]


def statement_size(statement: Statement) -> int:
    """
    Size in bytes of a statement once fully assembled.

    A pending label operand reserves the one byte its distance will
    occupy.
    """
    return len(statement.machine_code) + (1 if statement.has_label_operand() else 0)


def resolve_labels(
    statements: list[Statement],
    instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET,
) -> LabelToAddressMap:
    """
    Compute the address of every label.

    Args:
        statements: Parsed statements, in source order
        instruction_set: Supplies the ORG directive name

    Returns:
        Label identifier -> address

    Raises:
        DuplicateLabelError: At the second declaration of a label
        EndOfMemoryError: If a statement other than the last one ends
            beyond address FF
    """
    labels: LabelToAddressMap = {}
    declared_at: dict[str, SourceRange] = {}
    address = 0
    last_index = len(statements) - 1

    for index, statement in enumerate(statements):
        label = statement.label
        if label is not None:
            if label.identifier in labels:
                raise DuplicateLabelError(
                    label.identifier,
                    label.range,
                    original_range=declared_at[label.identifier],
                )
            labels[label.identifier] = address
            declared_at[label.identifier] = label.range

        if statement.mnemonic == instruction_set.origin:
            address = statement.operands[0].value
            continue

        address += statement_size(statement)
        if address > MAX_ADDRESS and index != last_index:
            raise EndOfMemoryError(statement.range)

    logger.debug(f"Resolved {len(labels)} labels")
    return labels
