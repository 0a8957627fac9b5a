# =============================================================================
# test_isa.py - Instruction Set Table Tests
# =============================================================================
# Tests for the SMS32 instruction-set tables and the InstructionSet value.
# =============================================================================

import pytest
from types import MappingProxyType

from sim8.assembler import assemble, tokenize
from sim8.isa import (
    DEFAULT_INSTRUCTION_SET,
    OPERAND_COUNTS,
    SIGNATURES,
    InstructionSet,
    Mnemonic,
    Opcode,
    OperandType,
    get_opcode,
)


class TestTables:

    def test_every_mnemonic_has_signatures(self):
        assert set(SIGNATURES) == set(Mnemonic)

    def test_operand_counts(self):
        assert OPERAND_COUNTS[Mnemonic.END] == 0
        assert OPERAND_COUNTS[Mnemonic.JMP] == 1
        assert OPERAND_COUNTS[Mnemonic.MOV] == 2

    def test_opcodes_are_unique(self):
        assert len({int(op) for op in Opcode}) == len(Opcode)

    def test_get_opcode(self):
        types = (OperandType.REGISTER, OperandType.ADDRESS)
        assert get_opcode("MOV", types) == Opcode.MOV_ADDR_TO_REG
        assert get_opcode("DB", (OperandType.STRING,)) is None

    def test_get_opcode_invalid_form(self):
        with pytest.raises(KeyError):
            get_opcode("INC", (OperandType.NUMBER,))


class TestInstructionSet:

    def test_default_lookups(self):
        isa = DEFAULT_INSTRUCTION_SET
        assert isa.is_mnemonic("MOV")
        assert not isa.is_mnemonic("mov")
        assert isa.register_index("DL") == 3
        assert not isa.is_register("EL")

    def test_mixed_operand_counts_rejected(self):
        signatures = {
            "END": (((), None),),
            "ORG": (((OperandType.NUMBER,), None),),
            "BAD": (((), Opcode.NOP), ((OperandType.REGISTER,), Opcode.INC_REG)),
        }
        with pytest.raises(ValueError):
            InstructionSet(signatures=MappingProxyType(signatures))

    def test_missing_terminator_rejected(self):
        with pytest.raises(ValueError):
            InstructionSet(signatures=MappingProxyType({"NOP": (((), Opcode.NOP),)}))

    def test_reduced_instruction_set(self):
        """A smaller table limits what the assembler accepts."""
        isa = InstructionSet(signatures=MappingProxyType({
            "END": (((), None),),
            "ORG": (((OperandType.NUMBER,), None),),
            "NOP": (((), Opcode.NOP),),
        }))
        assert assemble("nop\nend", isa).machine_code == {0: 0xFF}
        assert len(tokenize("halt\nend", isa)) == 2

    def test_custom_registers(self):
        isa = InstructionSet(registers=MappingProxyType({"AL": 0, "BL": 1}))
        assert [t.type.name for t in tokenize("cl", isa)] == ["UNKNOWN"]
