# =============================================================================
# test_codegen.py - Address Pass Tests
# =============================================================================
# Tests for label resolution (pass 1) and code generation (pass 2).
#
# Test coverage includes:
#   - Label addresses, including jumps reserving their distance byte
#   - ORG repositioning the address cursor
#   - Duplicate labels and running out of memory
#   - Relative jump distances, forward and backward, and their limits
#   - The address -> statement map
# =============================================================================

import pytest
from sim8.assembler.codegen import CodeGenerator, generate
from sim8.assembler.labels import resolve_labels, statement_size
from sim8.assembler.lexer import tokenize
from sim8.assembler.parser import parse
from sim8.errors import (
    DuplicateLabelError,
    EndOfMemoryError,
    JumpDistanceError,
    LabelNotFoundError,
)


def statements_for(source: str) -> list:
    return parse(tokenize(source))


def labels_for(source: str) -> dict:
    return resolve_labels(statements_for(source))


def generate_for(source: str) -> tuple:
    """Helper: run every stage and return (machine_code, statement_map)."""
    statements = statements_for(source)
    return generate(statements, resolve_labels(statements))


# =============================================================================
# Pass 1: Label Resolution
# =============================================================================

class TestLabelResolution:
    """Test label address assignment."""

    def test_label_at_start(self):
        assert labels_for("start:\n mov al, 01\n jmp start\nend") == {"START": 0}

    def test_label_after_instructions(self):
        assert labels_for("nop\nmov al, 01\nloop: inc al\nend") == {"LOOP": 4}

    def test_jump_reserves_distance_byte(self):
        assert labels_for("jmp next\nnext: nop\nend") == {"NEXT": 2}

    def test_statement_size(self):
        jump, nop, end = statements_for("jmp x\nx: nop\nend")
        assert statement_size(jump) == 2
        assert statement_size(nop) == 1
        assert statement_size(end) == 0

    def test_org_moves_cursor(self):
        labels = labels_for("nop\norg 50\ntext: db \"Hi\"\nafter: nop\nend")
        assert labels == {"TEXT": 0x50, "AFTER": 0x52}

    def test_label_on_org(self):
        """A label on ORG takes the address before the move."""
        assert labels_for("nop\nhere: org 50\nend") == {"HERE": 1}

    def test_label_on_end(self):
        assert labels_for("nop\nfinish: end") == {"FINISH": 1}

    def test_duplicate_label(self):
        with pytest.raises(DuplicateLabelError) as exc_info:
            labels_for("a: nop\nb: nop\na: nop\nend")
        error = exc_info.value
        assert error.identifier == "A"
        assert error.range.start_location.line == 3
        assert error.original_range.start_location.line == 1
        assert error.message == "Duplicate label 'A'."

    def test_end_of_memory(self):
        with pytest.raises(EndOfMemoryError) as exc_info:
            labels_for("org fe\nmov al, 01\nend")
        assert exc_info.value.range.start_location.line == 2

    def test_overflow_on_last_statement_tolerated(self):
        """Only a statement that has something after it must fit."""
        statements = statements_for("org fe\nmov al, 01\nend")
        assert resolve_labels(statements[:-1]) == {}

    def test_fits_below_end_of_memory(self):
        assert labels_for("org fc\nlast: mov al, 01\nend") == {"LAST": 0xFC}

    def test_filling_last_byte_then_end(self):
        """Reaching 100 before END counts as running past memory."""
        with pytest.raises(EndOfMemoryError):
            labels_for("org fd\nmov al, 01\nend")


# =============================================================================
# Pass 2: Code Generation
# =============================================================================

class TestCodeGeneration:
    """Test machine code layout and jump distances."""

    def test_backward_jump(self):
        machine_code, _ = generate_for("start:\n mov al, 01\n jmp start\nend")
        assert machine_code == {0: 0xD0, 1: 0x00, 2: 0x01, 3: 0xC0, 4: 0xFD}

    def test_forward_jump(self):
        machine_code, _ = generate_for("jmp skip\nnop\nskip: halt\nend")
        assert machine_code == {0: 0xC0, 1: 0x03, 2: 0xFF, 3: 0x00}

    def test_jump_to_itself(self):
        machine_code, _ = generate_for("here: jmp here\nend")
        assert machine_code == {0: 0xC0, 1: 0x00}

    def test_distance_stored_in_operand(self):
        statements = statements_for("back: nop\njz back\nend")
        generate(statements, resolve_labels(statements))
        jump = statements[1]
        assert jump.operands[0].value == 0xFF
        assert jump.machine_code == [0xC1, 0xFF]

    def test_org_places_code(self):
        machine_code, _ = generate_for('org 50\ndb "Hi"\nend')
        assert machine_code == {0x50: 0x48, 0x51: 0x69}

    def test_max_forward_distance(self):
        machine_code, _ = generate_for("jmp far\norg 7f\nfar: nop\nend")
        assert machine_code[1] == 0x7F

    def test_max_backward_distance(self):
        machine_code, _ = generate_for("back: nop\norg 80\njmp back\nend")
        assert machine_code[0x81] == 0x80

    def test_forward_distance_too_large(self):
        with pytest.raises(JumpDistanceError) as exc_info:
            generate_for("jmp far\norg 80\nfar: nop\nend")
        assert exc_info.value.distance == 128

    def test_backward_distance_too_large(self):
        with pytest.raises(JumpDistanceError) as exc_info:
            generate_for("start: nop\norg c8\njmp start\nend")
        assert exc_info.value.distance == -200
        assert exc_info.value.identifier == "START"

    def test_label_not_found(self):
        with pytest.raises(LabelNotFoundError) as exc_info:
            generate_for("jmp nowhere\nend")
        assert exc_info.value.identifier == "NOWHERE"
        assert exc_info.value.range.start == 4

    def test_label_not_found_suggests_similar(self):
        with pytest.raises(LabelNotFoundError) as exc_info:
            generate_for("loop: nop\njmp lop\nend")
        assert exc_info.value.similar_labels == ["LOOP"]
        assert "LOOP" in exc_info.value.hint

    def test_generator_class_is_reusable(self):
        """A second run over the same statements yields the same bytes."""
        statements = statements_for("start:\n mov al, 01\n jmp start\nend")
        generator = CodeGenerator(resolve_labels(statements))
        expected = {0: 0xD0, 1: 0x00, 2: 0x01, 3: 0xC0, 4: 0xFD}
        assert generator.generate(statements)[0] == expected
        assert generator.generate(statements)[0] == expected

    def test_resolved_jump_keeps_its_size(self):
        statements = statements_for("start:\n mov al, 01\n jmp start\nend")
        generate(statements, resolve_labels(statements))
        assert statements[1].machine_code == [0xC0, 0xFD]
        assert statement_size(statements[1]) == 2
        assert resolve_labels(statements) == {"START": 0}


class TestStatementMap:
    """Test the address -> statement map."""

    def test_every_statement_recorded(self):
        _, statement_map = generate_for("start:\n mov al, 01\n jmp start\nend")
        assert sorted(statement_map) == [0, 3, 5]
        assert statement_map[0].mnemonic == "MOV"
        assert statement_map[3].mnemonic == "JMP"
        assert statement_map[5].mnemonic == "END"

    def test_org_recorded_at_its_start(self):
        _, statement_map = generate_for("nop\norg 10\nhalt\nend")
        assert statement_map[1].mnemonic == "ORG"
        assert statement_map[0x10].mnemonic == "HALT"
        assert statement_map[0x11].mnemonic == "END"

    def test_org_does_not_displace_code(self):
        """An instruction later placed at an ORG's address owns the slot."""
        machine_code, statement_map = generate_for(
            "org 5\nnop\norg 0\nnop\nnop\nnop\nnop\nnop\norg 20\nhalt\nend"
        )
        assert machine_code[5] == 0xFF
        assert statement_map[5].mnemonic == "NOP"
        assert statement_map[0].mnemonic == "NOP"
        assert statement_map[0x20].mnemonic == "HALT"

