# =============================================================================
# test_errors.py - Error Taxonomy Tests
# =============================================================================
# Tests for the sim8 error hierarchy: class relationships, messages,
# caret formatting and the serialisable record.
# =============================================================================

import pytest
from sim8.errors import (
    AddressError,
    AssemblerError,
    AssemblySyntaxError,
    DuplicateLabelError,
    EndOfMemoryError,
    InvalidNumberError,
    JumpDistanceError,
    LabelError,
    LabelNotFoundError,
    MissingEndError,
    OperandTypeError,
    Sim8Error,
    SourceLocation,
    SourceRange,
    StatementError,
    ValueRangeError,
)


def make_range(start: int, end: int, line: int = 1, column: int = 0) -> SourceRange:
    return SourceRange(
        start, end,
        SourceLocation(line, column),
        SourceLocation(line, column + end - start),
    )


class TestHierarchy:
    """Every error kind sits under its category."""

    @pytest.mark.parametrize("error,category", [
        (MissingEndError(), AssemblySyntaxError),
        (StatementError("x", make_range(0, 1), has_label=False), AssemblySyntaxError),
        (DuplicateLabelError("A", make_range(0, 1)), LabelError),
        (LabelNotFoundError("A", make_range(0, 1)), LabelError),
        (InvalidNumberError("100", make_range(0, 3)), ValueRangeError),
        (JumpDistanceError("A", 200, make_range(0, 1)), ValueRangeError),
        (EndOfMemoryError(make_range(0, 1)), ValueRangeError),
        (AddressError("[XX]", make_range(0, 4)), OperandTypeError),
    ])
    def test_category(self, error, category):
        assert isinstance(error, category)
        assert isinstance(error, AssemblerError)
        assert isinstance(error, Sim8Error)

    def test_name_is_class_name(self):
        assert EndOfMemoryError(make_range(0, 1)).name == "EndOfMemoryError"


class TestMessages:
    """Test the human-readable messages."""

    def test_duplicate_label_hint(self):
        error = DuplicateLabelError("LOOP", make_range(10, 14, line=3),
                                    original_range=make_range(0, 4))
        assert error.message == "Duplicate label 'LOOP'."
        assert error.hint == "'LOOP' was first defined at 1:0"

    def test_label_not_found_without_suggestions(self):
        error = LabelNotFoundError("X", make_range(0, 1))
        assert error.hint is None
        assert error.similar_labels == []

    def test_jump_distance(self):
        error = JumpDistanceError("START", -200, make_range(0, 5))
        assert error.message == "Jump distance should be between -128 and 127, got -200."

    def test_operand_type_lists_expected(self):
        error = OperandTypeError("5", ["REGISTER", "NUMBER"], make_range(0, 1))
        assert error.message == "Expected register or number, got '5'."

    def test_operand_type_multiword(self):
        error = OperandTypeError("5", ["REGISTER", "ADDRESS", "REGISTER_ADDRESS"],
                                 make_range(0, 1))
        assert error.message == "Expected register, address or register address, got '5'."

    def test_missing_end_default_range(self):
        error = MissingEndError()
        assert error.range.start == 0
        assert error.range.start_location == SourceLocation(1, 0)


class TestFormatting:
    """Test caret diagnostics."""

    def test_format_without_source(self):
        error = InvalidNumberError("100", make_range(8, 11, column=8))
        assert error.format() == "1:8: error: Number '100' is greater than FF."

    def test_format_with_source_and_hint(self):
        error = MissingEndError(make_range(3, 3, line=1, column=3))
        error.attach_source("nop")
        assert error.format().splitlines() == [
            "1:3: error: Expected END at the end of the source.",
            "nop",
            "   ^",
            "hint: add END as the last statement",
        ]

    def test_attach_source_picks_line(self):
        error = EndOfMemoryError(make_range(4, 7, line=2))
        error.attach_source("nop\nnop\nend")
        assert error.source_line == "nop"

    def test_attach_source_out_of_range_line(self):
        error = EndOfMemoryError(make_range(0, 1, line=9))
        error.attach_source("nop")
        assert error.source_line is None


class TestRecords:
    """Test to_dict() records."""

    def test_to_dict(self):
        error = InvalidNumberError("100", make_range(12, 15, line=2, column=8))
        assert error.to_dict() == {
            "name": "InvalidNumberError",
            "message": "Number '100' is greater than FF.",
            "range": {
                "start": 12,
                "end": 15,
                "loc": {
                    "start": {"line": 2, "column": 8},
                    "end": {"line": 2, "column": 11},
                },
            },
        }

    def test_span(self):
        first = make_range(0, 3)
        last = make_range(8, 10, column=8)
        span = SourceRange.span(first, last)
        assert (span.start, span.end) == (0, 10)
        assert span.end_location == SourceLocation(1, 10)
