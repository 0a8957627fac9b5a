"""
sim8 Error Hierarchy
====================

This module defines the exception hierarchy for the sim8 assembler.
All exceptions inherit from Sim8Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Sim8Error (base)
└── AssemblerError (assembly-domain errors, always carry a source range)
    ├── AssemblySyntaxError - malformed source text
    │   ├── UnterminatedAddressError - '[' without matching ']'
    │   ├── UnterminatedStringError - '"' without matching '"'
    │   ├── SingleQuoteError - single-quoted literal (not supported)
    │   ├── StatementError - missing or unknown instruction
    │   ├── MissingCommaError - two operands not separated by ','
    │   └── MissingEndError - program does not end with END
    ├── LabelError - label declaration or reference problems
    │   ├── InvalidLabelError - identifier does not match [A-Z_]+
    │   ├── DuplicateLabelError - label declared twice
    │   └── LabelNotFoundError - reference to an undeclared label
    ├── ValueRangeError - value does not fit the 8-bit machine
    │   ├── InvalidNumberError - literal greater than FF
    │   ├── InvalidStringError - character code greater than 255
    │   ├── JumpDistanceError - relative distance outside -128..127
    │   └── EndOfMemoryError - program does not fit in 256 bytes
    └── OperandTypeError - operand kind not accepted here
        └── AddressError - bracket contents neither number nor register

Design Philosophy
-----------------
Each assembly error is a value carrying its kind (the class name), a
human-readable message and the source range it refers to. The range is
precise enough for an editor to underline the offending text, and
to_dict() turns the error into a plain record for transport across a
process or UI boundary.

Error messages follow this format:
    line:column: error: description
    source_line_text
        ^^^^^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Sim8Error(Exception):
    """
    Base exception for all sim8 errors.

        try:
            assemble(source)
        except Sim8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (0-indexed)
    """
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True)
class SourceRange:
    """
    A span of source text used for diagnostics.

    Attributes:
        start: Absolute character offset of the first character
        end: Absolute character offset one past the last character
        start_location: Line/column of the first character
        end_location: Line/column one past the last character
    """
    start: int
    end: int
    start_location: SourceLocation
    end_location: SourceLocation

    def __str__(self) -> str:
        return str(self.start_location)

    @classmethod
    def span(cls, first: "SourceRange", last: "SourceRange") -> "SourceRange":
        """Build the range covering `first` through `last`."""
        return cls(first.start, last.end, first.start_location, last.end_location)

    @classmethod
    def empty(cls, offset: int = 0, line: int = 1, column: int = 0) -> "SourceRange":
        """A zero-width range, used when there is no token to point at."""
        location = SourceLocation(line, column)
        return cls(offset, offset, location, location)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "loc": {
                "start": self.start_location.to_dict(),
                "end": self.end_location.to_dict(),
            },
        }


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Sim8Error):
    """
    Base exception for all assembly-domain errors.

    Attributes:
        message: The error description
        range: Where in the source the error occurred
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional,
            attached by the Assembler once the source is known)
    """

    def __init__(
        self,
        message: str,
        range: Optional[SourceRange] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.range = range if range is not None else SourceRange.empty()
        self.hint = hint
        self.source_line = source_line
        super().__init__(message)

    @property
    def name(self) -> str:
        """Kind discriminator, stable across the process boundary."""
        return type(self).__name__

    def __str__(self) -> str:
        return self.format()

    def format(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            3:6: error: Label 'LOOP' is already defined.
            loop:
            ^^^^
        """
        location = self.range.start_location
        parts = [f"{location}: error: {self.message}"]

        if self.source_line is not None:
            parts.append(self.source_line)
            width = 1
            if self.range.end_location.line == location.line:
                width = max(1, self.range.end_location.column - location.column)
            parts.append(" " * location.column + "^" * width)

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def attach_source(self, source: str) -> "AssemblerError":
        """Remember the offending line of `source` for caret diagnostics."""
        lines = source.splitlines()
        index = self.range.start_location.line - 1
        if 0 <= index < len(lines):
            self.source_line = lines[index]
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain serialisable record: name, message and range."""
        return {
            "name": self.name,
            "message": self.message,
            "range": self.range.to_dict(),
        }


# =============================================================================
# Syntactic and Lexical Errors
# =============================================================================

class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised when the parser meets text that cannot form a statement:
    a missing instruction, a missing comma, or a literal whose closing
    delimiter never appears.
    """
    pass


class UnterminatedAddressError(AssemblySyntaxError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(f"Unterminated square brackets '{raw}'.", range,
                         hint="addresses are written as [C0] or [BL]")


class UnterminatedStringError(AssemblySyntaxError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(f"Unterminated string '{raw}'.", range)


class SingleQuoteError(AssemblySyntaxError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(
            f"Single quote is not allowed: '{raw}'.", range,
            hint="use double quotes for string literals",
        )


class StatementError(AssemblySyntaxError):
    """
    Expected an instruction but found something else.

    The message differs depending on whether a label was already read,
    since after a label only an instruction may follow.
    """

    def __init__(self, raw: str, range: SourceRange, has_label: bool):
        self.has_label = has_label
        expected = "instruction" if has_label else "label or instruction"
        super().__init__(f"Expected {expected}, got '{raw}'.", range)


class MissingCommaError(AssemblySyntaxError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(f"Expected comma, got '{raw}'.", range)


class MissingEndError(AssemblySyntaxError):
    """The program must finish with the END instruction."""

    def __init__(self, range: Optional[SourceRange] = None):
        super().__init__("Expected END at the end of the source.", range,
                         hint="add END as the last statement")


# =============================================================================
# Label Errors
# =============================================================================

class LabelError(AssemblerError):
    """Base class for label declaration and reference errors."""
    pass


class InvalidLabelError(LabelError):
    def __init__(self, identifier: str, range: SourceRange):
        self.identifier = identifier
        super().__init__(
            f"Label should contain only letters or underscores, got '{identifier}'.",
            range,
        )


class DuplicateLabelError(LabelError):
    """
    Label declared more than once.

    The range points at the second declaration; the first one is
    reported in the hint when known.
    """

    def __init__(
        self,
        identifier: str,
        range: SourceRange,
        original_range: Optional[SourceRange] = None,
    ):
        self.identifier = identifier
        self.original_range = original_range
        hint = None
        if original_range is not None:
            hint = f"'{identifier}' was first defined at {original_range}"
        super().__init__(f"Duplicate label '{identifier}'.", range, hint=hint)


class LabelNotFoundError(LabelError):
    def __init__(
        self,
        identifier: str,
        range: SourceRange,
        similar_labels: Optional[Iterable[str]] = None,
    ):
        self.identifier = identifier
        self.similar_labels = list(similar_labels or [])
        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"
        super().__init__(f"Label '{identifier}' does not exist.", range, hint=hint)


# =============================================================================
# Value Range Errors
# =============================================================================

class ValueRangeError(AssemblerError):
    """Base class for values that do not fit the 8-bit machine."""
    pass


class InvalidNumberError(ValueRangeError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(f"Number '{raw}' is greater than FF.", range)


class InvalidStringError(ValueRangeError):
    def __init__(self, char: str, index: int, range: SourceRange):
        self.char = char
        self.index = index
        super().__init__(
            f"Character code of '{char}' is greater than FF.", range
        )


class JumpDistanceError(ValueRangeError):
    """
    Relative jump target is out of range.

    Jump instructions store a signed 8-bit distance, limiting the
    target to -128..+127 bytes from the jump itself.
    """

    def __init__(self, identifier: str, distance: int, range: SourceRange):
        self.identifier = identifier
        self.distance = distance
        super().__init__(
            f"Jump distance should be between -128 and 127, got {distance}.",
            range,
            hint=f"move '{identifier}' closer to the jump",
        )


class EndOfMemoryError(ValueRangeError):
    def __init__(self, range: SourceRange):
        super().__init__("Can not generate code beyond the end of RAM.", range)


# =============================================================================
# Operand Shape Errors
# =============================================================================

class OperandTypeError(AssemblerError):
    """
    Operand kind not accepted by the instruction at this position.

    Example:
        INC 12      ; Error: INC expects a register
    """

    def __init__(
        self,
        raw: str,
        expected: Iterable[str],
        range: SourceRange,
        message: Optional[str] = None,
    ):
        self.expected = list(expected)
        if message is None:
            names = [e.lower().replace("_", " ") for e in self.expected]
            if len(names) > 1:
                wanted = ", ".join(names[:-1]) + " or " + names[-1]
            else:
                wanted = names[0] if names else "operand"
            message = f"Expected {wanted}, got '{raw}'."
        super().__init__(message, range)


class AddressError(OperandTypeError):
    def __init__(self, raw: str, range: SourceRange):
        super().__init__(
            raw, ["NUMBER", "REGISTER"], range,
            message=f"Expected a number or register inside brackets, got '{raw}'.",
        )
