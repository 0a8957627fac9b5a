"""
Assembly Language Parser
========================

This module implements the parser for the teaching CPU's assembly
language. It converts the token list produced by the lexer into
statements, choosing the concrete opcode of every instruction from the
types of its operands.

Statement Grammar
-----------------
```
statement := [ LABEL ":" ] MNEMONIC operands
operands  := (nothing) | operand | operand "," operand
```

The number of operands is fixed per mnemonic by the instruction set.

Operand Syntax
--------------
| Syntax   | Operand type     | Example       |
|----------|------------------|---------------|
| hex      | NUMBER           | MOV AL, 15    |
| reg      | REGISTER         | INC BL        |
| [hex]    | ADDRESS          | MOV AL, [C0]  |
| [reg]    | REGISTER_ADDRESS | MOV [CL], AL  |
| "text"   | STRING           | DB "Hello"    |
| name     | LABEL            | JNZ loop      |

Opcode Selection
----------------
Many mnemonics assemble to different opcodes depending on their
operands. MOV, for example, has five forms:

    MOV AL, 15      -> MOV_NUM_TO_REG
    MOV AL, [15]    -> MOV_ADDR_TO_REG
    MOV [15], AL    -> MOV_REG_TO_ADDR
    MOV AL, [BL]    -> MOV_REG_ADDR_TO_REG
    MOV [CL], AL    -> MOV_REG_TO_REG_ADDR

The first operand is parsed against every type any form accepts in
first position; the second operand is then parsed against the types of
only those forms whose first operand matched.

Machine code for each statement is assembled here for every operand
whose value is known. A label operand's distance byte is appended later
by the code generator.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union
import logging
import re

from sim8.errors import (
    AddressError,
    InvalidLabelError,
    InvalidNumberError,
    InvalidStringError,
    MissingCommaError,
    MissingEndError,
    OperandTypeError,
    SingleQuoteError,
    SourceRange,
    StatementError,
    UnterminatedAddressError,
    UnterminatedStringError,
)
from sim8.assembler.lexer import Token, TokenType
from sim8.isa import (
    DEFAULT_INSTRUCTION_SET,
    InstructionSet,
    Opcode,
    OperandType,
    get_opcode,
)
from sim8.utils import hex_to_dec, string_to_ascii

logger = logging.getLogger(__name__)

LABEL_PATTERN = re.compile(r"^[A-Z_]+$")
NUMBER_PATTERN = re.compile(r"^[0-9A-F]+$")

OperandValue = Union[int, tuple[int, ...], None]


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass(frozen=True)
class Label:
    """
    Label declaration.

    Attributes:
        identifier: Label name (uppercase, letters and underscores only)
        range: Where the name appears in the source
    """
    identifier: str
    range: SourceRange


@dataclass
class Instruction:
    """
    Instruction mnemonic and its selected opcode.

    `opcode` is None for directives (ORG, DB) and for END.
    """
    mnemonic: str
    range: SourceRange
    opcode: Optional[Opcode] = None


@dataclass
class Operand:
    """
    Instruction operand.

    Attributes:
        type: The operand type
        value: Byte value for NUMBER/ADDRESS, register index for
            REGISTER/REGISTER_ADDRESS, byte tuple for STRING, and for
            LABEL None until the code generator stores the distance
        raw_value: Normalised token text (label identifier, hex digits)
        raw: Token text as written
        range: Where the operand appears in the source
    """
    type: OperandType
    value: OperandValue
    raw_value: str
    raw: str
    range: SourceRange


@dataclass
class Statement:
    """
    One parsed statement: optional label, instruction, operands and the
    machine code assembled so far.

    The range spans the instruction through its last operand.
    """
    label: Optional[Label]
    instruction: Instruction
    operands: list[Operand] = field(default_factory=list)
    machine_code: list[int] = field(default_factory=list)
    range: Optional[SourceRange] = None

    def __post_init__(self) -> None:
        if self.range is None:
            last = self.operands[-1] if self.operands else self.instruction
            self.range = SourceRange.span(self.instruction.range, last.range)

    @property
    def mnemonic(self) -> str:
        return self.instruction.mnemonic

    @property
    def first_operand(self) -> Optional[Operand]:
        return self.operands[0] if self.operands else None

    def has_label_operand(self) -> bool:
        """True if the first operand is a label whose distance is not yet known."""
        operand = self.first_operand
        return (
            operand is not None
            and operand.type == OperandType.LABEL
            and operand.value is None
        )


def build_machine_code(instruction: Instruction, operands: Iterable[Operand]) -> list[int]:
    """Opcode byte (if any) followed by every known operand value."""
    machine_code: list[int] = []
    if instruction.opcode is not None:
        machine_code.append(int(instruction.opcode))
    for operand in operands:
        if operand.value is None:
            continue
        if isinstance(operand.value, tuple):
            machine_code.extend(operand.value)
        else:
            machine_code.append(operand.value)
    return machine_code


def _unique(types: Iterable[OperandType]) -> list[OperandType]:
    seen: list[OperandType] = []
    for operand_type in types:
        if operand_type not in seen:
            seen.append(operand_type)
    return seen


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses assembly tokens into statements.

    Parsing stops at the first error; there is no recovery.

    Usage:
        tokens = Lexer(source).tokenize()
        parser = Parser(tokens)
        statements = parser.parse()
    """

    def __init__(self, tokens: list[Token], instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET):
        self._tokens = tokens
        self._isa = instruction_set
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into statements.

        Returns:
            List of Statement objects, the last one being END

        Raises:
            AssemblerError: On the first malformed statement, or
                MissingEndError if the program does not end with END
        """
        statements: list[Statement] = []

        while not self._at_end():
            statements.append(self._parse_statement())

        if not statements or statements[-1].mnemonic != self._isa.terminator:
            raise MissingEndError(self._end_range())

        logger.debug(f"Parsed {len(statements)} statements")
        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _current(self) -> Optional[Token]:
        return self._peek(0)

    def _peek(self, offset: int) -> Optional[Token]:
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return None
        return self._tokens[pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _expect_token(self) -> Token:
        """Return the current token, or fail if the stream ran out."""
        token = self._current()
        if token is None:
            raise MissingEndError(self._end_range())
        return token

    def _end_range(self) -> SourceRange:
        """Zero-width range just after the last token."""
        if not self._tokens:
            return SourceRange.empty()
        last = self._tokens[-1].range
        return SourceRange(last.end, last.end, last.end_location, last.end_location)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        label = self._try_parse_label()

        token = self._expect_token()
        if token.type != TokenType.UNKNOWN or not self._isa.is_mnemonic(token.value):
            raise StatementError(token.raw, token.range, has_label=label is not None)
        self._advance()

        instruction = Instruction(mnemonic=token.value, range=token.range)
        signatures = self._isa.signatures_for(instruction.mnemonic)
        operand_count = self._isa.operand_count(instruction.mnemonic)

        operands: list[Operand] = []
        if operand_count >= 1:
            first_types = _unique(types[0] for types, _ in signatures)
            operands.append(self._parse_operand(first_types))
        if operand_count == 2:
            self._expect_comma()
            second_types = _unique(
                types[1] for types, _ in signatures if types[0] == operands[0].type
            )
            operands.append(self._parse_operand(second_types))

        instruction.opcode = get_opcode(
            instruction.mnemonic,
            tuple(operand.type for operand in operands),
            self._isa,
        )

        return Statement(
            label=label,
            instruction=instruction,
            operands=operands,
            machine_code=build_machine_code(instruction, operands),
        )

    def _try_parse_label(self) -> Optional[Label]:
        """
        Parse `NAME:` if the next token is a colon.

        Returns the Label, or None if there is no label here.
        """
        following = self._peek(1)
        if following is None or following.type != TokenType.COLON:
            return None

        token = self._validate_label(self._advance())
        self._advance()  # consume colon
        return Label(identifier=token.value, range=token.range)

    def _expect_comma(self) -> None:
        token = self._expect_token()
        if token.type != TokenType.COMMA:
            raise MissingCommaError(token.raw, token.range)
        self._advance()

    # =========================================================================
    # Operand Parsing
    # =========================================================================

    def _parse_operand(self, expected: list[OperandType]) -> Operand:
        """
        Parse one operand, accepting only the `expected` types.

        Raises:
            MissingEndError: If there are no tokens left
            OperandTypeError: If the token is not one of the expected types
        """
        token = self._expect_token()
        operand_type = self._classify_operand(token, expected)
        self._advance()
        return Operand(
            type=operand_type,
            value=self._operand_value(operand_type, token),
            raw_value=token.value,
            raw=token.raw,
            range=token.range,
        )

    def _classify_operand(self, token: Token, expected: list[OperandType]) -> OperandType:
        if token.type == TokenType.DIGITS:
            if OperandType.NUMBER in expected:
                self._validate_number(token)
                return OperandType.NUMBER

        elif token.type == TokenType.REGISTER:
            if OperandType.REGISTER in expected:
                return OperandType.REGISTER

        elif token.type == TokenType.ADDRESS:
            if OperandType.ADDRESS in expected and NUMBER_PATTERN.match(token.value):
                self._validate_number(token)
                return OperandType.ADDRESS
            if OperandType.REGISTER_ADDRESS in expected:
                if self._isa.is_register(token.value):
                    return OperandType.REGISTER_ADDRESS
                raise AddressError(token.raw, token.range)

        elif token.type == TokenType.STRING:
            if OperandType.STRING in expected:
                self._validate_string(token)
                return OperandType.STRING

        elif token.type == TokenType.UNKNOWN:
            if token.raw.startswith("["):
                raise UnterminatedAddressError(token.raw, token.range)
            if token.raw.startswith('"'):
                raise UnterminatedStringError(token.raw, token.range)
            if token.raw.startswith("'"):
                raise SingleQuoteError(token.raw, token.range)
            if OperandType.NUMBER in expected and NUMBER_PATTERN.match(token.value):
                self._validate_number(token)
                return OperandType.NUMBER
            if OperandType.LABEL in expected:
                self._validate_label(token)
                return OperandType.LABEL

        raise OperandTypeError(token.raw, [t.name for t in expected], token.range)

    def _operand_value(self, operand_type: OperandType, token: Token) -> OperandValue:
        if operand_type in (OperandType.NUMBER, OperandType.ADDRESS):
            return hex_to_dec(token.value)
        if operand_type in (OperandType.REGISTER, OperandType.REGISTER_ADDRESS):
            return self._isa.register_index(token.value)
        if operand_type == OperandType.STRING:
            return string_to_ascii(token.value)
        return None

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _validate_label(token: Token) -> Token:
        if not LABEL_PATTERN.match(token.value):
            raise InvalidLabelError(token.value, token.range)
        return token

    @staticmethod
    def _validate_number(token: Token) -> Token:
        if hex_to_dec(token.value) > 0xFF:
            raise InvalidNumberError(token.value, token.range)
        return token

    @staticmethod
    def _validate_string(token: Token) -> Token:
        for index, char in enumerate(token.value):
            if ord(char) > 0xFF:
                raise InvalidStringError(char, index, token.range)
        return token


def parse(tokens: list[Token], instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET) -> list[Statement]:
    """Convenience function: parse `tokens` with a fresh Parser."""
    return Parser(tokens, instruction_set).parse()
