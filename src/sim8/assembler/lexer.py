"""
Assembly Language Lexer
=======================

This module implements the lexer (tokenizer) for the teaching CPU's
assembly language. It converts source text into the list of tokens that
the parser consumes.

Token Types
-----------
- COMMA: ,
- COLON: : (ends a label declaration)
- DIGITS: a run of decimal digits (decoded as hex by the parser)
- REGISTER: AL, BL, CL or DL
- ADDRESS: bracketed text such as [C0] or [BL]
- STRING: double-quoted text on a single line
- UNKNOWN: anything else (mnemonics, labels, hex numbers like C0)

WHITESPACE and COMMENT tokens are recognised but never returned.

Matching
--------
At each position the matchers are tried in a fixed order and the first
one that matches wins. A bracket or quote that never closes falls
through to UNKNOWN; the parser reports it with a dedicated error.

Scanning stops right after the first token whose value is END, whatever
its type (so `"END"` and `[END]` stop it too): everything that follows
in the source is ignored.

Example
-------
>>> from sim8.assembler.lexer import tokenize
>>> for token in tokenize("start: mov al, 01"):
...     print(token)
Token(UNKNOWN, 'START', 1:0)
Token(COLON, ':', 1:5)
Token(UNKNOWN, 'MOV', 1:7)
Token(REGISTER, 'AL', 1:11)
Token(COMMA, ',', 1:13)
Token(DIGITS, '01', 1:15)
"""

from dataclasses import dataclass
from enum import Enum, auto
import logging
import re

from sim8.errors import AssemblySyntaxError, SourceLocation, SourceRange
from sim8.isa import DEFAULT_INSTRUCTION_SET, InstructionSet
from sim8.utils import trim_brackets_and_quotes

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Lexical categories of the assembly language."""

    # Discarded before parsing
    WHITESPACE = auto()
    COMMENT = auto()

    # Delimiters
    COMMA = auto()
    COLON = auto()

    # Values
    DIGITS = auto()
    REGISTER = auto()
    ADDRESS = auto()
    STRING = auto()
    UNKNOWN = auto()


# Token types whose value is case-insensitive
_UPPERCASED = frozenset({TokenType.REGISTER, TokenType.ADDRESS, TokenType.UNKNOWN})

_DISCARDED = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Normalised text (brackets/quotes trimmed, uppercased where
            the language is case-insensitive)
        raw: The text exactly as written
        range: Offsets and line/column span in the source
    """
    type: TokenType
    value: str
    raw: str
    range: SourceRange

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.range.start_location})"

    @property
    def location(self) -> SourceLocation:
        return self.range.start_location


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes assembly source code.

    Usage:
        lexer = Lexer(source_text)
        tokens = lexer.tokenize()

    Attributes:
        source: The source code being tokenized
        instruction_set: Supplies register names and the END mnemonic
    """

    def __init__(self, source: str, instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET):
        self.source = source
        self.instruction_set = instruction_set

        self._pos = 0
        self._line = 1
        self._column = 0

        registers = instruction_set.register_pattern()
        self._matchers: list[tuple[TokenType, re.Pattern[str]]] = [
            (TokenType.WHITESPACE, re.compile(r"\s+")),
            (TokenType.COMMENT, re.compile(r";.*")),
            (TokenType.COMMA, re.compile(r",")),
            (TokenType.COLON, re.compile(r":")),
            (TokenType.DIGITS, re.compile(r"[0-9]+\b")),
            (TokenType.REGISTER, re.compile(rf"(?:{registers})\b", re.IGNORECASE)),
            (TokenType.ADDRESS, re.compile(r"\[\S*?\](?=[\s;,]|$)")),
            (TokenType.STRING, re.compile(r'"[^\r\n]*?"(?=[\s;,]|$)')),
            (TokenType.UNKNOWN, re.compile(r"[^\s;,:]+")),
        ]

    def tokenize(self) -> list[Token]:
        """
        Tokenize the whole source.

        Returns:
            Tokens in source order, without whitespace or comments

        Raises:
            AssemblySyntaxError: If no matcher accepts the current character
        """
        tokens: list[Token] = []
        terminator = self.instruction_set.terminator

        while self._pos < len(self.source):
            token = self._scan_token()
            if token.type in _DISCARDED:
                continue
            tokens.append(token)
            if token.value == terminator:
                break

        logger.debug(f"Tokenized {len(tokens)} tokens from {self._line} lines")
        return tokens

    def _scan_token(self) -> Token:
        for token_type, pattern in self._matchers:
            match = pattern.match(self.source, self._pos)
            if match is not None:
                return self._make_token(token_type, match.group())

        raise AssemblySyntaxError(
            f"unexpected character '{self.source[self._pos]}'",
            SourceRange.empty(self._pos, self._line, self._column),
        )

    def _make_token(self, token_type: TokenType, raw: str) -> Token:
        """Create a token for `raw` at the current position and advance past it."""
        start = self._pos
        start_location = SourceLocation(self._line, self._column)

        self._pos += len(raw)
        newlines = raw.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(raw) - raw.rfind("\n") - 1
        else:
            self._column += len(raw)
        end_location = SourceLocation(self._line, self._column)

        value = trim_brackets_and_quotes(raw)
        if token_type in _UPPERCASED:
            value = value.upper()

        return Token(
            type=token_type,
            value=value,
            raw=raw,
            range=SourceRange(start, self._pos, start_location, end_location),
        )


def tokenize(source: str, instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET) -> list[Token]:
    """Convenience function: tokenize `source` with a fresh Lexer."""
    return Lexer(source, instruction_set).tokenize()
