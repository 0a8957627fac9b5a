"""
Byte and text helpers shared by the assembler and its front ends.
"""

import re

_BRACKETS_OR_QUOTES = re.compile(r'^\[(.*)\]$|^"(.*)"$', re.DOTALL)


def sign8(unsigned: int) -> int:
    """Interpret an unsigned byte as a two's-complement signed value."""
    return unsigned - 0x100 if unsigned >= 0x80 else unsigned


def unsign8(signed: int) -> int:
    """Encode a signed value in -128..127 as its unsigned byte."""
    return signed + 0x100 if signed < 0 else signed


def hex_to_dec(text: str) -> int:
    return int(text, 16)


def dec_to_hex(value: int) -> str:
    """Two-digit uppercase hex, as shown in listings and memory dumps."""
    return f"{value:02X}"


def string_to_ascii(text: str) -> tuple[int, ...]:
    return tuple(ord(char) for char in text)


def trim_brackets_and_quotes(text: str) -> str:
    """Strip one pair of enclosing [] or "" if present."""
    match = _BRACKETS_OR_QUOTES.match(text)
    if match is None:
        return text
    return match.group(1) if match.group(1) is not None else match.group(2)
