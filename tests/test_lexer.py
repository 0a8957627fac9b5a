# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the sim8 assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Token classification: digits, registers, addresses, strings, unknown
#   - Delimiters (comma, colon)
#   - Whitespace and comment removal
#   - Source positions (offsets, lines, columns)
#   - Termination at END
#   - Unterminated literals falling through to UNKNOWN
# =============================================================================

import pytest
from sim8.assembler.lexer import Lexer, TokenType, Token, tokenize
from sim8.errors import SourceLocation


def types(source: str) -> list:
    """Helper returning just the token types for `source`."""
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces no tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Whitespace is recognised but never returned."""
        assert tokenize("  \t \n\n  ") == []

    def test_comment_only(self):
        """Comments run to the end of the line and are dropped."""
        assert tokenize("; just a comment") == []

    def test_comment_after_instruction(self):
        tokens = tokenize("inc al ; increment")
        assert [t.value for t in tokens] == ["INC", "AL"]

    def test_comma_and_colon(self):
        assert types(",:") == [TokenType.COMMA, TokenType.COLON]

    def test_mnemonic_is_unknown(self):
        """Mnemonics are not special to the lexer."""
        tokens = tokenize("mov")
        assert tokens[0].type == TokenType.UNKNOWN
        assert tokens[0].value == "MOV"
        assert tokens[0].raw == "mov"


# =============================================================================
# Value Token Tests
# =============================================================================

class TestValueTokens:
    """Test digits, registers, addresses and strings."""

    def test_digits(self):
        tokens = tokenize("15")
        assert tokens[0].type == TokenType.DIGITS
        assert tokens[0].value == "15"

    def test_hex_with_letters_is_unknown(self):
        """Hex numbers containing letters are left for the parser."""
        assert types("c0") == [TokenType.UNKNOWN]
        assert types("1f") == [TokenType.UNKNOWN]

    def test_register_case_insensitive(self):
        tokens = tokenize("Al bl CL dL")
        assert [t.type for t in tokens] == [TokenType.REGISTER] * 4
        assert [t.value for t in tokens] == ["AL", "BL", "CL", "DL"]

    def test_register_prefix_is_not_register(self):
        """A word that merely starts with a register name is not one."""
        tokens = tokenize("alpha")
        assert tokens[0].type == TokenType.UNKNOWN
        assert tokens[0].value == "ALPHA"

    def test_address_number(self):
        tokens = tokenize("[c0]")
        assert tokens[0].type == TokenType.ADDRESS
        assert tokens[0].value == "C0"
        assert tokens[0].raw == "[c0]"

    def test_address_register(self):
        tokens = tokenize("[bl]")
        assert tokens[0].type == TokenType.ADDRESS
        assert tokens[0].value == "BL"

    def test_address_followed_by_comma(self):
        assert types("[al], cl") == [TokenType.ADDRESS, TokenType.COMMA, TokenType.REGISTER]

    def test_string_keeps_case(self):
        tokens = tokenize('"Hello World!"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "Hello World!"

    def test_string_with_comma_and_semicolon(self):
        tokens = tokenize('"a,b;c"')
        assert len(tokens) == 1
        assert tokens[0].value == "a,b;c"

    def test_unterminated_address_is_unknown(self):
        tokens = tokenize("[c0\n")
        assert tokens[0].type == TokenType.UNKNOWN
        assert tokens[0].raw == "[c0"

    def test_unterminated_string_is_unknown(self):
        tokens = tokenize('"abc\n')
        assert tokens[0].type == TokenType.UNKNOWN
        assert tokens[0].raw == '"abc'


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Test offsets, line numbers and columns."""

    def test_single_line_positions(self):
        tokens = tokenize("start: mov al, 01")
        columns = [t.location.column for t in tokens]
        assert columns == [0, 5, 7, 11, 13, 15]
        assert all(t.location.line == 1 for t in tokens)

    def test_offsets(self):
        token = tokenize("  mov")[0]
        assert token.range.start == 2
        assert token.range.end == 5
        assert token.range.end_location == SourceLocation(1, 5)

    def test_line_and_column_after_newline(self):
        tokens = tokenize("mov al, 01\n  inc bl")
        inc = tokens[4]
        assert inc.value == "INC"
        assert inc.location == SourceLocation(2, 2)
        assert inc.range.start == 13

    def test_column_after_blank_lines_and_tabs(self):
        tokens = tokenize("nop\n\n\t\tnop")
        assert tokens[1].location == SourceLocation(3, 2)


# =============================================================================
# END Handling Tests
# =============================================================================

class TestEnd:
    """Scanning stops right after END."""

    def test_text_after_end_is_ignored(self):
        tokens = tokenize("nop\nend\nthis is ] not [ code")
        assert [t.value for t in tokens] == ["NOP", "END"]

    def test_end_is_case_insensitive(self):
        assert tokenize("End")[-1].value == "END"

    def test_string_end_stops(self):
        """Any token whose value is END stops scanning, a string included."""
        tokens = tokenize('db "END"\nnop\nend')
        assert [t.value for t in tokens] == ["DB", "END"]
        assert tokens[1].type == TokenType.STRING

    def test_address_end_stops(self):
        tokens = tokenize("mov al, [end]\nnop")
        assert [t.value for t in tokens] == ["MOV", "AL", ",", "END"]
        assert tokens[-1].type == TokenType.ADDRESS


class TestLexerClass:
    """Test the Lexer object interface."""

    def test_tokenize_returns_tokens(self):
        lexer = Lexer("halt\nend")
        tokens = lexer.tokenize()
        assert all(isinstance(t, Token) for t in tokens)
        assert len(tokens) == 2

    def test_repr(self):
        token = tokenize("mov")[0]
        assert repr(token) == "Token(UNKNOWN, 'MOV', 1:0)"
