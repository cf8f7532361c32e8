# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the C subset scanner.
#
# Test coverage includes:
#   - Keywords and identifiers
#   - Number formats: decimal, hex (0x), octal (0), binary (0b), floating
#   - String and character literals with escape sequences
#   - Operators, longest match first (<<=, ->, ...)
#   - Comments and position tracking
#   - Error conditions
# =============================================================================

import pytest
from subc_frontend.errors import SourceLocation
from subc_frontend.grammar.lexer import CLexer, CTokenType, KEYWORDS
from subc_frontend.grammar.errors import (
    CSyntaxError,
    InvalidCharacterError,
    UnterminatedStringError,
)


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str) -> list:
    """Tokenize and drop the trailing EOF token."""
    tokens = list(CLexer(source, "test.c").tokenize())
    assert tokens[-1].type == CTokenType.EOF
    return tokens[:-1]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source should produce only EOF token."""
        tokens = list(CLexer("", "test.c").tokenize())
        assert len(tokens) == 1
        assert tokens[0].type == CTokenType.EOF

    def test_whitespace_only(self):
        assert tokenize("   \n\t  \n  ") == []

    def test_comments_skipped(self):
        tokens = tokenize("// comment\n/* more\n comment */ 42")
        assert len(tokens) == 1
        assert tokens[0].value == 42

    def test_unterminated_comment(self):
        with pytest.raises(CSyntaxError, match="unterminated multi-line comment"):
            tokenize("/* never closed")

    def test_keywords(self):
        """Every keyword maps to its own token type."""
        for text, expected_type in KEYWORDS.items():
            tokens = tokenize(text)
            assert tokens[0].type == expected_type
            assert tokens[0].value == text

    def test_identifiers(self):
        for ident in ["main", "_bar", "test123", "integer", "structure"]:
            tokens = tokenize(ident)
            assert tokens[0].type == CTokenType.IDENTIFIER
            assert tokens[0].value == ident

    def test_declaration_start(self):
        tokens = tokenize("static const struct int x")
        assert [t.is_declaration_start() for t in tokens] == [True, True, True, True, False]
        assert [t.is_type_keyword() for t in tokens] == [False, False, True, True, False]


# =============================================================================
# Number Format Tests
# =============================================================================

class TestNumberFormats:
    """Test integer and floating literal formats."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("42", 42),
        ("0x7F", 127),
        ("0XABCD", 0xABCD),
        ("0177", 127),
        ("0b1010", 10),
        ("10u", 10),
        ("10UL", 10),
    ])
    def test_integers(self, text, expected):
        tokens = tokenize(text)
        assert len(tokens) == 1
        assert tokens[0].type == CTokenType.NUMBER
        assert tokens[0].value == expected

    @pytest.mark.parametrize("text,expected", [
        ("1.5", 1.5),
        (".5", 0.5),
        ("2.", 2.0),
        ("1e3", 1000.0),
        ("1.25E-2", 0.0125),
    ])
    def test_floats(self, text, expected):
        tokens = tokenize(text)
        assert tokens[0].type == CTokenType.FLOAT
        assert tokens[0].value == pytest.approx(expected)

    def test_missing_hex_digits(self):
        with pytest.raises(CSyntaxError, match="hexadecimal digits"):
            tokenize("0x")

    def test_missing_exponent_digits(self):
        with pytest.raises(CSyntaxError, match="exponent"):
            tokenize("1e+")

    def test_invalid_octal_digit(self):
        with pytest.raises(CSyntaxError, match="octal"):
            tokenize("089")

    @pytest.mark.parametrize("digit", ["\u00b2", "\u0663", "\uff11"])
    def test_unicode_digit_is_invalid_character(self, digit):
        with pytest.raises(InvalidCharacterError) as exc_info:
            tokenize(f"int x = {digit};")
        assert exc_info.value.char == digit
        assert exc_info.value.location.column == 9


# =============================================================================
# String and Character Literal Tests
# =============================================================================

class TestLiterals:
    """Test string and character literals."""

    def test_simple_string(self):
        tokens = tokenize('"hello world"')
        assert tokens[0].type == CTokenType.STRING
        assert tokens[0].value == "hello world"

    def test_string_escapes(self):
        tokens = tokenize(r'"a\tb\n\"q\"\\\x41"')
        assert tokens[0].value == 'a\tb\n"q"\\A'

    def test_unterminated_string(self):
        with pytest.raises(UnterminatedStringError) as exc_info:
            tokenize('x = "oops\n";')
        assert exc_info.value.location == SourceLocation("test.c", 1, 5)

    def test_char_literal_value_is_code(self):
        tokens = tokenize("'a'")
        assert tokens[0].type == CTokenType.CHAR_LITERAL
        assert tokens[0].value == ord("a")

    def test_char_escape(self):
        assert tokenize(r"'\n'")[0].value == 10
        assert tokenize(r"'\0'")[0].value == 0

    def test_char_too_long(self):
        with pytest.raises(CSyntaxError, match="too long"):
            tokenize("'ab'")

    def test_octal_escapes(self):
        assert tokenize(r"'\012'")[0].value == 10
        assert tokenize(r"'\101'")[0].value == 65
        assert tokenize(r'"\012"')[0].value == "\n"
        assert tokenize(r'"a\0b"')[0].value == "a\x00b"

    def test_empty_char_literal(self):
        with pytest.raises(CSyntaxError, match="empty character literal"):
            tokenize("''")

    def test_unterminated_char(self):
        with pytest.raises(CSyntaxError, match="unterminated character literal"):
            tokenize("'a")


# =============================================================================
# Operator Tests
# =============================================================================

class TestOperators:
    """Test operator scanning with longest match first."""

    @pytest.mark.parametrize("text,expected", [
        ("+", CTokenType.PLUS),
        ("++", CTokenType.INCREMENT),
        ("+=", CTokenType.PLUS_ASSIGN),
        ("-", CTokenType.MINUS),
        ("--", CTokenType.DECREMENT),
        ("-=", CTokenType.MINUS_ASSIGN),
        ("->", CTokenType.ARROW),
        ("*=", CTokenType.STAR_ASSIGN),
        ("/=", CTokenType.SLASH_ASSIGN),
        ("%=", CTokenType.PERCENT_ASSIGN),
        ("&&", CTokenType.AND),
        ("&=", CTokenType.AND_ASSIGN),
        ("||", CTokenType.OR),
        ("|=", CTokenType.OR_ASSIGN),
        ("^=", CTokenType.XOR_ASSIGN),
        ("==", CTokenType.EQ),
        ("!=", CTokenType.NE),
        ("<=", CTokenType.LE),
        (">=", CTokenType.GE),
        ("<<", CTokenType.LSHIFT),
        (">>", CTokenType.RSHIFT),
        ("<<=", CTokenType.LSHIFT_ASSIGN),
        (">>=", CTokenType.RSHIFT_ASSIGN),
        ("...", CTokenType.ELLIPSIS),
        (".", CTokenType.DOT),
        ("~", CTokenType.TILDE),
    ])
    def test_operator(self, text, expected):
        tokens = tokenize(text)
        assert len(tokens) == 1
        assert tokens[0].type == expected
        assert tokens[0].value == text

    def test_member_access_chain(self):
        assert types("p->next.value") == [
            CTokenType.IDENTIFIER,
            CTokenType.ARROW,
            CTokenType.IDENTIFIER,
            CTokenType.DOT,
            CTokenType.IDENTIFIER,
        ]

    def test_invalid_character(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            tokenize("int x = 1 @ 2;")
        assert "invalid character '@'" in str(exc_info.value)
        assert exc_info.value.location.column == 11


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Test line and column tracking."""

    def test_line_and_column(self):
        tokens = tokenize("int x;\n  return x;")
        ret = tokens[3]
        assert ret.type == CTokenType.RETURN
        assert (ret.line, ret.column) == (2, 3)
        assert ret.location == SourceLocation("test.c", 2, 3)

    def test_eof_position(self):
        tokens = list(CLexer("x", "test.c").tokenize())
        assert tokens[-1].type == CTokenType.EOF
        assert tokens[-1].value is None

    def test_repr(self):
        tokens = tokenize("x 42")
        assert repr(tokens[0]) == "Token(IDENTIFIER, 'x', 1:1)"
        assert repr(tokens[1]) == "Token(NUMBER, 42, 1:3)"
