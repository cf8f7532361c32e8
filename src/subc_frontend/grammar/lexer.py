"""
subc Scanner
============

Turns C subset source text into CToken objects for the parser driver.

The scanner works in one forward pass over the text. At each position it
skips blanks and comments, then dispatches on the first character:

    letter or _     identifier, or keyword when the spelling is reserved
    digit, .digit   integer or floating literal (one regular expression)
    " or '          string or character literal, escapes decoded
    anything else   punctuator, longest spelling first

Only ASCII characters form identifiers and numbers. Any other character
that is not punctuation is an InvalidCharacterError, including Unicode
digits such as superscripts.

Literal values are decoded while scanning:

    0x1F, 0b101, 017, 42     int   (u/U/l/L suffixes dropped)
    1.5, .5, 2., 1e3         float
    'a', '\\n', '\\012'      int   (character code)
    "a\\tb"                  str   (escapes decoded)

>>> from subc_frontend.grammar.lexer import CLexer
>>> for token in CLexer('return x->next;', "test.c").tokenize():
...     print(token)
Token(RETURN, 'return', 1:1)
Token(IDENTIFIER, 'x', 1:8)
Token(ARROW, '->', 1:9)
Token(IDENTIFIER, 'next', 1:11)
Token(SEMICOLON, ';', 1:15)
Token(EOF, 1:16)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import re
import string

from subc_frontend.errors import SourceLocation
from subc_frontend.grammar.errors import (
    CSyntaxError,
    UnterminatedStringError,
    InvalidCharacterError,
)


class CTokenType(Enum):
    """Kinds of token produced by CLexer."""

    EOF = auto()

    IDENTIFIER = auto()
    NUMBER = auto()
    FLOAT = auto()
    STRING = auto()
    CHAR_LITERAL = auto()

    # Reserved words
    VOID = auto()
    CHAR = auto()
    INT = auto()
    LONG = auto()
    DOUBLE = auto()
    SIGNED = auto()
    UNSIGNED = auto()
    STRUCT = auto()
    STATIC = auto()
    CONST = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()
    SIZEOF = auto()

    # Operators; STAR and AMPERSAND double as dereference and address-of
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    INCREMENT = auto()
    DECREMENT = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    AMPERSAND = auto()
    PIPE = auto()
    CARET = auto()
    TILDE = auto()
    LSHIFT = auto()
    RSHIFT = auto()
    ASSIGN = auto()
    PLUS_ASSIGN = auto()
    MINUS_ASSIGN = auto()
    STAR_ASSIGN = auto()
    SLASH_ASSIGN = auto()
    PERCENT_ASSIGN = auto()
    AND_ASSIGN = auto()
    OR_ASSIGN = auto()
    XOR_ASSIGN = auto()
    LSHIFT_ASSIGN = auto()
    RSHIFT_ASSIGN = auto()
    DOT = auto()
    ARROW = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    SEMICOLON = auto()
    COMMA = auto()
    ELLIPSIS = auto()


# Reserved words are spelled exactly as their token type name in lower case
KEYWORDS: dict[str, CTokenType] = {
    token_type.name.lower(): token_type
    for token_type in (
        CTokenType.VOID, CTokenType.CHAR, CTokenType.INT, CTokenType.LONG,
        CTokenType.DOUBLE, CTokenType.SIGNED, CTokenType.UNSIGNED,
        CTokenType.STRUCT, CTokenType.STATIC, CTokenType.CONST,
        CTokenType.IF, CTokenType.ELSE, CTokenType.WHILE, CTokenType.FOR,
        CTokenType.BREAK, CTokenType.CONTINUE, CTokenType.RETURN,
        CTokenType.SIZEOF,
    )
}

PUNCTUATORS: dict[str, CTokenType] = {
    "<<=": CTokenType.LSHIFT_ASSIGN,
    ">>=": CTokenType.RSHIFT_ASSIGN,
    "...": CTokenType.ELLIPSIS,
    "++": CTokenType.INCREMENT,
    "--": CTokenType.DECREMENT,
    "->": CTokenType.ARROW,
    "+=": CTokenType.PLUS_ASSIGN,
    "-=": CTokenType.MINUS_ASSIGN,
    "*=": CTokenType.STAR_ASSIGN,
    "/=": CTokenType.SLASH_ASSIGN,
    "%=": CTokenType.PERCENT_ASSIGN,
    "&=": CTokenType.AND_ASSIGN,
    "|=": CTokenType.OR_ASSIGN,
    "^=": CTokenType.XOR_ASSIGN,
    "==": CTokenType.EQ,
    "!=": CTokenType.NE,
    "<=": CTokenType.LE,
    ">=": CTokenType.GE,
    "&&": CTokenType.AND,
    "||": CTokenType.OR,
    "<<": CTokenType.LSHIFT,
    ">>": CTokenType.RSHIFT,
    "+": CTokenType.PLUS,
    "-": CTokenType.MINUS,
    "*": CTokenType.STAR,
    "/": CTokenType.SLASH,
    "%": CTokenType.PERCENT,
    "<": CTokenType.LT,
    ">": CTokenType.GT,
    "!": CTokenType.NOT,
    "&": CTokenType.AMPERSAND,
    "|": CTokenType.PIPE,
    "^": CTokenType.CARET,
    "~": CTokenType.TILDE,
    "=": CTokenType.ASSIGN,
    ".": CTokenType.DOT,
    "(": CTokenType.LPAREN,
    ")": CTokenType.RPAREN,
    "{": CTokenType.LBRACE,
    "}": CTokenType.RBRACE,
    "[": CTokenType.LBRACKET,
    "]": CTokenType.RBRACKET,
    ";": CTokenType.SEMICOLON,
    ",": CTokenType.COMMA,
}

_TYPE_KEYWORDS = frozenset({
    CTokenType.VOID, CTokenType.CHAR, CTokenType.INT, CTokenType.LONG,
    CTokenType.DOUBLE, CTokenType.SIGNED, CTokenType.UNSIGNED,
    CTokenType.STRUCT,
})


@dataclass(frozen=True)
class CToken:
    """
    One scanned token.

    Attributes:
        type: Token kind
        value: Spelling for words and punctuators, int for integer and
               character literals, float for floating literals, decoded
               text for strings, None for EOF
        line: 1-based line of the first character
        column: 1-based column of the first character
        filename: Source name used in diagnostics
    """
    type: CTokenType
    value: str | int | float | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        position = f"{self.line}:{self.column}"
        if self.value is None:
            return f"Token({self.type.name}, {position})"
        shown = repr(self.value) if isinstance(self.value, str) else str(self.value)
        return f"Token({self.type.name}, {shown}, {position})"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Printable spelling of the token for diagnostics."""
        return self.type.name if self.value is None else str(self.value)

    def is_type_keyword(self) -> bool:
        """True for base type words, struct included."""
        return self.type in _TYPE_KEYWORDS

    def is_declaration_start(self) -> bool:
        """True if a declaration may begin with this token."""
        return self.is_type_keyword() or self.type in (CTokenType.STATIC, CTokenType.CONST)


class CLexer:
    """
    Scanner for the C subset.

    Usage:
        tokens = list(CLexer(source_text, "prog.c").tokenize())

    The token stream always ends with a single EOF token. Scanning stops
    at the first error.
    """

    WORD_START = frozenset(string.ascii_letters + "_")
    WORD_CHARS = WORD_START | frozenset(string.digits)
    DIGITS = frozenset(string.digits)
    HEX_DIGITS = frozenset(string.hexdigits)
    OCTAL_DIGITS = frozenset(string.octdigits)
    BLANKS = frozenset(" \t\n\r\f\v")

    NUMBER_PATTERN = re.compile(
        r"""
        0[xX](?P<hex>[0-9A-Fa-f]*)
      | 0[bB](?P<binary>[01]*)
      | (?P<float>
            (?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]*)?
          | [0-9]+[eE][+-]?[0-9]*
        )
      | (?P<integer>[0-9]+)
        """,
        re.VERBOSE,
    )

    INTEGER_SUFFIX = frozenset("uUlL")

    # Single-character escapes; numeric ones (\0, \012, \x41) are decoded separately
    SIMPLE_ESCAPES = {
        "n": "\n",
        "t": "\t",
        "r": "\r",
        "a": "\a",
        "b": "\b",
        "f": "\f",
        "v": "\v",
        "\\": "\\",
        "'": "'",
        '"': '"',
        "?": "?",
    }

    def __init__(self, source: str, filename: str = "<input>", line_number: int = 1):
        self.source = source
        self.filename = filename
        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start = 0

    def tokenize(self) -> Iterator[CToken]:
        """
        Yield tokens up to and including EOF.

        Raises:
            CSyntaxError: On malformed literals, unterminated comments or
                characters outside the subset
        """
        while self._skip_blanks_and_comments():
            yield self._next_token()
        yield CToken(CTokenType.EOF, None, self._line, self._column, self.filename)

    # -------------------------------------------------------------------------
    # Cursor
    # -------------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        """Character at the cursor plus offset, or "" past the end."""
        return self.source[self._pos + offset:self._pos + offset + 1]

    def _advance(self) -> str:
        char = self._peek()
        if not char:
            return char
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start = self._pos
        else:
            self._column += 1
        return char

    def _take(self, alphabet: frozenset, limit: Optional[int] = None) -> str:
        """Consume characters from alphabet, at most limit of them."""
        start = self._pos
        while self._peek() in alphabet and (limit is None or self._pos - start < limit):
            self._advance()
        return self.source[start:self._pos]

    def _here(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line, self._column)

    def _source_line(self) -> str:
        end = self.source.find("\n", self._line_start)
        return self.source[self._line_start:end if end != -1 else len(self.source)]

    def _error(self, message: str, location: Optional[SourceLocation] = None,
               hint: Optional[str] = None) -> CSyntaxError:
        return CSyntaxError(
            message, location or self._here(), hint=hint, source_line=self._source_line()
        )

    # -------------------------------------------------------------------------
    # Blanks and comments
    # -------------------------------------------------------------------------

    def _skip_blanks_and_comments(self) -> bool:
        """Skip to the next token; False once the input is exhausted."""
        while True:
            char = self._peek()
            if char in self.BLANKS:
                self._advance()
            elif self.source.startswith("//", self._pos):
                while self._peek() not in ("", "\n"):
                    self._advance()
            elif self.source.startswith("/*", self._pos):
                self._skip_block_comment()
            else:
                return bool(char)

    def _skip_block_comment(self) -> None:
        opened_at = self._here()
        end = self.source.find("*/", self._pos + 2)
        if end == -1:
            raise CSyntaxError(
                "unterminated multi-line comment",
                opened_at,
                hint="add closing */ to terminate the comment",
            )
        while self._pos < end + 2:
            self._advance()

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def _next_token(self) -> CToken:
        line, column = self._line, self._column
        char = self._peek()

        if char in self.WORD_START:
            word = self._take(self.WORD_CHARS)
            token_type = KEYWORDS.get(word, CTokenType.IDENTIFIER)
            value: str | int | float = word
        elif char in self.DIGITS or (char == "." and self._peek(1) in self.DIGITS):
            token_type, value = self._scan_number()
        elif char == '"':
            token_type, value = CTokenType.STRING, self._scan_quoted('"')
        elif char == "'":
            token_type, value = CTokenType.CHAR_LITERAL, self._scan_char()
        else:
            token_type, value = self._scan_punctuator()

        return CToken(token_type, value, line, column, self.filename)

    def _scan_number(self) -> tuple[CTokenType, int | float]:
        match = self.NUMBER_PATTERN.match(self.source, self._pos)
        text = match.group(0)
        for _ in text:
            self._advance()

        if match.group("float") is not None:
            if text[-1] in "eE+-":
                raise self._error("expected exponent digits in floating literal")
            return CTokenType.FLOAT, float(text)

        if match.group("hex") is not None:
            digits, base = match.group("hex"), 16
            if not digits:
                raise self._error("expected hexadecimal digits after '0x'")
        elif match.group("binary") is not None:
            digits, base = match.group("binary"), 2
            if not digits:
                raise self._error("expected binary digits after '0b'")
        elif len(text) > 1 and text[0] == "0":
            digits, base = text, 8
            if not set(digits) <= self.OCTAL_DIGITS:
                raise self._error(f"invalid digit in octal literal '{text}'")
        else:
            digits, base = text, 10

        self._take(self.INTEGER_SUFFIX)
        return CTokenType.NUMBER, int(digits, base)

    def _scan_quoted(self, quote: str) -> str:
        """Read a quoted literal starting at the opening quote; return its decoded text."""
        opened_at = self._here()
        self._advance()
        chars = []
        while True:
            char = self._peek()
            if char == quote:
                self._advance()
                return "".join(chars)
            if char in ("", "\n"):
                if quote == "'":
                    raise CSyntaxError(
                        "unterminated character literal",
                        opened_at,
                        hint="add closing ' to complete the character literal",
                    )
                raise UnterminatedStringError(opened_at, self._source_line() if char else None)
            self._advance()
            chars.append(self._scan_escape() if char == "\\" else char)

    def _scan_char(self) -> int:
        opened_at = self._here()
        text = self._scan_quoted("'")
        if len(text) != 1:
            raise self._error(
                "empty character literal" if not text
                else "character literal too long or missing closing quote",
                opened_at,
                hint="character literals can only contain a single character",
            )
        return ord(text)

    def _scan_escape(self) -> str:
        """Decode the escape whose backslash has just been consumed."""
        char = self._advance()
        if not char:
            raise self._error("unexpected end of input in escape sequence")
        if char in self.SIMPLE_ESCAPES:
            return self.SIMPLE_ESCAPES[char]
        if char == "x":
            digits = self._take(self.HEX_DIGITS, 2)
            if not digits:
                raise self._error("expected hexadecimal digits after '\\x'")
            return chr(int(digits, 16))
        if char in self.OCTAL_DIGITS:
            return chr(int(char + self._take(self.OCTAL_DIGITS, 2), 8) & 0xFF)
        return char

    def _scan_punctuator(self) -> tuple[CTokenType, str]:
        for length in (3, 2, 1):
            spelling = self.source[self._pos:self._pos + length]
            if len(spelling) == length and spelling in PUNCTUATORS:
                for _ in spelling:
                    self._advance()
                return PUNCTUATORS[spelling], spelling
        raise InvalidCharacterError(self._peek(), self._here(), self._source_line())
