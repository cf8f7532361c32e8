"""
Grammar Error Hierarchy
=======================

Exceptions raised by the scanner, the grammar model and the parser driver.

Exception Hierarchy
-------------------
GrammarError (base for all grammar errors)
├── CSyntaxError - scanner and parser syntax errors
│   ├── UnterminatedStringError - missing closing quote
│   ├── InvalidCharacterError - unexpected character
│   ├── UnexpectedTokenError - token does not fit the production
│   └── MissingTokenError - required token absent
├── MalformedCompositionError - a node built from children that cannot
│                               form it (sizeof with no operand, a
│                               non-declarator nested in a declarator)
└── UnsupportedConstructError - valid C outside this subset (function
                                pointers, varargs, pointer casts)

Classification misses (a token that is not a member of an operator
family) are not errors at all; the resolver functions return None.

Model constructors raise without a location. The parser driver owns
positions and re-raises with the offending token's location attached
via with_location().
"""

from typing import Optional

from subc_frontend.errors import FrontendError, SourceLocation


# =============================================================================
# Base Grammar Exception
# =============================================================================

class GrammarError(FrontendError):
    """
    Base exception for all grammar errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            test.c:3:9: error: unsupported construct: function pointer
                int (*f)(int);
                    ^
            hint: call the function by name instead
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_location(
        self,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> "GrammarError":
        """
        Attach a source position to an error raised by a model constructor.

        Errors that already carry a location are returned unchanged, so the
        innermost position wins when an error crosses several productions.
        """
        if self.location is None:
            self.location = location
            self.source_line = source_line
            self.args = (self._format_message(),)
        return self


# =============================================================================
# Syntax Errors (Scanner and Parser)
# =============================================================================

class CSyntaxError(GrammarError):
    """
    Syntax error in C source code.

    Examples:
        - Unterminated string literal
        - Missing semicolon
        - Mismatched parentheses
    """
    pass


class UnterminatedStringError(CSyntaxError):
    """Unterminated string literal."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated string literal",
            location=location,
            hint="add closing '\"' to complete the string",
            source_line=source_line,
        )


class InvalidCharacterError(CSyntaxError):
    """Character that cannot start any token of the subset."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class UnexpectedTokenError(CSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(CSyntaxError):
    """Required token (like ';' or ')') not found where expected."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Composition Errors (Grammar Model)
# =============================================================================

class MalformedCompositionError(GrammarError):
    """
    A tree node cannot be built from the given children.

    Raised by node constructors, so a partially valid node is never
    produced. Examples:
        - sizeof with neither a type nor an expression (or with both)
        - a declaration specifier with no type specifier words
        - an array declarator with a negative size
        - something other than a declarator shape nested in a declarator
    """
    pass


class UnsupportedConstructError(GrammarError):
    """
    Valid C that this subset deliberately does not model.

    Kept distinct from syntax errors so the driver can produce an
    actionable diagnostic. Examples:
        - function pointers and calls through expressions
        - varargs parameter lists
        - pointer casts and multi-word cast types
        - specifier combinations such as 'long long'
    """

    def __init__(
        self,
        construct: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.construct = construct
        super().__init__(
            f"unsupported construct: {construct}",
            location=location,
            hint=hint,
            source_line=source_line,
        )
